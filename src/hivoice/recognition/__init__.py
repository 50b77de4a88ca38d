"""Speech recognition capability for hivoice.

Provides the recognizer interface plus mock and console implementations.
"""

from typing import TYPE_CHECKING

from .console import ConsoleRecognizer
from .mock import MockRecognizer
from .recognizer import (
    RecognitionErrorCode,
    RecognitionListener,
    Recognizer,
    RecognizerSettings,
    Utterance,
)

if TYPE_CHECKING:
    from ..clock import Clock


def create_recognizer(clock: "Clock", use_mock: bool = False) -> Recognizer:
    """Create a recognizer instance.

    Args:
        clock: Loop that receives recognizer events
        use_mock: If True, return mock implementation for testing

    Returns:
        Recognizer implementation
    """
    if use_mock:
        return MockRecognizer()
    return ConsoleRecognizer(clock)


__all__ = [
    "ConsoleRecognizer",
    "MockRecognizer",
    "RecognitionErrorCode",
    "RecognitionListener",
    "Recognizer",
    "RecognizerSettings",
    "Utterance",
    "create_recognizer",
]
