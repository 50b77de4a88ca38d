"""Speech backend protocol.

Defines the interface for speech synthesis capabilities. A backend speaks
one utterance at a time and reports completion through on_done.
"""

from collections.abc import Callable
from typing import Protocol


class SpeechBackend(Protocol):
    """Interface for text-to-speech output."""

    @property
    def is_available(self) -> bool:
        """True if the backend can speak on this host."""
        ...

    def speak(
        self,
        text: str,
        rate: float,
        pitch: float,
        volume: float,
        on_done: Callable[[], None],
    ) -> None:
        """Begin speaking text.

        Args:
            text: Text to speak
            rate: Speaking rate multiplier (1.0 = normal)
            pitch: Pitch multiplier (1.0 = normal)
            volume: Volume (0.0 to 1.0)
            on_done: Called on the loop when synthesis finishes. Backends may
                     skip it for cancelled utterances.
        """
        ...

    def cancel(self) -> None:
        """Stop the utterance currently being spoken, if any."""
        ...


__all__ = ["SpeechBackend"]
