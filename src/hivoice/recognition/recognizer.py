"""Recognizer protocol and data classes.

Defines the narrow capability interface the speech input controller
drives. A recognizer reports everything through a RecognitionListener;
start() and stop() are requests that the recognizer acknowledges later
with session-start / session-end events.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


@dataclass(frozen=True)
class Utterance:
    """One recognition result.

    Attributes:
        text: Transcript as produced by the recognizer
        confidence: Recognition confidence (0.0 to 1.0)
        is_final: True if this is a finalized segment
    """

    text: str
    confidence: float = 1.0
    is_final: bool = True


class RecognitionErrorCode(Enum):
    """Error codes a recognizer can report."""

    NETWORK = "network"
    NOT_ALLOWED = "not-allowed"
    NO_SPEECH = "no-speech"
    ABORTED = "aborted"
    OTHER = "other"

    @classmethod
    def from_code(cls, code: str) -> "RecognitionErrorCode":
        """Map a raw error string onto a known code.

        Unrecognized strings (e.g. "audio-capture") map to OTHER.
        """
        try:
            return cls(code)
        except ValueError:
            return cls.OTHER


@dataclass
class RecognizerSettings:
    """Settings applied to a recognizer before it starts."""

    language: str = "en-US"
    continuous: bool = True
    interim_results: bool = True


class RecognitionListener(Protocol):
    """Receiver of recognizer events."""

    def on_session_start(self) -> None:
        """The recognizer has begun capturing."""
        ...

    def on_session_end(self) -> None:
        """The recognizer session ended (requested or spontaneous)."""
        ...

    def on_result(self, utterance: Utterance) -> None:
        """A recognition result is available."""
        ...

    def on_error(self, code: RecognitionErrorCode) -> None:
        """The recognizer reported an error. A session end usually follows."""
        ...


class Recognizer(Protocol):
    """Interface for a speech recognition capability."""

    @property
    def is_available(self) -> bool:
        """True if recognition is supported on this host."""
        ...

    def configure(self, settings: RecognizerSettings) -> None:
        """Apply settings (language, continuous, interim results)."""
        ...

    def attach(self, listener: RecognitionListener) -> None:
        """Set the listener that receives all events."""
        ...

    def start(self) -> None:
        """Request a recognition session.

        Raises:
            RecognizerStateError: If a session is already running
        """
        ...

    def stop(self) -> None:
        """Request the current session to end."""
        ...


__all__ = [
    "RecognitionErrorCode",
    "RecognitionListener",
    "Recognizer",
    "RecognizerSettings",
    "Utterance",
]
