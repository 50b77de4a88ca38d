"""Voice input and output controllers for hivoice."""

from .input import DISABLE_MESSAGES, SpeechInputController
from .output import SpeechOutputController
from .session import (
    DisableReason,
    ErrorAction,
    ErrorKind,
    ListeningState,
    RecognitionSession,
    classify_error,
    is_secure_origin,
)

__all__ = [
    "DISABLE_MESSAGES",
    "DisableReason",
    "ErrorAction",
    "ErrorKind",
    "ListeningState",
    "RecognitionSession",
    "SpeechInputController",
    "SpeechOutputController",
    "classify_error",
    "is_secure_origin",
]
