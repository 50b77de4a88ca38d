"""Exception hierarchy for hivoice.

Capability-level failures (recognizer errors, synthesis hiccups) are
absorbed by the controllers and never raised to the application. These
exceptions cover programmer and configuration errors at the API boundary.
"""


class HiVoiceError(Exception):
    """Base class for all hivoice errors."""


class ConfigError(HiVoiceError):
    """Raised when a configuration file or value is invalid."""


class RecognizerStateError(HiVoiceError):
    """Raised by a recognizer when start/stop is called in an illegal state.

    Mirrors the "already started" condition reported by browser-style
    speech recognizers.
    """


class ReminderNotFoundError(HiVoiceError):
    """Raised when an operation targets a reminder id that does not exist."""


__all__ = [
    "ConfigError",
    "HiVoiceError",
    "RecognizerStateError",
    "ReminderNotFoundError",
]
