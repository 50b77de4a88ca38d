"""Configuration module for hivoice.

This module provides configuration dataclasses, loading and profile
management.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


@dataclass
class WakeWordConfig:
    """Wake word listening and recognizer retry configuration.

    The delays are fixed constants per path, not a backoff curve.
    """

    phrase: str = "hi voice"
    language: str = "en-US"
    origin: str = "http://localhost"
    max_retries: int = 3
    restart_delay: float = 1.0
    no_speech_delay: float = 1.0
    network_retry_delay: float = 3.0
    unknown_retry_delay: float = 2.0
    acknowledgement: str = "Hello! I'm listening. How can I help you with your tasks?"


@dataclass
class SpeechConfig:
    """Speech output configuration."""

    backend: str = "auto"
    voice: str | None = None
    rate: float = 0.9
    pitch: float = 1.0
    volume: float = 0.8


@dataclass
class DialogueConfig:
    """Voice task-creation dialogue configuration."""

    question_delay: float = 0.5
    resume_delay: float = 2.0
    cancel_resume_delay: float = 1.0
    default_priority: str = "medium"
    default_reminder_hour: int = 9


@dataclass
class ReminderConfig:
    """Reminder scheduling configuration."""

    delivery_mode: str = "both"
    suggestion_hour: int = 9


@dataclass
class StorageConfig:
    """Reminder persistence configuration."""

    backend: str = "json"
    path: str = "~/.hivoice/reminders.json"
    mongodb_uri: str = "mongodb://localhost:27017"
    database: str = "hivoice"
    collection: str = "reminders"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"


@dataclass
class TestingConfig:
    """Testing configuration."""

    mock_capabilities: bool = False


@dataclass
class HiVoiceConfig:
    """Main hivoice configuration."""

    wake_word: WakeWordConfig = field(default_factory=WakeWordConfig)
    speech: SpeechConfig = field(default_factory=SpeechConfig)
    dialogue: DialogueConfig = field(default_factory=DialogueConfig)
    reminders: ReminderConfig = field(default_factory=ReminderConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    testing: TestingConfig = field(default_factory=TestingConfig)


class ConfigLoader(Protocol):
    """Protocol for configuration loading."""

    def load(self, path: Path) -> HiVoiceConfig:
        """Load configuration from file path."""
        ...

    def load_profile(self, profile: str) -> HiVoiceConfig:
        """Load configuration by profile name (dev, prod, test)."""
        ...

    def get_config_dir(self) -> Path:
        """Get the configuration directory path."""
        ...


__all__ = [
    "ConfigLoader",
    "DialogueConfig",
    "HiVoiceConfig",
    "LoggingConfig",
    "ReminderConfig",
    "SpeechConfig",
    "StorageConfig",
    "TestingConfig",
    "WakeWordConfig",
]
