"""YAML configuration loader with inheritance support.

Supports:
- Loading YAML config files
- Config inheritance via 'extends' key
- Deep merging of nested config
"""

from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from ..errors import ConfigError
from . import (
    DialogueConfig,
    HiVoiceConfig,
    LoggingConfig,
    ReminderConfig,
    SpeechConfig,
    StorageConfig,
    TestingConfig,
    WakeWordConfig,
)

VALID_DELIVERY_MODES = ("notification", "voice", "both")
VALID_STORAGE_BACKENDS = ("memory", "json", "mongodb")
VALID_PRIORITIES = ("low", "medium", "high")


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Values from override take precedence. Nested dicts are merged recursively.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_with_inheritance(path: Path) -> dict[str, Any]:
    """Load YAML file with inheritance support.

    If the file contains an 'extends' key, the base config is loaded first
    and merged with the current config.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        try:
            config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if "extends" in config:
        base_name = config.pop("extends")
        base_path = path.parent / base_name
        base_config = load_yaml_with_inheritance(base_path)
        config = deep_merge(base_config, config)

    return config


def _build_section(cls: type, name: str, data: dict[str, Any]) -> Any:
    """Build a config dataclass, rejecting unknown keys."""
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown keys in '{name}' section: {', '.join(sorted(unknown))}")
    return cls(**data)


def dict_to_config(data: dict[str, Any]) -> HiVoiceConfig:
    """Convert raw dict to typed HiVoiceConfig dataclass."""
    root = data.get("hivoice", {}) or {}

    # YAML sections may be present but empty (None)
    def safe_get(key: str) -> dict[str, Any]:
        value = root.get(key, {})
        return value if value is not None else {}

    config = HiVoiceConfig(
        wake_word=_build_section(WakeWordConfig, "wake_word", safe_get("wake_word")),
        speech=_build_section(SpeechConfig, "speech", safe_get("speech")),
        dialogue=_build_section(DialogueConfig, "dialogue", safe_get("dialogue")),
        reminders=_build_section(ReminderConfig, "reminders", safe_get("reminders")),
        storage=_build_section(StorageConfig, "storage", safe_get("storage")),
        logging=_build_section(LoggingConfig, "logging", safe_get("logging")),
        testing=_build_section(TestingConfig, "testing", safe_get("testing")),
    )
    validate_config(config)
    return config


def validate_config(config: HiVoiceConfig) -> None:
    """Check value ranges that dataclass typing cannot express.

    Raises:
        ConfigError: If any value is out of range
    """
    if not config.wake_word.phrase.strip():
        raise ConfigError("wake_word.phrase must not be empty")
    if config.wake_word.max_retries < 1:
        raise ConfigError("wake_word.max_retries must be at least 1")
    if config.reminders.delivery_mode not in VALID_DELIVERY_MODES:
        raise ConfigError(
            f"reminders.delivery_mode must be one of {VALID_DELIVERY_MODES}, "
            f"got '{config.reminders.delivery_mode}'"
        )
    if config.storage.backend not in VALID_STORAGE_BACKENDS:
        raise ConfigError(
            f"storage.backend must be one of {VALID_STORAGE_BACKENDS}, "
            f"got '{config.storage.backend}'"
        )
    if config.dialogue.default_priority not in VALID_PRIORITIES:
        raise ConfigError(f"dialogue.default_priority must be one of {VALID_PRIORITIES}")


class YAMLConfigLoader:
    """YAML configuration loader implementation."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize loader with optional config directory.

        Args:
            config_dir: Directory containing config files.
                        Defaults to 'config' relative to project root.
        """
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent.parent / "config"
        self._config_dir = config_dir

    def load(self, path: Path) -> HiVoiceConfig:
        """Load configuration from file path.

        Args:
            path: Path to YAML config file

        Returns:
            Parsed HiVoiceConfig
        """
        raw_config = load_yaml_with_inheritance(path)
        return dict_to_config(raw_config)

    def load_profile(self, profile: str) -> HiVoiceConfig:
        """Load configuration by profile name.

        Args:
            profile: Profile name (e.g., 'dev', 'prod')

        Returns:
            Parsed HiVoiceConfig for the profile
        """
        config_path = self._config_dir / f"{profile}.yaml"
        return self.load(config_path)

    def get_config_dir(self) -> Path:
        """Get the configuration directory path."""
        return self._config_dir


def load_config(path: str | Path | None = None, profile: str | None = None) -> HiVoiceConfig:
    """Load hivoice configuration.

    Args:
        path: Direct path to config file (takes precedence)
        profile: Profile name ('dev', 'prod', 'test') if path not given

    Returns:
        Parsed HiVoiceConfig

    Examples:
        >>> config = load_config(profile="dev")
        >>> config = load_config(path="/path/to/config.yaml")
    """
    loader = YAMLConfigLoader()

    if path is not None:
        return loader.load(Path(path))
    elif profile is not None:
        return loader.load_profile(profile)
    else:
        return loader.load_profile("dev")


__all__ = [
    "YAMLConfigLoader",
    "deep_merge",
    "dict_to_config",
    "load_config",
    "load_yaml_with_inheritance",
    "validate_config",
]
