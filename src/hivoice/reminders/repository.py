"""Reminder persistence.

The reminder set is stored as an ordered array of records and is
reloaded and re-written wholesale on every mutation.
"""

import json
import logging
from pathlib import Path
from typing import Protocol

from .models import Reminder

logger = logging.getLogger(__name__)

FILE_VERSION = 1


class ReminderRepository(Protocol):
    """Protocol for reminder set persistence."""

    def load(self) -> list[Reminder]:
        """Load the persisted reminder set, in stored order."""
        ...

    def save(self, reminders: list[Reminder]) -> None:
        """Replace the persisted reminder set."""
        ...


class InMemoryReminderRepository:
    """Repository that keeps records in memory.

    Records are stored as dicts so loading always yields fresh objects,
    the same as a durable store.
    """

    def __init__(self, records: list[dict] | None = None) -> None:
        self._records: list[dict] = list(records or [])
        self.save_count = 0

    @property
    def records(self) -> list[dict]:
        """Get a copy of the stored records."""
        return [dict(r) for r in self._records]

    def load(self) -> list[Reminder]:
        return [Reminder.from_dict(r) for r in self._records]

    def save(self, reminders: list[Reminder]) -> None:
        self._records = [r.to_dict() for r in reminders]
        self.save_count += 1


class JSONFileReminderRepository:
    """Repository backed by a versioned JSON file."""

    def __init__(self, path: Path | str) -> None:
        """Initialize the repository.

        Args:
            path: Path to the JSON file. "~" is expanded.
        """
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        """Get the file path."""
        return self._path

    def save(self, reminders: list[Reminder]) -> None:
        """Save reminders to JSON file."""
        try:
            # Ensure parent directory exists
            self._path.parent.mkdir(parents=True, exist_ok=True)

            data = {
                "version": FILE_VERSION,
                "reminders": [r.to_dict() for r in reminders],
            }

            with open(self._path, "w") as f:
                json.dump(data, f, indent=2)

            logger.debug(f"Saved {len(reminders)} reminders to {self._path}")

        except OSError as e:
            logger.error(f"Failed to save reminders: {e}")

    def load(self) -> list[Reminder]:
        """Load reminders from JSON file.

        Invalid records are skipped; an unreadable file yields an empty set.
        """
        if not self._path.exists():
            return []

        try:
            with open(self._path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in reminders file: {e}")
            return []
        except OSError as e:
            logger.error(f"Failed to load reminders: {e}")
            return []

        version = data.get("version", FILE_VERSION)
        if version != FILE_VERSION:
            logger.warning(f"Unknown reminders file version: {version}")

        reminders = []
        for item in data.get("reminders", []):
            try:
                reminders.append(Reminder.from_dict(item))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping invalid reminder: {e}")

        logger.info(f"Loaded {len(reminders)} reminders from {self._path}")
        return reminders


__all__ = [
    "FILE_VERSION",
    "InMemoryReminderRepository",
    "JSONFileReminderRepository",
    "ReminderRepository",
]
