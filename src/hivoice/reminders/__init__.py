"""Task reminders for hivoice.

Provides the reminder scheduler and persistence backends:
- memory: in-process only (tests)
- json: versioned JSON file (default)
- mongodb: MongoDB collection (HIVOICE_MONGODB_URI overrides the URI)
"""

import logging
import os
from typing import TYPE_CHECKING

from ..errors import ConfigError
from .models import DeliveryMode, Reminder
from .repository import (
    InMemoryReminderRepository,
    JSONFileReminderRepository,
    ReminderRepository,
)
from .scheduler import ReminderScheduler, suggest_reminder_times

if TYPE_CHECKING:
    from ..config import StorageConfig

logger = logging.getLogger(__name__)


def create_reminder_repository(
    config: "StorageConfig | None" = None,
    use_memory: bool = False,
) -> ReminderRepository:
    """Create the reminder repository for the configured backend.

    Args:
        config: Storage configuration (optional)
        use_memory: If True, force the in-memory repository for testing

    Returns:
        ReminderRepository implementation

    Raises:
        ConfigError: If the backend name is unknown
    """
    backend = config.backend if config is not None else "json"

    if use_memory or backend == "memory":
        logger.info("Reminders: Using InMemoryReminderRepository")
        return InMemoryReminderRepository()

    if backend == "json":
        path = config.path if config is not None else "~/.hivoice/reminders.json"
        repository = JSONFileReminderRepository(path)
        logger.info(f"Reminders: Using JSONFileReminderRepository ({repository.path})")
        return repository

    if backend == "mongodb" and config is not None:
        from .mongo import MongoReminderRepository

        logger.info(f"Reminders: Using MongoReminderRepository ({config.database}.{config.collection})")
        return MongoReminderRepository.connect(
            uri=os.environ.get("HIVOICE_MONGODB_URI", config.mongodb_uri),
            database=config.database,
            collection=config.collection,
        )

    raise ConfigError(f"Unknown storage backend: {backend}")


__all__ = [
    "DeliveryMode",
    "InMemoryReminderRepository",
    "JSONFileReminderRepository",
    "Reminder",
    "ReminderRepository",
    "ReminderScheduler",
    "create_reminder_repository",
    "suggest_reminder_times",
]
