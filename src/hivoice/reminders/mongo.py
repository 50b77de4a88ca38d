"""MongoDB reminder repository.

Stores one document per reminder, keyed by reminder id, with a position
field so the set reloads in its persisted order.
"""

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from pymongo import ASCENDING, MongoClient, ReplaceOne
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from .models import Reminder

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_on_connection_failure(
    max_retries: int = 3,
    base_delay: float = 0.5,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator for exponential backoff retry on connection failures.

    Args:
        max_retries: Maximum number of attempts.
        base_delay: Base delay in seconds (doubles each retry).

    Returns:
        Decorated function with retry logic.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                    if attempt == max_retries - 1:
                        logger.error("Connection failed after %d attempts: %s", max_retries, e)
                        raise
                    delay = base_delay * (2**attempt)
                    logger.warning(
                        "Connection failed (attempt %d/%d), retrying in %.1fs: %s",
                        attempt + 1,
                        max_retries,
                        delay,
                        e,
                    )
                    time.sleep(delay)
            raise RuntimeError("Unexpected retry loop exit")

        return wrapper

    return decorator


class MongoReminderRepository:
    """Repository backed by a MongoDB collection."""

    def __init__(self, collection: Collection[dict[str, Any]]) -> None:
        """Initialize repository with MongoDB collection.

        Args:
            collection: MongoDB collection for reminders.
        """
        self._collection = collection
        self._ensure_indexes()

    @classmethod
    def connect(
        cls,
        uri: str = "mongodb://localhost:27017",
        database: str = "hivoice",
        collection: str = "reminders",
        server_selection_timeout_ms: int = 5000,
    ) -> "MongoReminderRepository":
        """Connect to MongoDB and return a repository for the collection.

        Raises:
            ConnectionFailure: If the server cannot be reached.
        """
        client: MongoClient[dict[str, Any]] = MongoClient(
            uri, serverSelectionTimeoutMS=server_selection_timeout_ms
        )
        client.admin.command("ping")
        logger.info("Connected to MongoDB at %s", uri)
        return cls(client[database][collection])

    def _ensure_indexes(self) -> None:
        """Create indexes for efficient queries."""
        self._collection.create_index("id", unique=True)
        self._collection.create_index([("position", ASCENDING)])
        self._collection.create_index("taskId")

    @retry_on_connection_failure()
    def load(self) -> list[Reminder]:
        """Load the reminder set in persisted order."""
        reminders = []
        for doc in self._collection.find({}, {"_id": 0}).sort("position", ASCENDING):
            try:
                reminders.append(Reminder.from_dict(doc))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("Skipping invalid reminder document: %s", e)
        return reminders

    @retry_on_connection_failure()
    def save(self, reminders: list[Reminder]) -> None:
        """Replace the persisted reminder set.

        Upserts every reminder by id first, then deletes documents whose id
        is no longer in the set, so an interrupted save never drops a
        reminder that is still wanted.
        """
        if reminders:
            self._collection.bulk_write(
                [
                    ReplaceOne({"id": r.id}, {**r.to_dict(), "position": i}, upsert=True)
                    for i, r in enumerate(reminders)
                ],
                ordered=False,
            )
        self._collection.delete_many({"id": {"$nin": [r.id for r in reminders]}})
        logger.debug("Saved %d reminders to MongoDB", len(reminders))


__all__ = ["MongoReminderRepository", "retry_on_connection_failure"]
