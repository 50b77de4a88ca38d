"""Reminder data model."""

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class DeliveryMode(Enum):
    """How a triggered reminder reaches the user."""

    NOTIFICATION = "notification"
    VOICE = "voice"
    BOTH = "both"

    @property
    def notifies(self) -> bool:
        """Check if this mode shows a notification."""
        return self in (DeliveryMode.NOTIFICATION, DeliveryMode.BOTH)

    @property
    def speaks(self) -> bool:
        """Check if this mode speaks the reminder."""
        return self in (DeliveryMode.VOICE, DeliveryMode.BOTH)


@dataclass
class Reminder:
    """A scheduled reminder for a task.

    Attributes:
        id: Unique reminder identifier.
        task_id: Task the reminder belongs to, referenced by id only.
        due_at: When to trigger (timezone-aware).
        delivery_mode: Notification, voice, or both.
        active: True until the reminder triggers.
    """

    id: str
    task_id: str
    due_at: datetime
    delivery_mode: DeliveryMode = DeliveryMode.BOTH
    active: bool = True

    @classmethod
    def new(
        cls,
        task_id: str,
        due_at: datetime,
        delivery_mode: DeliveryMode = DeliveryMode.BOTH,
    ) -> "Reminder":
        """Create an active reminder with a fresh id."""
        return cls(id=str(uuid.uuid4()), task_id=task_id, due_at=due_at, delivery_mode=delivery_mode)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted record format."""
        return {
            "id": self.id,
            "taskId": self.task_id,
            "dueAt": self.due_at.isoformat(),
            "deliveryMode": self.delivery_mode.value,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Reminder":
        """Create from a persisted record.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If a field has an invalid value.
        """
        due_at = datetime.fromisoformat(data["dueAt"])
        if due_at.tzinfo is None:
            due_at = due_at.astimezone()
        return cls(
            id=str(data["id"]),
            task_id=str(data["taskId"]),
            due_at=due_at,
            delivery_mode=DeliveryMode(data.get("deliveryMode", DeliveryMode.BOTH.value)),
            active=bool(data.get("active", True)),
        )


__all__ = ["DeliveryMode", "Reminder"]
