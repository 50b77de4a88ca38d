"""Task model and in-memory task store.

A TaskDraft is what the voice dialogue produces; the store turns drafts
into Tasks with identity and timestamps.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .clock import Clock

logger = logging.getLogger(__name__)


class Priority(Enum):
    """Task priority level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class TaskDraft:
    """Fields collected for a new task.

    Attributes:
        title: Task title, non-empty once the dialogue completes
        description: Optional free text
        priority: Priority level, medium unless answered
        category: Optional free-text category
        due_date: Optional calendar due date
    """

    title: str = ""
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    category: str | None = None
    due_date: date | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize, omitting unset optional fields."""
        data: dict[str, Any] = {"title": self.title, "priority": self.priority.value}
        if self.description is not None:
            data["description"] = self.description
        if self.category is not None:
            data["category"] = self.category
        if self.due_date is not None:
            data["dueDate"] = self.due_date.isoformat()
        return data


@dataclass
class Task:
    """A stored task."""

    id: str
    title: str
    priority: Priority
    created_at: datetime
    updated_at: datetime
    description: str | None = None
    category: str | None = None
    due_date: date | None = None
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "priority": self.priority.value,
            "category": self.category,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "dueDate": self.due_date.isoformat() if self.due_date else None,
        }


def create_task(draft: TaskDraft, now: datetime | None = None) -> Task:
    """Build a new, not yet completed Task from a draft.

    Args:
        draft: Collected task fields
        now: Creation time (defaults to current UTC time)

    Returns:
        Task with a fresh id
    """
    now = now or datetime.now(UTC)
    return Task(
        id=str(uuid.uuid4()),
        title=draft.title,
        description=draft.description,
        priority=draft.priority,
        category=draft.category,
        due_date=draft.due_date,
        created_at=now,
        updated_at=now,
    )


class TaskStore(Protocol):
    """Protocol for task storage."""

    def add(self, draft: TaskDraft) -> Task:
        """Create and store a task from a draft."""
        ...

    def get(self, task_id: str) -> Task | None:
        """Get a task by id."""
        ...

    def list_tasks(self) -> list[Task]:
        """List all tasks, newest first."""
        ...

    def set_completed(self, task_id: str, completed: bool = True) -> Task | None:
        """Mark a task completed or not; None if missing."""
        ...

    def remove(self, task_id: str) -> bool:
        """Delete a task; False if missing."""
        ...


class InMemoryTaskStore:
    """Task store backed by an ordered list, newest first."""

    def __init__(self, clock: "Clock | None" = None) -> None:
        """Initialize the store.

        Args:
            clock: Source of timestamps (defaults to the system clock)
        """
        self._clock = clock
        self._tasks: list[Task] = []

    def _now(self) -> datetime:
        return self._clock.now() if self._clock is not None else datetime.now(UTC)

    def add(self, draft: TaskDraft) -> Task:
        task = create_task(draft, self._now())
        self._tasks.insert(0, task)
        logger.info(f"Created task {task.id}: {task.title!r}")
        return task

    def get(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def list_tasks(self) -> list[Task]:
        return list(self._tasks)

    def set_completed(self, task_id: str, completed: bool = True) -> Task | None:
        task = self.get(task_id)
        if task is None:
            return None
        task.completed = completed
        task.updated_at = self._now()
        logger.info(f"Task {task.id} completed={completed}")
        return task

    def remove(self, task_id: str) -> bool:
        task = self.get(task_id)
        if task is None:
            return False
        self._tasks.remove(task)
        logger.info(f"Removed task {task_id}")
        return True


__all__ = [
    "InMemoryTaskStore",
    "Priority",
    "Task",
    "TaskDraft",
    "TaskStore",
    "create_task",
]
