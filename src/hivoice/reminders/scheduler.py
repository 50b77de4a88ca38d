"""Reminder scheduling with at-most-once delivery.

Every active reminder has exactly one outstanding clock timer. A trigger
marks the reminder inactive and persists that before anyone is told, so
a reminder is never delivered twice, even across restarts.
"""

import logging
from collections.abc import Callable
from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING, Any

from ..errors import HiVoiceError, ReminderNotFoundError
from ..events import EventPort
from .models import DeliveryMode, Reminder

if TYPE_CHECKING:
    from ..clock import Clock, TimerHandle
    from ..tasks import Task
    from .repository import ReminderRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"due_at", "delivery_mode", "active"})


class ReminderScheduler:
    """Schedules, persists and triggers task reminders.

    Signals:
        triggered(Reminder, Task | None): a reminder came due; the task is
            None when the lookup cannot find it
    """

    def __init__(
        self,
        repository: "ReminderRepository",
        clock: "Clock",
        task_lookup: Callable[[str], "Task | None"] | None = None,
        on_trigger: Callable[[Reminder, "Task | None"], None] | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            repository: Durable store for the reminder set.
            clock: Loop used for reminder timers.
            task_lookup: Resolves a task id to its task.
            on_trigger: Optional callback when a reminder triggers.
        """
        self._repository = repository
        self._clock = clock
        self._task_lookup = task_lookup
        self._reminders: dict[str, Reminder] = {}
        self._timers: dict[str, TimerHandle] = {}
        self._started = False

        self.triggered: EventPort[[Reminder, Task | None]] = EventPort("reminder_triggered")
        if on_trigger is not None:
            self.triggered.subscribe(on_trigger)

    @property
    def is_started(self) -> bool:
        """Check if persisted reminders have been loaded and scheduled."""
        return self._started

    @property
    def pending_count(self) -> int:
        """Get the number of outstanding timers."""
        return len(self._timers)

    def set_task_lookup(self, task_lookup: Callable[[str], "Task | None"] | None) -> None:
        """Replace the task lookup used on trigger."""
        self._task_lookup = task_lookup

    def start(self) -> None:
        """Load persisted reminders and schedule the active ones.

        Reminders already past due trigger immediately. Inactive ones are
        kept as history only.
        """
        if self._started:
            return
        self._started = True

        loaded = self._repository.load()
        for reminder in loaded:
            self._reminders.setdefault(reminder.id, reminder)

        active = [r for r in self._reminders.values() if r.active and r.id not in self._timers]
        logger.info(f"Reminder scheduler started: {len(loaded)} loaded, {len(active)} active")
        for reminder in active:
            self._schedule(reminder)

    def stop(self) -> None:
        """Cancel outstanding timers without touching records."""
        for handle in self._timers.values():
            handle.cancel()
        count = len(self._timers)
        self._timers.clear()
        self._started = False
        logger.info(f"Reminder scheduler stopped, {count} timers cancelled")

    def add_reminder(
        self,
        task_id: str,
        due_at: datetime,
        delivery_mode: DeliveryMode | str = DeliveryMode.BOTH,
    ) -> Reminder:
        """Create, persist and schedule a reminder.

        Args:
            task_id: Task to remind about.
            due_at: When to trigger (timezone-aware).
            delivery_mode: Notification, voice, or both.

        Returns:
            The created reminder. If due_at is not in the future the
            reminder has already triggered when this returns.

        Raises:
            HiVoiceError: If due_at has no timezone.
        """
        _require_aware(due_at)
        reminder = Reminder.new(task_id, due_at, DeliveryMode(delivery_mode))
        self._reminders[reminder.id] = reminder
        self._persist()
        logger.info(f"Added reminder {reminder.id} for task {task_id} at {due_at.isoformat()}")
        self._schedule(reminder)
        return reminder

    def remove_reminder(self, reminder_id: str) -> bool:
        """Cancel a pending reminder and delete its record.

        Returns:
            True if removed; False if unknown or already triggered.
        """
        reminder = self._reminders.get(reminder_id)
        if reminder is None or not reminder.active:
            logger.debug(f"Reminder {reminder_id} not pending, nothing to remove")
            return False

        self._cancel_timer(reminder_id)
        del self._reminders[reminder_id]
        self._persist()
        logger.info(f"Removed reminder {reminder_id}")
        return True

    def update_reminder(self, reminder_id: str, **updates: Any) -> Reminder:
        """Update a reminder and reschedule it if still active.

        Args:
            reminder_id: Reminder to update.
            **updates: Any of due_at, delivery_mode, active.

        Returns:
            The updated reminder.

        Raises:
            ReminderNotFoundError: If the reminder does not exist.
            HiVoiceError: If an update field is not recognized or due_at has no timezone.
        """
        reminder = self._reminders.get(reminder_id)
        if reminder is None:
            raise ReminderNotFoundError(reminder_id)

        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            raise HiVoiceError(f"Cannot update reminder fields: {', '.join(sorted(unknown))}")
        if "due_at" in updates:
            _require_aware(updates["due_at"])

        self._cancel_timer(reminder_id)
        if "due_at" in updates:
            reminder.due_at = updates["due_at"]
        if "delivery_mode" in updates:
            reminder.delivery_mode = DeliveryMode(updates["delivery_mode"])
        if "active" in updates:
            reminder.active = bool(updates["active"])

        self._persist()
        if reminder.active:
            self._schedule(reminder)
        return reminder

    def get(self, reminder_id: str) -> Reminder | None:
        """Get a reminder by id."""
        return self._reminders.get(reminder_id)

    def get_reminders_for_task(self, task_id: str) -> list[Reminder]:
        """List all reminders for a task, triggered ones included."""
        return [r for r in self._reminders.values() if r.task_id == task_id]

    def get_active_reminders(self) -> list[Reminder]:
        """List reminders that have not triggered yet."""
        return [r for r in self._reminders.values() if r.active]

    def _schedule(self, reminder: Reminder) -> None:
        delay = (reminder.due_at - self._clock.now()).total_seconds()
        if delay <= 0:
            # Due time has passed, trigger immediately
            self._trigger(reminder.id)
            return

        reminder_id = reminder.id
        self._timers[reminder_id] = self._clock.call_later(
            delay, lambda: self._trigger(reminder_id)
        )
        logger.debug(f"Reminder {reminder_id} scheduled in {delay:.0f}s")

    def _cancel_timer(self, reminder_id: str) -> None:
        handle = self._timers.pop(reminder_id, None)
        if handle is not None:
            handle.cancel()

    def _trigger(self, reminder_id: str) -> None:
        self._timers.pop(reminder_id, None)
        reminder = self._reminders.get(reminder_id)
        if reminder is None or not reminder.active:
            return

        reminder.active = False
        self._persist()

        task = self._task_lookup(reminder.task_id) if self._task_lookup is not None else None
        if task is None:
            logger.warning(f"Reminder {reminder_id} triggered for unknown task {reminder.task_id}")
        else:
            logger.info(f"Reminder {reminder_id} triggered for task {task.title!r}")
        self.triggered.emit(reminder, task)

    def _persist(self) -> None:
        try:
            self._repository.save(list(self._reminders.values()))
        except Exception as e:
            logger.error(f"Failed to persist reminders: {e}")


def _require_aware(due_at: datetime) -> None:
    if due_at.tzinfo is None or due_at.utcoffset() is None:
        raise HiVoiceError(f"Reminder time must be timezone-aware: {due_at.isoformat()}")


def suggest_reminder_times(
    due: date | datetime | None,
    now: datetime,
    hour: int = 9,
) -> list[datetime]:
    """Suggest reminder times for a task.

    With a due date in the future: one day before at the given hour and
    one hour before, whichever are still ahead. Otherwise tomorrow at the
    given hour and one week from now.

    Args:
        due: Task due date or due time. A plain date means its midnight.
        now: Reference time (timezone-aware).
        hour: Hour of day for day-granular suggestions.

    Returns:
        Suggested times, earliest rule first.
    """
    suggestions: list[datetime] = []

    if due is not None:
        if isinstance(due, datetime):
            due_at = due
        else:
            due_at = datetime.combine(due, time(0), tzinfo=now.tzinfo)

        day_before = (due_at - timedelta(days=1)).replace(hour=hour, minute=0, second=0, microsecond=0)
        if day_before > now:
            suggestions.append(day_before)

        hour_before = due_at - timedelta(hours=1)
        if hour_before > now:
            suggestions.append(hour_before)

    if not suggestions:
        tomorrow = (now + timedelta(days=1)).replace(hour=hour, minute=0, second=0, microsecond=0)
        suggestions.append(tomorrow)
        suggestions.append(now + timedelta(days=7))

    return suggestions


__all__ = ["ReminderScheduler", "UPDATABLE_FIELDS", "suggest_reminder_times"]
