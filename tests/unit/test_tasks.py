"""Unit tests for the task model and in-memory store."""

from datetime import date

from hivoice.clock import ManualClock
from hivoice.tasks import (
    InMemoryTaskStore,
    Priority,
    TaskDraft,
    create_task,
)


class TestTaskDraft:
    """Tests for TaskDraft."""

    def test_defaults(self) -> None:
        draft = TaskDraft()
        assert draft.title == ""
        assert draft.priority == Priority.MEDIUM
        assert draft.due_date is None

    def test_to_dict_omits_unset_fields(self) -> None:
        assert TaskDraft(title="Buy milk").to_dict() == {"title": "Buy milk", "priority": "medium"}

    def test_to_dict_full(self) -> None:
        draft = TaskDraft(
            title="Buy milk",
            description="2 litres",
            priority=Priority.HIGH,
            category="shopping",
            due_date=date(2025, 3, 11),
        )
        assert draft.to_dict() == {
            "title": "Buy milk",
            "priority": "high",
            "description": "2 litres",
            "category": "shopping",
            "dueDate": "2025-03-11",
        }


class TestCreateTask:
    """Tests for turning drafts into tasks."""

    def test_create_task(self) -> None:
        clock = ManualClock()
        task = create_task(TaskDraft(title="Buy milk", priority=Priority.HIGH), clock.now())

        assert task.id
        assert task.title == "Buy milk"
        assert task.priority == Priority.HIGH
        assert task.completed is False
        assert task.created_at == clock.now()
        assert task.to_dict()["createdAt"] == clock.now().isoformat()

    def test_ids_are_unique(self) -> None:
        draft = TaskDraft(title="Buy milk")
        assert create_task(draft).id != create_task(draft).id


class TestInMemoryTaskStore:
    """Tests for InMemoryTaskStore."""

    def test_add_and_get(self) -> None:
        store = InMemoryTaskStore(ManualClock())
        task = store.add(TaskDraft(title="Buy milk"))
        assert store.get(task.id) is task
        assert store.get("missing") is None

    def test_newest_first(self) -> None:
        store = InMemoryTaskStore()
        first = store.add(TaskDraft(title="First"))
        second = store.add(TaskDraft(title="Second"))
        assert store.list_tasks() == [second, first]

    def test_set_completed(self) -> None:
        clock = ManualClock()
        store = InMemoryTaskStore(clock)
        task = store.add(TaskDraft(title="Buy milk"))

        clock.advance(60)
        updated = store.set_completed(task.id)

        assert updated is task
        assert task.completed is True
        assert task.updated_at > task.created_at
        assert store.list_tasks() == [task]
        assert store.set_completed("missing") is None

    def test_remove(self) -> None:
        store = InMemoryTaskStore()
        task = store.add(TaskDraft(title="Buy milk"))
        assert store.remove(task.id) is True
        assert store.remove(task.id) is False
        assert store.list_tasks() == []
