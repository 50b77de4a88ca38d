"""Integration tests for the voice engine.

These tests drive the full wake word -> command -> dialogue -> task and
reminder flow through mock capabilities and a manual clock.
"""

from datetime import timedelta

import pytest

from hivoice.clock import ManualClock
from hivoice.config import HiVoiceConfig
from hivoice.config.loader import load_config
from hivoice.dialogue import commands as responses
from hivoice.dialogue.engine import CANCELLED_MESSAGE
from hivoice.dialogue.slots import TASK_SLOTS
from hivoice.engine import REMINDER_TITLE, VoiceEngine, reminder_announcement
from hivoice.notify import MockNotifier
from hivoice.recognition import MockRecognizer
from hivoice.reminders import DeliveryMode, Reminder
from hivoice.synthesis import MockSpeechBackend
from hivoice.tasks import Priority, Task, TaskDraft
from hivoice.voice import DISABLE_MESSAGES, DisableReason, ListeningState


class EngineHarness:
    """VoiceEngine wired to mocks, with helpers that speak to it."""

    def __init__(
        self,
        config: HiVoiceConfig | None = None,
        recognizer: MockRecognizer | None = None,
    ) -> None:
        self.clock = ManualClock()
        self.recognizer = recognizer or MockRecognizer()
        self.backend = MockSpeechBackend(auto_complete=True)
        self.notifier = MockNotifier()
        self.engine = VoiceEngine(
            clock=self.clock,
            recognizer=self.recognizer,
            speech_backend=self.backend,
            notifier=self.notifier,
            config=config,
        )
        self.created: list[tuple[Task, Reminder | None]] = []
        self.engine.on_task_created(lambda task, reminder: self.created.append((task, reminder)))

    def say(self, *texts: str, pause: float = 0.5) -> None:
        """Speak each text, then let the pause elapse."""
        for text in texts:
            self.recognizer.emit_result(text)
            self.clock.advance(pause)

    def command(self, text: str) -> None:
        """Say the wake phrase followed by a command."""
        self.recognizer.emit_result("hi voice")
        self.recognizer.emit_result(text)


@pytest.fixture
def harness() -> EngineHarness:
    h = EngineHarness()
    h.engine.start()
    return h


class TestWakeWord:
    """Tests for wake word handling through the engine."""

    def test_start_listens_for_wake_word(self, harness: EngineHarness) -> None:
        assert harness.engine.is_running is True
        assert harness.engine.listening_state == ListeningState.WAITING_FOR_WAKE_WORD
        assert harness.recognizer.running is True

    def test_wake_word_acknowledged(self, harness: EngineHarness) -> None:
        woke: list[bool] = []
        harness.engine.on_wake_word(lambda: woke.append(True))

        harness.recognizer.emit_result("Hi Voice")

        assert woke == [True]
        assert harness.engine.listening_state == ListeningState.ACTIVE_LISTENING
        assert harness.backend.last_spoken == HiVoiceConfig().wake_word.acknowledgement

    def test_transcripts_are_published(self, harness: EngineHarness) -> None:
        heard: list[str] = []
        harness.engine.on_transcript(heard.append)

        harness.command("help")

        assert heard == ["help"]

    def test_alert_on_permission_denied(self, harness: EngineHarness) -> None:
        alerts: list[DisableReason] = []
        harness.engine.on_alert(lambda reason, message: alerts.append(reason))

        harness.recognizer.emit_error("not-allowed")
        harness.engine.start_wake_word_listening()

        assert alerts == [DisableReason.PERMISSION_DENIED]
        assert harness.engine.listening_state == ListeningState.PERMANENTLY_DISABLED
        assert harness.backend.last_spoken == DISABLE_MESSAGES[DisableReason.PERMISSION_DENIED]

        harness.engine.reset()
        harness.engine.start_wake_word_listening()
        assert harness.engine.listening_state == ListeningState.WAITING_FOR_WAKE_WORD

    def test_listening_changes_published(self, harness: EngineHarness) -> None:
        changes: list[bool] = []
        harness.engine.on_listening_change(changes.append)

        harness.engine.stop_wake_word_listening()
        harness.engine.start_wake_word_listening()

        assert changes == [False, True]


class TestTaskCreationFlow:
    """Tests for creating a task by voice."""

    def test_create_task_with_reminder(self, harness: EngineHarness) -> None:
        harness.command("create task")

        assert responses.CREATE_TASK_INTRO in harness.backend.spoken
        assert harness.backend.last_spoken == TASK_SLOTS[0].prompt
        assert harness.engine.dialogue.is_active is True

        harness.say("Buy milk", "skip", "high", "skip", "tomorrow")
        reminder_due = harness.clock.now() + timedelta(minutes=30)
        harness.recognizer.emit_result("in 30 minutes")

        assert len(harness.created) == 1
        task, reminder = harness.created[0]
        assert task.title == "buy milk"
        assert task.priority == Priority.HIGH
        assert task.due_date is not None
        assert harness.engine.tasks.get(task.id) is task

        assert reminder is not None
        assert reminder.task_id == task.id
        assert reminder.due_at == reminder_due
        assert reminder.delivery_mode == DeliveryMode.BOTH
        assert harness.backend.last_spoken == responses.task_created_message(task)

    def test_resumes_wake_word_listening_after_creation(self, harness: EngineHarness) -> None:
        harness.command("create task")
        harness.say("Buy milk", "skip", "skip", "skip", "skip")
        harness.recognizer.emit_result("no")

        assert harness.engine.listening_state == ListeningState.IDLE
        assert harness.created[0][1] is None

        harness.clock.advance(1.5)
        assert harness.engine.listening_state == ListeningState.IDLE
        harness.clock.advance(0.5)
        assert harness.engine.listening_state == ListeningState.WAITING_FOR_WAKE_WORD
        assert harness.recognizer.running is True

    def test_wake_phrase_ignored_during_dialogue(self, harness: EngineHarness) -> None:
        harness.command("create task")

        harness.recognizer.emit_result("hi voice")

        assert harness.engine.dialogue.state.draft.title == "hi voice"

    def test_cancel_mid_dialogue(self, harness: EngineHarness) -> None:
        harness.command("create task")
        harness.say("Buy milk")

        harness.recognizer.emit_result("cancel")

        assert harness.created == []
        assert harness.engine.tasks.list_tasks() == []
        assert harness.backend.last_spoken == CANCELLED_MESSAGE
        assert harness.engine.listening_state == ListeningState.IDLE

        harness.clock.advance(1.0)
        assert harness.engine.listening_state == ListeningState.WAITING_FOR_WAKE_WORD

    def test_recognizer_restart_during_dialogue(self, harness: EngineHarness) -> None:
        harness.command("create task")

        harness.recognizer.emit_end()
        harness.clock.advance(1.0)
        harness.recognizer.emit_result("Buy milk")

        assert harness.engine.dialogue.state.draft.title == "buy milk"

    def test_first_question_answered_when_stop_is_slow(self) -> None:
        # Session end arrives only after the dialogue asked to listen
        h = EngineHarness(recognizer=MockRecognizer(auto_ack=False))
        h.engine.start()
        h.recognizer.emit_start()

        h.command("create task")
        assert h.backend.last_spoken == TASK_SLOTS[0].prompt
        assert h.recognizer.start_calls == 1

        h.recognizer.emit_end()
        assert h.recognizer.start_calls == 2
        h.recognizer.emit_start()
        h.recognizer.emit_result("Buy milk")

        assert h.engine.listening_state == ListeningState.ACTIVE_LISTENING
        assert h.engine.dialogue.state.draft.title == "buy milk"

    def test_disable_during_dialogue_recovers_after_reset(self, harness: EngineHarness) -> None:
        alerts: list[DisableReason] = []
        harness.engine.on_alert(lambda reason, message: alerts.append(reason))
        harness.command("create task")

        harness.recognizer.emit_error("not-allowed")

        assert alerts == [DisableReason.PERMISSION_DENIED]
        assert harness.engine.dialogue.is_active is False
        assert harness.backend.last_spoken == DISABLE_MESSAGES[DisableReason.PERMISSION_DENIED]
        assert harness.created == []

        harness.engine.reset()
        harness.engine.start_wake_word_listening()
        harness.clock.advance(10)

        assert harness.engine.listening_state == ListeningState.WAITING_FOR_WAKE_WORD
        assert harness.recognizer.running is True

        harness.command("create task")
        assert harness.engine.dialogue.is_active is True


class TestCommands:
    """Tests for the task-list commands."""

    def test_show_tasks(self, harness: EngineHarness) -> None:
        harness.engine.tasks.add(TaskDraft(title="Buy milk"))

        harness.command("show tasks")

        assert harness.backend.last_spoken == (
            "You have 1 active task. Here are your top tasks: Buy milk"
        )
        harness.clock.advance(2.0)
        assert harness.engine.listening_state == ListeningState.WAITING_FOR_WAKE_WORD

    def test_show_tasks_when_empty(self, harness: EngineHarness) -> None:
        harness.command("show tasks")
        assert harness.backend.last_spoken == responses.NO_ACTIVE_TASKS_MESSAGE

    def test_complete_task(self, harness: EngineHarness) -> None:
        task = harness.engine.tasks.add(TaskDraft(title="buy milk"))

        harness.command("complete buy milk")

        assert task.completed is True
        assert harness.backend.last_spoken == responses.completed_message(task)

    def test_complete_unknown_task(self, harness: EngineHarness) -> None:
        harness.command("complete the taxes")
        assert harness.backend.last_spoken == responses.TASK_NOT_FOUND_MESSAGE

    def test_help_and_unknown(self, harness: EngineHarness) -> None:
        harness.command("help")
        assert harness.backend.last_spoken == responses.HELP_MESSAGE

        harness.clock.advance(2.0)
        harness.command("play some music")
        assert harness.backend.last_spoken == responses.UNKNOWN_COMMAND_MESSAGE

    def test_transcript_without_wake_word_is_ignored(self, harness: EngineHarness) -> None:
        spoken = harness.backend.spoken
        harness.recognizer.emit_result("create task")
        assert harness.backend.spoken == spoken
        assert harness.engine.dialogue.is_active is False


class TestReminderDelivery:
    """Tests for delivering triggered reminders."""

    def test_notification_and_voice(self, harness: EngineHarness) -> None:
        task = harness.engine.tasks.add(TaskDraft(title="Buy milk"))
        harness.engine.scheduler.add_reminder(task.id, harness.clock.now() + timedelta(minutes=5))

        harness.clock.advance(300)

        assert [(n.title, n.body) for n in harness.notifier.shown] == [
            (REMINDER_TITLE, "Reminder: Buy milk")
        ]
        assert harness.backend.last_spoken == reminder_announcement(task)

    def test_notification_only(self, harness: EngineHarness) -> None:
        task = harness.engine.tasks.add(TaskDraft(title="Buy milk"))
        spoken = harness.backend.spoken
        harness.engine.scheduler.add_reminder(
            task.id, harness.clock.now() + timedelta(minutes=5), DeliveryMode.NOTIFICATION
        )

        harness.clock.advance(300)

        assert len(harness.notifier.shown) == 1
        assert harness.backend.spoken == spoken

    def test_announcement_deferred_during_dialogue(self, harness: EngineHarness) -> None:
        task = harness.engine.tasks.add(TaskDraft(title="Buy milk"))
        harness.engine.scheduler.add_reminder(
            task.id, harness.clock.now() + timedelta(seconds=60), DeliveryMode.VOICE
        )
        harness.command("create task")

        harness.clock.advance(60)
        assert harness.backend.last_spoken == TASK_SLOTS[0].prompt

        harness.recognizer.emit_result("cancel")
        harness.clock.advance(1.0)

        assert harness.backend.last_spoken == reminder_announcement(task)

    def test_deleted_task_reminder_is_removed(self, harness: EngineHarness) -> None:
        task = harness.engine.tasks.add(TaskDraft(title="Buy milk"))
        harness.engine.scheduler.add_reminder(task.id, harness.clock.now() + timedelta(minutes=5))

        assert harness.engine.delete_task(task.id) is True
        harness.clock.advance(600)

        assert harness.notifier.shown == []
        assert harness.engine.delete_task(task.id) is False

    def test_reminder_for_missing_task_uses_generic_text(self, harness: EngineHarness) -> None:
        harness.engine.scheduler.add_reminder("gone", harness.clock.now() + timedelta(minutes=1))

        harness.clock.advance(60)

        assert harness.notifier.shown[0].body == "Reminder for your task"
        assert harness.backend.last_spoken == reminder_announcement(None)


class TestLifecycle:
    """Tests for starting and stopping the engine."""

    def test_stop_releases_everything(self, harness: EngineHarness) -> None:
        task = harness.engine.tasks.add(TaskDraft(title="Buy milk"))
        harness.engine.scheduler.add_reminder(task.id, harness.clock.now() + timedelta(minutes=5))
        harness.command("create task")

        harness.engine.stop()
        harness.clock.advance(600)

        assert harness.engine.is_running is False
        assert harness.engine.dialogue.is_active is False
        assert harness.recognizer.running is False
        assert harness.notifier.shown == []
        assert harness.clock.pending_count == 0

    def test_from_config_with_test_profile(self) -> None:
        config = load_config(profile="test")

        engine = VoiceEngine.from_config(config)

        assert isinstance(engine.clock, ManualClock)
        engine.start()
        assert engine.listening_state == ListeningState.WAITING_FOR_WAKE_WORD
        engine.stop()
