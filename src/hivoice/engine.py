"""Voice engine facade.

Wires the speech input and output controllers, the command interpreter,
the task-creation dialogue, the task store and the reminder scheduler:

    wake word -> command -> (task-creation dialogue -> task + reminder)
    reminder due -> notification and/or spoken announcement

All callbacks run on the clock's loop.
"""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from .config import HiVoiceConfig
from .dialogue import DialogueEngine, DialogueResult, VoiceCommand, match_command
from .dialogue import commands as responses
from .dialogue.commands import find_task_by_command
from .events import EventPort
from .notify import LoggingNotifier
from .reminders import DeliveryMode, InMemoryReminderRepository, Reminder, ReminderScheduler
from .tasks import InMemoryTaskStore, Task
from .voice import DisableReason, ListeningState, SpeechInputController, SpeechOutputController

if TYPE_CHECKING:
    from .clock import Clock, TimerHandle
    from .notify import Notifier
    from .recognition import Recognizer
    from .reminders import ReminderRepository
    from .synthesis import SpeechBackend
    from .tasks import TaskStore

logger = logging.getLogger(__name__)

REMINDER_TITLE = "Task Reminder"


def reminder_notification_body(task: Task | None) -> str:
    if task is None:
        return "Reminder for your task"
    return f"Reminder: {task.title}"


def reminder_announcement(task: Task | None) -> str:
    if task is None:
        return "Reminder: It's time for one of your tasks"
    return f'Reminder: It\'s time for your task "{task.title}"'


class VoiceEngine:
    """Hands-free task list assistant.

    Signals (single subscriber each, register with the on_* methods):
        wake_word(): the wake phrase was heard
        listening_changed(bool): the recognizer started or stopped capturing
        transcript(str): any final transcript heard while actively listening
        alert(DisableReason, str): voice input was disabled
        task_created(Task, Reminder | None): a voice session created a task
    """

    def __init__(
        self,
        clock: "Clock",
        recognizer: "Recognizer",
        speech_backend: "SpeechBackend",
        notifier: "Notifier | None" = None,
        task_store: "TaskStore | None" = None,
        reminder_repository: "ReminderRepository | None" = None,
        config: HiVoiceConfig | None = None,
    ) -> None:
        """Initialize the engine with its capabilities.

        Args:
            clock: Loop that runs every callback and timer
            recognizer: Speech recognition capability
            speech_backend: Speech synthesis capability
            notifier: Notification capability (defaults to logging)
            task_store: Task storage (defaults to in-memory)
            reminder_repository: Reminder persistence (defaults to in-memory)
            config: Engine configuration
        """
        self._config = config or HiVoiceConfig()
        self._clock = clock
        self._notifier = notifier or LoggingNotifier()
        self._delivery_mode = DeliveryMode(self._config.reminders.delivery_mode)

        self.output = SpeechOutputController(speech_backend, self._config.speech)
        self.input = SpeechInputController(recognizer, self.output, clock, self._config.wake_word)
        self.dialogue = DialogueEngine(self.output, self.input, clock, self._config.dialogue)
        self.tasks: TaskStore = task_store or InMemoryTaskStore(clock)
        self.scheduler = ReminderScheduler(
            reminder_repository or InMemoryReminderRepository(),
            clock,
            task_lookup=self.tasks.get,
        )

        self._running = False
        self._awaiting_command = False
        self._resume_timer: TimerHandle | None = None
        self._deferred_announcements: list[str] = []

        self.wake_word: EventPort[[]] = EventPort("wake_word")
        self.transcript: EventPort[[str]] = EventPort("transcript")
        self.alert: EventPort[[DisableReason, str]] = EventPort("alert")
        self.task_created: EventPort[[Task, Reminder | None]] = EventPort("task_created")

        self.input.wake_word_detected.subscribe(self._on_wake_word)
        self.input.transcript.subscribe(self._on_transcript)
        self.input.alert.subscribe(self._on_alert)
        self.dialogue.completed.subscribe(self._on_dialogue_completed)
        self.dialogue.cancelled.subscribe(self._on_dialogue_cancelled)
        self.scheduler.triggered.subscribe(self._on_reminder_triggered)

    @classmethod
    def from_config(
        cls,
        config: HiVoiceConfig,
        use_mocks: bool = False,
        clock: "Clock | None" = None,
    ) -> "VoiceEngine":
        """Create an engine from configuration.

        Args:
            config: hivoice configuration
            use_mocks: Use mock implementations for testing
            clock: Clock to use (created from use_mocks if omitted)

        Returns:
            Configured VoiceEngine instance
        """
        from .clock import create_clock
        from .notify import create_notifier
        from .recognition import create_recognizer
        from .reminders import create_reminder_repository
        from .synthesis import create_speech_backend

        use_mocks = use_mocks or config.testing.mock_capabilities
        clock = clock or create_clock(use_mock=use_mocks)

        return cls(
            clock=clock,
            recognizer=create_recognizer(clock, use_mock=use_mocks),
            speech_backend=create_speech_backend(clock, config.speech, use_mock=use_mocks),
            notifier=create_notifier(use_mock=use_mocks),
            reminder_repository=create_reminder_repository(config.storage, use_memory=use_mocks),
            config=config,
        )

    # ------------------------------------------------------------------
    # Lifecycle and control
    # ------------------------------------------------------------------

    @property
    def clock(self) -> "Clock":
        """Get the engine's clock."""
        return self._clock

    @property
    def is_running(self) -> bool:
        """Check if the engine has been started."""
        return self._running

    @property
    def listening_state(self) -> ListeningState:
        """Get the speech input state."""
        return self.input.state

    def start(self) -> None:
        """Start the scheduler and begin listening for the wake word."""
        if self._running:
            return
        self._running = True
        logger.info("Voice engine starting")
        self.scheduler.start()
        self.start_wake_word_listening()

    def stop(self) -> None:
        """Stop listening, speaking and scheduling."""
        if not self._running:
            return
        self._running = False
        logger.info("Voice engine stopping")
        self._cancel_resume()
        self._awaiting_command = False
        if self.dialogue.is_active:
            self.dialogue.cancel()
        self.input.shutdown()
        self.output.cancel()
        self.scheduler.stop()

    def start_wake_word_listening(self) -> None:
        """Listen for the wake phrase. No effect during a task session."""
        self._cancel_resume()
        if self.dialogue.is_active:
            logger.debug("Task session in progress, not starting wake word listening")
            return
        self._awaiting_command = False
        self._flush_announcements()
        self.input.start_wake_word_listening()

    def stop_wake_word_listening(self) -> None:
        """Stop listening for the wake phrase."""
        self._cancel_resume()
        self.input.stop_wake_word_listening()

    def reset(self) -> None:
        """Re-enable voice input after it was disabled."""
        self.input.reset()

    def begin_task_session(self) -> None:
        """Start a voice task-creation session."""
        self._cancel_resume()
        self._awaiting_command = False
        self.dialogue.start()

    def cancel_task_session(self) -> None:
        """Cancel the voice task-creation session, if any."""
        self.dialogue.cancel()

    def complete_task(self, task_id: str) -> Task | None:
        """Mark a task completed."""
        return self.tasks.set_completed(task_id, True)

    def delete_task(self, task_id: str) -> bool:
        """Delete a task and its pending reminders."""
        if not self.tasks.remove(task_id):
            return False
        for reminder in self.scheduler.get_reminders_for_task(task_id):
            self.scheduler.remove_reminder(reminder.id)
        return True

    # ------------------------------------------------------------------
    # Handler registration
    # ------------------------------------------------------------------

    def on_wake_word(self, handler: Callable[[], None]) -> None:
        """Register the handler called when the wake phrase is heard."""
        self.wake_word.subscribe(handler)

    def on_listening_change(self, handler: Callable[[bool], None]) -> None:
        """Register the handler called when capture starts or stops."""
        self.input.listening_changed.subscribe(handler)

    def on_transcript(self, handler: Callable[[str], None]) -> None:
        """Register the handler called with each final transcript."""
        self.transcript.subscribe(handler)

    def on_alert(self, handler: Callable[[DisableReason, str], None]) -> None:
        """Register the handler called once when voice input is disabled.

        Args:
            handler: Called with the disable reason and the message spoken
        """
        self.alert.subscribe(handler)

    def on_task_created(self, handler: Callable[[Task, Reminder | None], None]) -> None:
        """Register the handler called after a voice session creates a task.

        Args:
            handler: Called with the task and its reminder, if one was set
        """
        self.task_created.subscribe(handler)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_wake_word(self) -> None:
        self._cancel_resume()
        self._awaiting_command = True
        self.wake_word.emit()

    def _on_alert(self, reason: DisableReason, message: str) -> None:
        # A disabled input cannot answer the dialogue
        self._cancel_resume()
        self._awaiting_command = False
        self.dialogue.abort()
        self.alert.emit(reason, message)

    def _on_transcript(self, text: str) -> None:
        self.transcript.emit(text)
        if self.dialogue.is_active:
            self.dialogue.handle_transcript(text)
        elif self._awaiting_command:
            self.handle_command(text)
        else:
            logger.debug(f"No consumer for transcript: {text!r}")

    def handle_command(self, text: str) -> VoiceCommand:
        """Interpret and answer a command heard after the wake word.

        Args:
            text: Command transcript

        Returns:
            The command that was recognized
        """
        self._awaiting_command = False
        command = match_command(text)
        logger.info(f"Voice command: {command.value} ({text!r})")

        if command == VoiceCommand.CREATE_TASK:
            self.input.stop_active_listening()
            self.output.speak(responses.CREATE_TASK_INTRO, on_complete=self.begin_task_session)
            return command

        if command == VoiceCommand.COMPLETE_TASK:
            task = find_task_by_command(text, self.tasks.list_tasks())
            if task is not None:
                self.complete_task(task.id)
                message = responses.completed_message(task)
            else:
                message = responses.TASK_NOT_FOUND_MESSAGE
        elif command == VoiceCommand.SHOW_TASKS:
            message = responses.describe_active_tasks(self.tasks.list_tasks())
        elif command == VoiceCommand.HELP:
            message = responses.HELP_MESSAGE
        else:
            message = responses.UNKNOWN_COMMAND_MESSAGE

        self._respond(message, self._config.dialogue.resume_delay)
        return command

    def _respond(self, message: str, resume_delay: float) -> None:
        self.input.stop_active_listening()
        self.output.speak(message, on_complete=lambda: self._schedule_resume(resume_delay))

    def _on_dialogue_completed(self, result: DialogueResult) -> None:
        task = self.tasks.add(result.draft)
        self._respond(responses.task_created_message(task), self._config.dialogue.resume_delay)

        reminder = None
        if result.reminder_at is not None:
            reminder = self.scheduler.add_reminder(task.id, result.reminder_at, self._delivery_mode)
        self.task_created.emit(task, reminder)

    def _on_dialogue_cancelled(self) -> None:
        self._schedule_resume(self._config.dialogue.cancel_resume_delay)

    def _on_reminder_triggered(self, reminder: Reminder, task: Task | None) -> None:
        if reminder.delivery_mode.notifies:
            self._notifier.show(REMINDER_TITLE, reminder_notification_body(task))
        if reminder.delivery_mode.speaks:
            self._announce(reminder_announcement(task))

    def _announce(self, text: str) -> None:
        busy = (
            self.dialogue.is_active
            or self._awaiting_command
            or self._resume_timer is not None
            or self.output.is_speaking
        )
        if busy:
            logger.debug(f"Deferring announcement: {text!r}")
            self._deferred_announcements.append(text)
            return
        self.output.speak(text)

    def _flush_announcements(self) -> None:
        if not self._deferred_announcements:
            return
        text = " ".join(self._deferred_announcements)
        self._deferred_announcements.clear()
        self.output.speak(text)

    def _schedule_resume(self, delay: float) -> None:
        self._cancel_resume()
        if not self._running:
            return
        self._resume_timer = self._clock.call_later(delay, self._resume)

    def _cancel_resume(self) -> None:
        if self._resume_timer is not None:
            self._resume_timer.cancel()
            self._resume_timer = None

    def _resume(self) -> None:
        self._resume_timer = None
        self.start_wake_word_listening()


__all__ = [
    "REMINDER_TITLE",
    "VoiceEngine",
    "reminder_announcement",
    "reminder_notification_body",
]
