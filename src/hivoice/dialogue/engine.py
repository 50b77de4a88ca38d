"""Slot-filling dialogue for voice task creation.

The engine asks each slot in order, interprets the answer, acknowledges
it, and finally negotiates an optional reminder. It only talks to the
outside world through the speech output controller, the listening
control of the speech input controller, the clock, and its two signals.
"""

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

from ..config import DialogueConfig
from ..events import EventPort
from ..tasks import Priority, TaskDraft
from . import parsing
from .slots import TASK_SLOTS, TITLE_REQUIRED_PROMPT, QuestionSlot, SlotKind

if TYPE_CHECKING:
    from ..clock import Clock, TimerHandle
    from ..voice.output import SpeechOutputController

logger = logging.getLogger(__name__)

REMINDER_QUESTION = (
    "Great! Your task is ready. Would you like to set a reminder? "
    "Say 'yes' to add a reminder or 'no' to finish."
)
REMINDER_TIME_PROMPT = (
    "When would you like to be reminded? You can say things like "
    "'in 30 minutes', 'tomorrow at 9', or 'next week'."
)
REMINDER_RETRY_PROMPT = (
    "I didn't understand that time. Please try again or say 'no' to skip the reminder."
)
UNKNOWN_DATE_MESSAGE = "I couldn't work out that date, so I'll leave it unset."
CANCELLED_MESSAGE = "Task creation cancelled."


class ListeningControl(Protocol):
    """The part of the speech input controller the dialogue drives."""

    def start_active_listening(self) -> None: ...

    def stop_active_listening(self) -> None: ...


class DialoguePhase(Enum):
    """Where the dialogue is between transcripts."""

    ASKING = "asking"
    AWAITING_ANSWER = "awaiting_answer"
    ACKNOWLEDGING = "acknowledging"
    AWAITING_REMINDER_CHOICE = "awaiting_reminder_choice"
    AWAITING_REMINDER_TIME = "awaiting_reminder_time"
    FINISHING = "finishing"


AWAITING_PHASES = frozenset(
    {
        DialoguePhase.AWAITING_ANSWER,
        DialoguePhase.AWAITING_REMINDER_CHOICE,
        DialoguePhase.AWAITING_REMINDER_TIME,
    }
)


@dataclass(frozen=True)
class DialogueState:
    """Progress of one task-creation session.

    Attributes:
        phase: Current phase
        slot_index: Index of the slot being asked; len(slots) once slots are done
        draft: Fields collected so far
        reminder_at: Reminder time, once one has been accepted
    """

    phase: DialoguePhase
    slot_index: int
    draft: TaskDraft
    reminder_at: datetime | None = None


@dataclass(frozen=True)
class DialogueResult:
    """Outcome of a completed session."""

    draft: TaskDraft
    reminder_at: datetime | None = None


class DialogueEngine:
    """Runs voice task-creation sessions.

    A DialogueState exists only while a session is in progress. Transcripts
    that arrive while a prompt or acknowledgement is being spoken are
    queued and handled once the engine is waiting for an answer again.

    Signals:
        completed(DialogueResult): a session finished with a draft
        cancelled(): a session was cancelled
    """

    def __init__(
        self,
        output: "SpeechOutputController",
        listening: ListeningControl,
        clock: "Clock",
        config: DialogueConfig | None = None,
        slots: tuple[QuestionSlot, ...] = TASK_SLOTS,
    ) -> None:
        self._output = output
        self._listening = listening
        self._clock = clock
        self._config = config or DialogueConfig()
        self._slots = slots
        self._default_priority = Priority(self._config.default_priority)

        self._state: DialogueState | None = None
        self._pending: deque[str] = deque()
        self._timer: TimerHandle | None = None

        self.completed: EventPort[[DialogueResult]] = EventPort("dialogue_completed")
        self.cancelled: EventPort[[]] = EventPort("dialogue_cancelled")

    @property
    def state(self) -> DialogueState | None:
        """Get the current session state, None when no session runs."""
        return self._state

    @property
    def is_active(self) -> bool:
        """Check if a session is in progress."""
        return self._state is not None

    @property
    def current_slot(self) -> QuestionSlot | None:
        """Get the slot being asked, if any."""
        if self._state is None or self._state.slot_index >= len(self._slots):
            return None
        return self._slots[self._state.slot_index]

    def start(self) -> None:
        """Begin a new session with the first slot."""
        if self._state is not None:
            logger.warning("Task creation session already in progress")
            return

        logger.info("Starting task creation dialogue")
        self._pending.clear()
        self._state = DialogueState(
            phase=DialoguePhase.ASKING,
            slot_index=0,
            draft=TaskDraft(priority=self._default_priority),
        )
        self._ask_current()

    def cancel(self) -> None:
        """Abandon the session, discarding everything collected."""
        if self._state is None:
            return

        logger.info("Task creation cancelled")
        self._discard()
        self._listening.stop_active_listening()
        self._output.speak(CANCELLED_MESSAGE)
        self.cancelled.emit()

    def abort(self) -> None:
        """Drop the session without speaking or emitting cancelled.

        Used when voice input is disabled and the session can no longer
        be answered.
        """
        if self._state is None:
            return

        logger.warning("Task creation aborted: voice input unavailable")
        self._discard()

    def handle_transcript(self, text: str) -> None:
        """Feed a final transcript into the session.

        Args:
            text: Transcript from the speech input controller
        """
        if self._state is None:
            logger.debug(f"No task session, ignoring transcript: {text!r}")
            return

        if parsing.is_cancel_phrase(text):
            self.cancel()
            return

        if self._state.phase not in AWAITING_PHASES:
            logger.debug(f"Queueing transcript while busy: {text!r}")
            self._pending.append(text)
            return

        self._process(text)

    # ------------------------------------------------------------------
    # Flow
    # ------------------------------------------------------------------

    def _update(self, **changes: Any) -> None:
        if self._state is not None:
            self._state = replace(self._state, **changes)

    def _say_then(self, text: str, phase: DialoguePhase, then: Callable[[], None]) -> None:
        self._update(phase=phase)
        self._output.speak(text, on_complete=then)

    def _ask_current(self) -> None:
        self._timer = None
        if self._state is None:
            return

        slot = self.current_slot
        if slot is None:
            self._say_then(
                REMINDER_QUESTION,
                DialoguePhase.ASKING,
                lambda: self._listen(DialoguePhase.AWAITING_REMINDER_CHOICE),
            )
            return

        logger.debug(f"Asking slot '{slot.field}'")
        self._say_then(
            slot.prompt,
            DialoguePhase.ASKING,
            lambda: self._listen(DialoguePhase.AWAITING_ANSWER),
        )

    def _listen(self, phase: DialoguePhase) -> None:
        if self._state is None:
            return
        self._update(phase=phase)
        self._listening.start_active_listening()
        if self._pending:
            self._process(self._pending.popleft())

    def _advance(self) -> None:
        if self._state is None:
            return
        self._update(phase=DialoguePhase.ASKING, slot_index=self._state.slot_index + 1)
        self._timer = self._clock.call_later(self._config.question_delay, self._ask_current)

    def _process(self, text: str) -> None:
        state = self._state
        if state is None:
            return
        if state.phase == DialoguePhase.AWAITING_ANSWER:
            self._process_slot(text)
        else:
            self._process_reminder(text.lower().strip())

    def _process_slot(self, text: str) -> None:
        slot = self.current_slot
        if slot is None or self._state is None:
            return

        if parsing.is_skip_answer(text):
            if slot.required:
                logger.info(f"Required slot '{slot.field}' skipped, asking again")
                self._say_then(
                    TITLE_REQUIRED_PROMPT,
                    DialoguePhase.ASKING,
                    lambda: self._listen(DialoguePhase.AWAITING_ANSWER),
                )
                return
            logger.debug(f"Skipped slot '{slot.field}'")
            self._advance()
            return

        value, spoken = self._interpret(slot, text)
        if value is None:
            self._say_then(UNKNOWN_DATE_MESSAGE, DialoguePhase.ACKNOWLEDGING, self._advance)
            return

        self._update(draft=replace(self._state.draft, **{slot.field: value}))
        logger.info(f"Slot '{slot.field}' = {value!r}")
        self._say_then(f"{slot.follow_up}{spoken}.", DialoguePhase.ACKNOWLEDGING, self._advance)

    def _interpret(self, slot: QuestionSlot, text: str) -> tuple[Any, str]:
        """Turn an answer into (stored value, spoken value)."""
        if slot.kind == SlotKind.CHOICE:
            option = parsing.resolve_option(text, slot.options, self._default_priority.value)
            value = Priority(option) if slot.field == "priority" else option
            return value, option

        if slot.kind == SlotKind.DATE:
            due = parsing.parse_due_date(text, self._clock.now().date())
            if due is None:
                return None, ""
            return due, parsing.format_due_date(due)

        stripped = text.strip()
        return stripped, stripped

    def _process_reminder(self, answer: str) -> None:
        if parsing.is_negative(answer):
            logger.info("No reminder requested")
            self._finish()
            return

        now = self._clock.now()
        when = parsing.parse_reminder_time(answer, now, self._config.default_reminder_hour)
        if when is not None:
            self._update(reminder_at=when)
            logger.info(f"Reminder time accepted: {when.isoformat()}")
            self._say_then(
                f"Reminder set for {parsing.format_reminder_time(when, now)}. Creating your task now!",
                DialoguePhase.FINISHING,
                self._finish,
            )
            return

        if parsing.is_affirmative(answer):
            self._say_then(
                REMINDER_TIME_PROMPT,
                DialoguePhase.ASKING,
                lambda: self._listen(DialoguePhase.AWAITING_REMINDER_TIME),
            )
            return

        self._say_then(
            REMINDER_RETRY_PROMPT,
            DialoguePhase.ASKING,
            lambda: self._listen(DialoguePhase.AWAITING_REMINDER_TIME),
        )

    def _finish(self) -> None:
        state = self._state
        if state is None:
            return

        result = DialogueResult(draft=state.draft, reminder_at=state.reminder_at)
        logger.info(f"Task creation complete: {result.draft.to_dict()}")
        self._discard()
        self._listening.stop_active_listening()
        self.completed.emit(result)

    def _discard(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending.clear()
        self._state = None


__all__ = [
    "CANCELLED_MESSAGE",
    "DialogueEngine",
    "DialoguePhase",
    "DialogueResult",
    "DialogueState",
    "ListeningControl",
    "REMINDER_QUESTION",
    "REMINDER_RETRY_PROMPT",
    "REMINDER_TIME_PROMPT",
    "UNKNOWN_DATE_MESSAGE",
]
