"""Unit tests for the task-creation dialogue."""

from datetime import date, timedelta

import pytest

from hivoice.clock import ManualClock
from hivoice.dialogue import DialogueEngine, DialoguePhase, DialogueResult
from hivoice.dialogue.engine import (
    CANCELLED_MESSAGE,
    REMINDER_QUESTION,
    REMINDER_RETRY_PROMPT,
    REMINDER_TIME_PROMPT,
    UNKNOWN_DATE_MESSAGE,
)
from hivoice.dialogue.slots import TASK_SLOTS, TITLE_REQUIRED_PROMPT
from hivoice.synthesis import MockSpeechBackend
from hivoice.tasks import Priority
from hivoice.voice import SpeechOutputController


class RecordingListening:
    """Listening control that counts requests."""

    def __init__(self) -> None:
        self.starts = 0
        self.stops = 0

    def start_active_listening(self) -> None:
        self.starts += 1

    def stop_active_listening(self) -> None:
        self.stops += 1


class DialogueHarness:
    """Dialogue engine wired to mocks, recording its outcomes."""

    def __init__(self, auto_complete: bool = True) -> None:
        self.clock = ManualClock()
        self.backend = MockSpeechBackend(auto_complete=auto_complete)
        self.listening = RecordingListening()
        self.dialogue = DialogueEngine(SpeechOutputController(self.backend), self.listening, self.clock)
        self.results: list[DialogueResult] = []
        self.cancellations = 0
        self.dialogue.completed.subscribe(self.results.append)
        self.dialogue.cancelled.subscribe(self._cancelled)

    def _cancelled(self) -> None:
        self.cancellations += 1

    def answer(self, *answers: str) -> None:
        """Answer slots in turn, letting the question delay pass after each."""
        for text in answers:
            self.dialogue.handle_transcript(text)
            self.clock.advance(0.5)


@pytest.fixture
def harness() -> DialogueHarness:
    return DialogueHarness()


class TestSlotFilling:
    """Tests for asking and answering slots."""

    def test_start_asks_title(self, harness: DialogueHarness) -> None:
        harness.dialogue.start()

        assert harness.backend.spoken == [TASK_SLOTS[0].prompt]
        assert harness.dialogue.state.phase == DialoguePhase.AWAITING_ANSWER
        assert harness.dialogue.current_slot.field == "title"
        assert harness.listening.starts == 1

    def test_full_session(self, harness: DialogueHarness) -> None:
        harness.dialogue.start()

        harness.answer("Buy milk", "skip", "I'd say high priority", "skip", "tomorrow")
        assert harness.backend.last_spoken == REMINDER_QUESTION
        harness.dialogue.handle_transcript("no")

        assert len(harness.results) == 1
        draft = harness.results[0].draft
        assert draft.title == "Buy milk"
        assert draft.description is None
        assert draft.priority == Priority.HIGH
        assert draft.category is None
        assert draft.due_date == date(2025, 3, 11)
        assert harness.results[0].reminder_at is None
        assert harness.dialogue.is_active is False
        assert harness.listening.stops == 1

    def test_acknowledgements(self, harness: DialogueHarness) -> None:
        harness.dialogue.start()
        harness.answer("Buy milk", "two litres", "low", "shopping", "tomorrow")

        spoken = harness.backend.spoken
        assert "Got it! Buy milk." in spoken
        assert "Description noted. two litres." in spoken
        assert "Priority set to low." in spoken
        assert "Category added. shopping." in spoken
        assert "Due date set. Tuesday, March 11." in spoken

    def test_slots_asked_in_order(self, harness: DialogueHarness) -> None:
        harness.dialogue.start()
        harness.answer("Buy milk", "skip", "skip", "skip", "skip")

        prompts = [s for s in harness.backend.spoken if s in {slot.prompt for slot in TASK_SLOTS}]
        assert prompts == [slot.prompt for slot in TASK_SLOTS]

    def test_question_delay(self, harness: DialogueHarness) -> None:
        harness.dialogue.start()
        harness.dialogue.handle_transcript("Buy milk")

        assert harness.backend.last_spoken == "Got it! Buy milk."
        assert harness.clock.pending_delays == [0.5]
        harness.clock.advance(0.5)
        assert harness.backend.last_spoken == TASK_SLOTS[1].prompt

    def test_title_required(self, harness: DialogueHarness) -> None:
        harness.dialogue.start()

        harness.dialogue.handle_transcript("skip")
        assert harness.backend.last_spoken == TITLE_REQUIRED_PROMPT
        harness.dialogue.handle_transcript("")
        assert harness.backend.last_spoken == TITLE_REQUIRED_PROMPT
        assert harness.dialogue.current_slot.field == "title"

        harness.dialogue.handle_transcript("Buy milk")
        assert harness.backend.last_spoken == "Got it! Buy milk."

    def test_unmatched_priority_uses_default(self, harness: DialogueHarness) -> None:
        harness.dialogue.start()
        harness.answer("Buy milk", "skip", "urgent", "skip", "skip")
        harness.dialogue.handle_transcript("no")

        assert "Priority set to medium." in harness.backend.spoken
        assert harness.results[0].draft.priority == Priority.MEDIUM

    def test_unknown_due_date_left_unset(self, harness: DialogueHarness) -> None:
        harness.dialogue.start()
        harness.answer("Buy milk", "skip", "skip", "skip", "whenever")

        assert UNKNOWN_DATE_MESSAGE in harness.backend.spoken
        harness.dialogue.handle_transcript("no")
        assert harness.results[0].draft.due_date is None

    def test_start_while_active_is_ignored(self, harness: DialogueHarness) -> None:
        harness.dialogue.start()
        harness.dialogue.start()
        assert harness.backend.spoken == [TASK_SLOTS[0].prompt]

    def test_transcript_without_session_is_ignored(self, harness: DialogueHarness) -> None:
        harness.dialogue.handle_transcript("Buy milk")
        assert harness.backend.spoken == []
        assert harness.results == []


class TestQueueing:
    """Tests for transcripts heard while the engine is speaking."""

    def test_answer_during_prompt_is_queued(self) -> None:
        harness = DialogueHarness(auto_complete=False)
        harness.dialogue.start()
        assert harness.dialogue.state.phase == DialoguePhase.ASKING

        harness.dialogue.handle_transcript("Buy milk")
        assert harness.dialogue.state.draft.title == ""

        harness.backend.finish()

        assert harness.dialogue.state.draft.title == "Buy milk"
        assert harness.backend.last_spoken == "Got it! Buy milk."

    def test_queued_answers_apply_in_order(self) -> None:
        harness = DialogueHarness(auto_complete=False)
        harness.dialogue.start()
        harness.dialogue.handle_transcript("Buy milk")
        harness.dialogue.handle_transcript("from the corner shop")

        harness.backend.finish()
        harness.backend.finish()
        harness.clock.advance(0.5)
        harness.backend.finish()

        assert harness.dialogue.state.draft.description == "from the corner shop"


class TestCancel:
    """Tests for cancelling a session."""

    def test_cancel_phrase(self, harness: DialogueHarness) -> None:
        harness.dialogue.start()
        harness.dialogue.handle_transcript("Buy milk")

        harness.dialogue.handle_transcript("never mind")

        assert harness.cancellations == 1
        assert harness.results == []
        assert harness.dialogue.is_active is False
        assert harness.backend.last_spoken == CANCELLED_MESSAGE
        assert harness.listening.stops == 1

    def test_cancel_drops_pending_question(self, harness: DialogueHarness) -> None:
        harness.dialogue.start()
        harness.dialogue.handle_transcript("Buy milk")
        harness.dialogue.cancel()

        harness.clock.advance(5.0)

        assert harness.backend.last_spoken == CANCELLED_MESSAGE
        assert harness.clock.pending_count == 0

    def test_cancel_without_session_is_noop(self, harness: DialogueHarness) -> None:
        harness.dialogue.cancel()
        assert harness.cancellations == 0
        assert harness.backend.spoken == []

    def test_cancel_word_inside_answer_is_not_cancel(self, harness: DialogueHarness) -> None:
        harness.dialogue.start()
        harness.dialogue.handle_transcript("cancel gym membership")
        assert harness.dialogue.state.draft.title == "cancel gym membership"

    def test_abort_is_silent(self, harness: DialogueHarness) -> None:
        harness.dialogue.start()
        harness.dialogue.handle_transcript("Buy milk")
        spoken = harness.backend.spoken

        harness.dialogue.abort()
        harness.clock.advance(5.0)

        assert harness.dialogue.is_active is False
        assert harness.cancellations == 0
        assert harness.results == []
        assert harness.backend.spoken == spoken
        assert harness.clock.pending_count == 0


class TestReminderNegotiation:
    """Tests for the reminder question after the slots."""

    @pytest.fixture
    def at_reminder(self, harness: DialogueHarness) -> DialogueHarness:
        harness.dialogue.start()
        harness.answer("Buy milk", "skip", "skip", "skip", "skip")
        assert harness.dialogue.state.phase == DialoguePhase.AWAITING_REMINDER_CHOICE
        return harness

    def test_time_given_directly(self, at_reminder: DialogueHarness) -> None:
        expected = at_reminder.clock.now() + timedelta(minutes=30)

        at_reminder.dialogue.handle_transcript("in 30 minutes")

        assert at_reminder.results[0].reminder_at == expected
        assert at_reminder.backend.last_spoken == (
            "Reminder set for today at 12:30 PM. Creating your task now!"
        )

    def test_yes_then_time(self, at_reminder: DialogueHarness) -> None:
        at_reminder.dialogue.handle_transcript("yes")
        assert at_reminder.backend.last_spoken == REMINDER_TIME_PROMPT
        assert at_reminder.dialogue.state.phase == DialoguePhase.AWAITING_REMINDER_TIME

        at_reminder.dialogue.handle_transcript("tomorrow at 9")

        reminder_at = at_reminder.results[0].reminder_at
        assert (reminder_at.day, reminder_at.hour, reminder_at.minute) == (11, 9, 0)

    def test_unparseable_time_asks_again(self, at_reminder: DialogueHarness) -> None:
        at_reminder.dialogue.handle_transcript("yes")
        at_reminder.dialogue.handle_transcript("maybe later")

        assert at_reminder.backend.last_spoken == REMINDER_RETRY_PROMPT
        assert at_reminder.results == []

        at_reminder.dialogue.handle_transcript("no")
        assert at_reminder.results[0].reminder_at is None

    def test_no_finishes_without_reminder(self, at_reminder: DialogueHarness) -> None:
        at_reminder.dialogue.handle_transcript("No thanks")
        assert at_reminder.results[0].reminder_at is None
        assert at_reminder.results[0].draft.title == "Buy milk"
