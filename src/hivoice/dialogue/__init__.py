"""Voice dialogue for hivoice: commands and task-creation sessions."""

from .commands import VoiceCommand, describe_active_tasks, find_task_by_command, match_command
from .engine import DialogueEngine, DialoguePhase, DialogueResult, DialogueState
from .parsing import (
    format_reminder_time,
    is_cancel_phrase,
    is_skip_answer,
    parse_due_date,
    parse_reminder_time,
    resolve_option,
)
from .slots import TASK_SLOTS, QuestionSlot, SlotKind

__all__ = [
    "DialogueEngine",
    "DialoguePhase",
    "DialogueResult",
    "DialogueState",
    "QuestionSlot",
    "SlotKind",
    "TASK_SLOTS",
    "VoiceCommand",
    "describe_active_tasks",
    "find_task_by_command",
    "format_reminder_time",
    "is_cancel_phrase",
    "is_skip_answer",
    "match_command",
    "parse_due_date",
    "parse_reminder_time",
    "resolve_option",
]
