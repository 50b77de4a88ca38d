"""Question slots for voice task creation.

Slots are asked strictly in order. Each one names the draft field it
fills, how its answer is interpreted, and the acknowledgement prefix
spoken after a valid answer.
"""

from dataclasses import dataclass
from enum import Enum


class SlotKind(Enum):
    """How a slot answer is interpreted."""

    TEXT = "text"
    CHOICE = "choice"
    DATE = "date"


@dataclass(frozen=True)
class QuestionSlot:
    """A single question in the task-creation dialogue.

    Attributes:
        field: TaskDraft attribute the answer fills
        prompt: Question spoken to the user
        kind: Interpretation rule for the answer
        follow_up: Acknowledgement prefix, followed by the stored value
        required: Skipping a required slot re-asks it
        options: Allowed values for CHOICE slots, in match order
    """

    field: str
    prompt: str
    kind: SlotKind
    follow_up: str
    required: bool = False
    options: tuple[str, ...] = ()


TITLE_REQUIRED_PROMPT = "Task title is required. Please tell me what you'd like to call this task."

TASK_SLOTS: tuple[QuestionSlot, ...] = (
    QuestionSlot(
        field="title",
        prompt="What would you like to call this task?",
        kind=SlotKind.TEXT,
        follow_up="Got it! ",
        required=True,
    ),
    QuestionSlot(
        field="description",
        prompt="Would you like to add a description? You can say 'skip' to continue.",
        kind=SlotKind.TEXT,
        follow_up="Description noted. ",
    ),
    QuestionSlot(
        field="priority",
        prompt="What's the priority level? Say 'high', 'medium', or 'low'.",
        kind=SlotKind.CHOICE,
        follow_up="Priority set to ",
        options=("high", "medium", "low"),
    ),
    QuestionSlot(
        field="category",
        prompt="What category is this task? For example: work, personal, shopping, or say 'skip'.",
        kind=SlotKind.TEXT,
        follow_up="Category added. ",
    ),
    QuestionSlot(
        field="due_date",
        prompt=(
            "When is this due? You can say things like 'today', 'tomorrow', "
            "'next Friday', or 'skip'."
        ),
        kind=SlotKind.DATE,
        follow_up="Due date set. ",
    ),
)


__all__ = ["QuestionSlot", "SlotKind", "TASK_SLOTS", "TITLE_REQUIRED_PROMPT"]
