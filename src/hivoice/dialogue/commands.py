"""Voice command interpretation.

Maps a transcript heard right after the wake word to a command, and
builds the spoken responses for the task-list commands.
"""

import re
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..tasks import Task


class VoiceCommand(Enum):
    """Commands understood after the wake word."""

    CREATE_TASK = "create_task"
    COMPLETE_TASK = "complete_task"
    SHOW_TASKS = "show_tasks"
    HELP = "help"
    UNKNOWN = "unknown"


# Checked in order; the first command with a matching phrase wins
COMMAND_PHRASES: tuple[tuple[VoiceCommand, tuple[str, ...]], ...] = (
    (VoiceCommand.CREATE_TASK, ("create task", "add task", "new task", "make task")),
    (VoiceCommand.COMPLETE_TASK, ("complete", "finish", "done", "mark complete")),
    (VoiceCommand.SHOW_TASKS, ("show tasks", "list tasks", "my tasks", "view tasks")),
    (VoiceCommand.HELP, ("help", "what can you do", "commands")),
)

CREATE_TASK_INTRO = "I'll help you create a new task. Let me ask you a few questions."
TASK_NOT_FOUND_MESSAGE = (
    "I couldn't find a specific task to complete. Please say the task name more clearly."
)
NO_ACTIVE_TASKS_MESSAGE = "You have no active tasks. Great job staying organized!"
HELP_MESSAGE = (
    "I can help you create tasks, complete tasks, show your task list, or set reminders. "
    "Just say 'Hi Voice' and tell me what you'd like to do!"
)
UNKNOWN_COMMAND_MESSAGE = (
    "I didn't understand that command. Try saying 'create task', 'show tasks', "
    "'complete task', or ask for help."
)
SHOW_TASKS_LIMIT = 5


def match_command(transcript: str) -> VoiceCommand:
    """Find the command a transcript asks for.

    Args:
        transcript: Final transcript

    Returns:
        Matched command, or VoiceCommand.UNKNOWN
    """
    text = transcript.lower().strip()
    for command, phrases in COMMAND_PHRASES:
        if any(phrase in text for phrase in phrases):
            return command
    return VoiceCommand.UNKNOWN


def find_task_by_command(command: str, tasks: list["Task"]) -> "Task | None":
    """Find the first open task sharing at least one word with the command."""
    words = set(re.findall(r"[\w']+", command.lower()))
    for task in tasks:
        if task.completed:
            continue
        if words & set(task.title.lower().split()):
            return task
    return None


def completed_message(task: "Task") -> str:
    return f'Great! I\'ve marked "{task.title}" as completed.'


def task_created_message(task: "Task") -> str:
    return f"Perfect! I've created your task \"{task.title}\". Say 'Hi Voice' anytime you need help!"


def describe_active_tasks(tasks: list["Task"]) -> str:
    """Summarize open tasks: the count and the first few titles."""
    active = [t for t in tasks if not t.completed]
    if not active:
        return NO_ACTIVE_TASKS_MESSAGE
    titles = ", ".join(t.title for t in active[:SHOW_TASKS_LIMIT])
    noun = "task" if len(active) == 1 else "tasks"
    return f"You have {len(active)} active {noun}. Here are your top tasks: {titles}"


__all__ = [
    "COMMAND_PHRASES",
    "CREATE_TASK_INTRO",
    "HELP_MESSAGE",
    "NO_ACTIVE_TASKS_MESSAGE",
    "TASK_NOT_FOUND_MESSAGE",
    "UNKNOWN_COMMAND_MESSAGE",
    "VoiceCommand",
    "completed_message",
    "describe_active_tasks",
    "find_task_by_command",
    "match_command",
    "task_created_message",
]
