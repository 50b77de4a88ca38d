"""Spoken answer interpretation.

Skip and cancel detection, enumerated option matching, due-date phrases
and reminder time phrases. Every resolver takes the reference time as an
argument so results are deterministic under a test clock.
"""

import re
from datetime import date, datetime, timedelta

SKIP_WORDS = frozenset({"skip", "no", "none", "nothing", "nope", "pass"})
NEGATIVE_WORDS = frozenset({"no", "nope", "nah", "skip", "never"})
AFFIRMATIVE_WORDS = frozenset({"yes", "yeah", "yep", "sure", "ok", "okay", "please"})
CANCEL_PHRASES = frozenset({"cancel", "stop", "never mind", "nevermind"})

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

# Longest words first so "forty-five" wins over "forty"
_WORD_NUMBERS = (
    ("forty-five", "45"),
    ("fortyfive", "45"),
    ("twenty-five", "25"),
    ("one", "1"),
    ("two", "2"),
    ("three", "3"),
    ("four", "4"),
    ("five", "5"),
    ("six", "6"),
    ("seven", "7"),
    ("eight", "8"),
    ("nine", "9"),
    ("ten", "10"),
    ("eleven", "11"),
    ("twelve", "12"),
    ("fifteen", "15"),
    ("twenty", "20"),
    ("thirty", "30"),
    ("forty", "40"),
    ("fifty", "50"),
    ("sixty", "60"),
)

_RELATIVE_RE = re.compile(
    r"(?:in\s+)?(\d+)\s*(seconds?|secs?|minutes?|mins?|hours?|hrs?|days?)\b"
)
_AT_CLOCK_RE = re.compile(r"\bat\s+(\d{1,2})(?:[:.](\d{2}))?\s*(am|pm)?\b")
_BARE_CLOCK_RE = re.compile(r"\b(\d{1,2})(?:[:.](\d{2}))?\s*(am|pm)\b")


def _words(text: str) -> set[str]:
    return set(re.findall(r"[a-z']+", text.lower()))


def is_skip_answer(text: str) -> bool:
    """Check if an answer means "leave this unset".

    Empty answers and answers containing a skip word ("skip", "no",
    "none", ...) count as skips.
    """
    if not text.strip():
        return True
    return bool(_words(text) & SKIP_WORDS)


def is_negative(text: str) -> bool:
    """Check if an answer declines."""
    return bool(_words(text) & NEGATIVE_WORDS)


def is_affirmative(text: str) -> bool:
    """Check if an answer accepts."""
    return bool(_words(text) & AFFIRMATIVE_WORDS)


def is_cancel_phrase(text: str) -> bool:
    """Check if a transcript is exactly a cancel request."""
    normalized = re.sub(r"[^a-z ]", "", text.lower()).strip()
    return normalized in CANCEL_PHRASES


def resolve_option(text: str, options: tuple[str, ...], fallback: str) -> str:
    """Pick the first option mentioned in the answer.

    Args:
        text: Spoken answer
        options: Allowed values, in match order
        fallback: Value used when no option is mentioned

    Returns:
        Matched option or the fallback
    """
    lowered = text.lower()
    for option in options:
        if option in lowered:
            return option
    return fallback


def parse_due_date(text: str, today: date) -> date | None:
    """Resolve a spoken due-date phrase to a calendar date.

    Understands "today", "tomorrow", "day after tomorrow", "next week",
    "in N days" and weekday names (the next such day after today).

    Args:
        text: Spoken phrase
        today: Reference date

    Returns:
        Resolved date, or None if the phrase is not understood
    """
    lowered = _word_to_number(text.lower())

    if "day after tomorrow" in lowered:
        return today + timedelta(days=2)
    if "today" in lowered or "tonight" in lowered:
        return today
    if "tomorrow" in lowered:
        return today + timedelta(days=1)
    if "next week" in lowered:
        return today + timedelta(days=7)

    days_match = re.search(r"in\s+(\d+)\s+days?\b", lowered)
    if days_match:
        return today + timedelta(days=int(days_match.group(1)))

    for index, name in enumerate(WEEKDAYS):
        if name in lowered:
            ahead = (index - today.weekday()) % 7 or 7
            return today + timedelta(days=ahead)

    return None


def format_due_date(value: date) -> str:
    """Format a due date for speech, e.g. "Tuesday, March 11"."""
    return f"{value.strftime('%A, %B')} {value.day}"


def _word_to_number(text: str) -> str:
    """Convert word numbers to digits.

    Args:
        text: Text potentially containing word numbers.

    Returns:
        Text with word numbers converted to digits.
    """
    result = text.lower()
    result = re.sub(r"\bhalf an? hour\b", "30 minutes", result)
    result = re.sub(r"\ban? (second|minute|hour|day)\b", r"1 \1", result)
    for word, digit in _WORD_NUMBERS:
        result = re.sub(rf"\b{word}\b", digit, result)
    return result


def _parse_clock(text: str) -> tuple[int, int] | None:
    match = _AT_CLOCK_RE.search(text) or _BARE_CLOCK_RE.search(text)
    if not match:
        return None

    hour = int(match.group(1))
    minute = int(match.group(2)) if match.group(2) else 0
    period = match.group(3)

    if period:
        if hour < 1 or hour > 12:
            return None
        if period == "pm" and hour != 12:
            hour += 12
        elif period == "am" and hour == 12:
            hour = 0

    if hour > 23 or minute > 59:
        return None
    return hour, minute


def _at(day: datetime, hour: int, minute: int = 0) -> datetime:
    return day.replace(hour=hour, minute=minute, second=0, microsecond=0)


def parse_reminder_time(text: str, now: datetime, default_hour: int = 9) -> datetime | None:
    """Parse a natural language time expression into a datetime.

    Args:
        text: Spoken time (e.g., "in 30 minutes", "tomorrow at 9", "at 3:30 pm").
        now: Reference time; the result carries its timezone.
        default_hour: Hour used for "tomorrow" and "next week" without a time.

    Returns:
        Datetime for the reminder, or None if unparseable.

    Examples:
        "in one minute"  -> now + 1 minute
        "half an hour"   -> now + 30 minutes
        "at 3 pm"        -> today at 15:00, or tomorrow if already past
        "tomorrow"       -> tomorrow at 09:00
        "next week"      -> same weekday next week at 09:00
    """
    if not text:
        return None

    text = text.lower().strip().replace("a.m.", "am").replace("p.m.", "pm")
    text = _word_to_number(text)

    relative = _RELATIVE_RE.search(text)
    if relative:
        amount = int(relative.group(1))
        unit = relative.group(2)
        if unit.startswith(("hour", "hr")):
            return now + timedelta(hours=amount)
        if unit.startswith("sec"):
            return now + timedelta(seconds=amount)
        if unit.startswith("day"):
            return now + timedelta(days=amount)
        return now + timedelta(minutes=amount)

    clock = _parse_clock(text)

    if "next week" in text:
        hour, minute = clock or (default_hour, 0)
        return _at(now + timedelta(days=7), hour, minute)

    if "tomorrow" in text:
        hour, minute = clock or (default_hour, 0)
        return _at(now + timedelta(days=1), hour, minute)

    if clock is not None:
        result = _at(now, *clock)
        # If the time has passed today, schedule for tomorrow
        if result <= now:
            result += timedelta(days=1)
        return result

    return None


def format_reminder_time(when: datetime, now: datetime) -> str:
    """Format a reminder time for speech relative to now.

    Returns:
        e.g. "today at 3:30 PM", "tomorrow at 9:00 AM" or
        "Monday, March 17 at 9:00 AM"
    """
    clock = f"{when.hour % 12 or 12}:{when.minute:02d} {'AM' if when.hour < 12 else 'PM'}"
    days = (when.date() - now.date()).days
    if days == 0:
        return f"today at {clock}"
    if days == 1:
        return f"tomorrow at {clock}"
    return f"{format_due_date(when.date())} at {clock}"


__all__ = [
    "CANCEL_PHRASES",
    "format_due_date",
    "format_reminder_time",
    "is_affirmative",
    "is_cancel_phrase",
    "is_negative",
    "is_skip_answer",
    "parse_due_date",
    "parse_reminder_time",
    "resolve_option",
]
