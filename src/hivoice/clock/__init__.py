"""Clock and timer service for hivoice.

Provides the real event loop clock and a manual clock for tests.
"""

from .base import Clock, TimerHandle
from .loop import EventLoopClock
from .mock import ManualClock


def create_clock(use_mock: bool = False) -> Clock:
    """Create a clock instance.

    Args:
        use_mock: If True, return a manually advanced clock for testing

    Returns:
        Clock implementation
    """
    if use_mock:
        return ManualClock()
    return EventLoopClock()


__all__ = [
    "Clock",
    "EventLoopClock",
    "ManualClock",
    "TimerHandle",
    "create_clock",
]
