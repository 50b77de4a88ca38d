"""Clock protocol and timer handle.

Every delayed action in the engine (retry restarts, question pacing,
reminder timers) goes through a Clock. The clock is also the single
logical event loop: callbacks it runs never overlap.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Protocol


class TimerHandle(Protocol):
    """Handle to a scheduled callback."""

    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""
        ...

    @property
    def cancelled(self) -> bool:
        """True once cancel() has been called."""
        ...


class Clock(Protocol):
    """Interface for time and delayed callbacks.

    Implementations must run all callbacks on one logical thread of
    control, in due-time order, never concurrently.
    """

    def now(self) -> datetime:
        """Return the current time as a timezone-aware datetime."""
        ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Schedule callback to run after delay seconds.

        Args:
            delay: Seconds to wait. Values <= 0 run on the next loop turn.
            callback: Zero-argument callable

        Returns:
            Handle that can cancel the callback
        """
        ...

    def call_soon(self, callback: Callable[[], None]) -> TimerHandle:
        """Schedule callback to run on the next loop turn.

        Safe to call from helper threads; this is how capability adapters
        hand results back to the loop.
        """
        ...


__all__ = ["Clock", "TimerHandle"]
