"""Manual clock for testing.

Time only moves when the test calls advance(), so retry delays and
reminder timers can be asserted exactly without real sleeps.
"""

from collections.abc import Callable
from datetime import datetime, timedelta

from .loop import LoopTimer


class ManualClock:
    """Clock whose time is advanced explicitly."""

    def __init__(self, start: datetime | None = None) -> None:
        """Initialize the clock.

        Args:
            start: Initial time. Defaults to a fixed local-time instant so
                   tests are independent of the wall clock.
        """
        if start is None:
            start = datetime(2025, 3, 10, 12, 0, 0).astimezone()
        self._now = start
        self._elapsed: float = 0.0
        self._seq = 0
        self._timers: list[LoopTimer] = []

    def now(self) -> datetime:
        """Return the simulated current time."""
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> LoopTimer:
        """Schedule callback at elapsed + delay."""
        self._seq += 1
        timer = LoopTimer(self._elapsed + max(0.0, delay), self._seq, callback)
        self._timers.append(timer)
        return timer

    def call_soon(self, callback: Callable[[], None]) -> LoopTimer:
        """Schedule callback for the current instant."""
        return self.call_later(0.0, callback)

    def advance(self, seconds: float) -> int:
        """Move time forward, running every callback that falls due.

        Callbacks scheduled by other callbacks run too if they fall inside
        the window. Time is set to each timer's due instant before it runs.

        Returns:
            Number of callbacks run
        """
        target = self._elapsed + seconds
        ran = 0
        while True:
            timer = self._pop_due(target)
            if timer is None:
                break
            self._set_elapsed(timer.due)
            timer.callback()
            ran += 1
        self._set_elapsed(target)
        return ran

    def run_pending(self) -> int:
        """Run callbacks that are due now without moving time."""
        return self.advance(0.0)

    def set_time(self, when: datetime) -> None:
        """Jump wall-clock time without firing timers."""
        self._now = when

    @property
    def pending_count(self) -> int:
        """Number of scheduled, uncancelled callbacks."""
        return sum(1 for t in self._timers if not t.cancelled)

    @property
    def pending_delays(self) -> list[float]:
        """Remaining delays of scheduled callbacks, soonest first."""
        return sorted(t.due - self._elapsed for t in self._timers if not t.cancelled)

    def _pop_due(self, target: float) -> LoopTimer | None:
        live = [t for t in self._timers if not t.cancelled and t.due <= target]
        if not live:
            self._timers = [t for t in self._timers if not t.cancelled]
            return None
        timer = min(live)
        self._timers.remove(timer)
        return timer

    def _set_elapsed(self, elapsed: float) -> None:
        if elapsed > self._elapsed:
            self._now += timedelta(seconds=elapsed - self._elapsed)
            self._elapsed = elapsed


__all__ = ["ManualClock"]
