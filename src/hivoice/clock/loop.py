"""Real-time event loop clock.

Runs scheduled callbacks one at a time on a dedicated dispatcher thread.
Helper threads (stdin readers, subprocess waiters) post work with
call_soon(); the loop is the only place engine state is touched.
"""

import heapq
import itertools
import logging
import threading
import time
from collections.abc import Callable
from datetime import datetime

logger = logging.getLogger(__name__)


class LoopTimer:
    """Scheduled callback entry in the loop's heap."""

    def __init__(self, due: float, seq: int, callback: Callable[[], None]) -> None:
        self.due = due
        self.seq = seq
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        """Cancel this timer."""
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        """Check if cancelled."""
        return self._cancelled

    def __lt__(self, other: "LoopTimer") -> bool:
        return (self.due, self.seq) < (other.due, other.seq)


class EventLoopClock:
    """Clock backed by a monotonic-time dispatcher thread.

    Callbacks that raise are logged and do not stop the loop.
    """

    def __init__(self) -> None:
        """Initialize an idle loop. Call start() or run_forever() to dispatch."""
        self._heap: list[LoopTimer] = []
        self._cond = threading.Condition()
        self._seq = itertools.count()
        self._running = False
        self._thread: threading.Thread | None = None

    def now(self) -> datetime:
        """Return local wall-clock time (timezone-aware)."""
        return datetime.now().astimezone()

    def call_later(self, delay: float, callback: Callable[[], None]) -> LoopTimer:
        """Schedule callback after delay seconds."""
        timer = LoopTimer(time.monotonic() + max(0.0, delay), next(self._seq), callback)
        with self._cond:
            heapq.heappush(self._heap, timer)
            self._cond.notify()
        return timer

    def call_soon(self, callback: Callable[[], None]) -> LoopTimer:
        """Schedule callback on the next loop turn."""
        return self.call_later(0.0, callback)

    @property
    def is_running(self) -> bool:
        """Check if the dispatcher is running."""
        return self._running

    def start(self) -> None:
        """Run the dispatcher on a background daemon thread."""
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(target=self._loop, name="hivoice-loop", daemon=True)
        self._thread.start()
        logger.debug("Event loop started")

    def run_forever(self) -> None:
        """Run the dispatcher on the calling thread until stop() is called."""
        self._running = True
        self._loop()

    def stop(self) -> None:
        """Stop dispatching. Pending timers are discarded."""
        with self._cond:
            self._running = False
            self._heap.clear()
            self._cond.notify_all()

        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=2.0)
        self._thread = None
        logger.debug("Event loop stopped")

    def _next_ready(self) -> LoopTimer | None:
        """Block until a timer is due or the loop stops."""
        with self._cond:
            while self._running:
                while self._heap and self._heap[0].cancelled:
                    heapq.heappop(self._heap)

                if not self._heap:
                    self._cond.wait()
                    continue

                wait = self._heap[0].due - time.monotonic()
                if wait <= 0:
                    return heapq.heappop(self._heap)
                self._cond.wait(timeout=wait)
        return None

    def _loop(self) -> None:
        while True:
            timer = self._next_ready()
            if timer is None:
                return
            try:
                timer.callback()
            except Exception:
                logger.exception("Unhandled error in loop callback")


__all__ = ["EventLoopClock", "LoopTimer"]
