"""Console speech backend.

Prints utterances instead of speaking them. Completion is posted to the
loop after a pause proportional to the text length.
"""

import sys
from collections.abc import Callable
from typing import TextIO

from ..clock import Clock, TimerHandle

# Roughly 150 words per minute at rate 1.0
SECONDS_PER_WORD = 0.4


class ConsoleSpeechBackend:
    """Speech backend that writes to a text stream."""

    def __init__(self, clock: Clock, stream: TextIO | None = None, simulate_duration: bool = True) -> None:
        """Initialize console backend.

        Args:
            clock: Loop used to schedule completion
            stream: Output stream (default: sys.stdout)
            simulate_duration: Delay completion as if the text were spoken
        """
        self._clock = clock
        self._stream = stream or sys.stdout
        self._simulate_duration = simulate_duration
        self._pending: TimerHandle | None = None

    @property
    def is_available(self) -> bool:
        """Console output is always available."""
        return True

    def speak(
        self,
        text: str,
        rate: float,
        pitch: float,
        volume: float,
        on_done: Callable[[], None],
    ) -> None:
        """Print text and schedule completion."""
        self.cancel()
        print(f"[hivoice] {text}", file=self._stream, flush=True)

        delay = 0.0
        if self._simulate_duration:
            delay = len(text.split()) * SECONDS_PER_WORD / max(rate, 0.1)
        self._pending = self._clock.call_later(delay, on_done)

    def cancel(self) -> None:
        """Drop the scheduled completion."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None


__all__ = ["ConsoleSpeechBackend"]
