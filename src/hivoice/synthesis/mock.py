"""Mock speech backend for testing.

Records spoken texts. Utterances complete only when the test calls
finish(), unless auto_complete is enabled.
"""

from collections.abc import Callable


class MockSpeechBackend:
    """Mock speech backend for testing."""

    def __init__(self, auto_complete: bool = False) -> None:
        """Initialize mock backend.

        Args:
            auto_complete: Call on_done synchronously inside speak()
        """
        self._auto_complete = auto_complete
        self._spoken: list[str] = []
        self._pending: Callable[[], None] | None = None
        self._cancel_count = 0

    @property
    def is_available(self) -> bool:
        """Mock backend is always available."""
        return True

    def speak(
        self,
        text: str,
        rate: float,
        pitch: float,
        volume: float,
        on_done: Callable[[], None],
    ) -> None:
        """Record text and hold its completion callback."""
        self._spoken.append(text)
        if self._auto_complete:
            on_done()
            return
        self._pending = on_done

    def cancel(self) -> None:
        """Drop the held callback."""
        self._cancel_count += 1
        self._pending = None

    def finish(self) -> bool:
        """Complete the current utterance.

        Returns:
            True if an utterance was in progress
        """
        callback = self._pending
        self._pending = None
        if callback is None:
            return False
        callback()
        return True

    def finish_all(self, limit: int = 50) -> int:
        """Complete utterances until none is in progress.

        Completion callbacks often start the next utterance; this drains
        the chain.

        Returns:
            Number of utterances completed
        """
        count = 0
        while count < limit and self.finish():
            count += 1
        return count

    @property
    def speaking(self) -> bool:
        """Check if an utterance is awaiting completion."""
        return self._pending is not None

    @property
    def spoken(self) -> list[str]:
        """Get list of spoken texts."""
        return self._spoken.copy()

    @property
    def last_spoken(self) -> str | None:
        """Get the most recent text."""
        return self._spoken[-1] if self._spoken else None

    @property
    def cancel_count(self) -> int:
        """Get number of cancel calls."""
        return self._cancel_count

    def clear(self) -> None:
        """Reset mock state."""
        self._spoken.clear()
        self._pending = None
        self._cancel_count = 0


__all__ = ["MockSpeechBackend"]
