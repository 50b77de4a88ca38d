"""Mock notifier for testing."""

from collections.abc import Callable
from dataclasses import dataclass


@dataclass
class ShownNotification:
    """A notification recorded by MockNotifier."""

    title: str
    body: str
    on_click: Callable[[], None] | None = None


class MockNotifier:
    """Records shown notifications."""

    def __init__(self) -> None:
        self._shown: list[ShownNotification] = []

    @property
    def shown(self) -> list[ShownNotification]:
        """Get notifications shown so far."""
        return list(self._shown)

    def show(self, title: str, body: str, on_click: Callable[[], None] | None = None) -> None:
        self._shown.append(ShownNotification(title, body, on_click))

    def click_last(self) -> bool:
        """Simulate activating the most recent notification.

        Returns:
            True if a click handler ran
        """
        if not self._shown or self._shown[-1].on_click is None:
            return False
        self._shown[-1].on_click()
        return True

    def clear(self) -> None:
        """Clear recorded notifications."""
        self._shown.clear()


__all__ = ["MockNotifier", "ShownNotification"]
