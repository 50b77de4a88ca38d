"""Notification capability.

Triggered reminders with a notification delivery mode are shown through
a Notifier. The default implementation writes them to the log.
"""

import logging
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Interface for user-visible notifications."""

    def show(self, title: str, body: str, on_click: Callable[[], None] | None = None) -> None:
        """Show a notification.

        Args:
            title: Notification title
            body: Notification body
            on_click: Called if the user activates the notification
        """
        ...


class LoggingNotifier:
    """Notifier that logs notifications at INFO level."""

    def show(self, title: str, body: str, on_click: Callable[[], None] | None = None) -> None:
        logger.info(f"[{title}] {body}")


__all__ = ["LoggingNotifier", "Notifier"]
