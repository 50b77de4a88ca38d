"""Notification capability for hivoice."""

import logging

from .mock import MockNotifier, ShownNotification
from .notifier import LoggingNotifier, Notifier

logger = logging.getLogger(__name__)


def create_notifier(use_mock: bool = False) -> Notifier:
    """Create a notifier.

    Args:
        use_mock: If True, return a recording mock for testing

    Returns:
        Notifier implementation
    """
    if use_mock:
        logger.info("Notify: Using MockNotifier (requested)")
        return MockNotifier()
    return LoggingNotifier()


__all__ = [
    "LoggingNotifier",
    "MockNotifier",
    "Notifier",
    "ShownNotification",
    "create_notifier",
]
