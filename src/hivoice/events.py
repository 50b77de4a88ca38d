"""Single-subscriber event ports.

Each signal the engine exposes (wake word detected, listening state
changed, transcript delivered, ...) is an ``EventPort``. Registering a
handler replaces the previous one: only one handler is active at a time.
"""

import logging
from collections.abc import Callable
from typing import Generic, ParamSpec

logger = logging.getLogger(__name__)

P = ParamSpec("P")


class EventPort(Generic[P]):
    """A named slot holding at most one handler."""

    def __init__(self, name: str) -> None:
        """Initialize an empty port.

        Args:
            name: Signal name, used in log messages
        """
        self._name = name
        self._handler: Callable[P, None] | None = None

    @property
    def name(self) -> str:
        """Get the signal name."""
        return self._name

    @property
    def has_subscriber(self) -> bool:
        """Check if a handler is registered."""
        return self._handler is not None

    def subscribe(self, handler: Callable[P, None] | None) -> None:
        """Register a handler, replacing any existing one.

        Args:
            handler: Callable to invoke on emit, or None to clear
        """
        if self._handler is not None and handler is not None:
            logger.debug(f"Replacing handler on '{self._name}' port")
        self._handler = handler

    def clear(self) -> None:
        """Remove the registered handler."""
        self._handler = None

    def emit(self, *args: P.args, **kwargs: P.kwargs) -> None:
        """Invoke the registered handler, if any."""
        if self._handler is None:
            logger.debug(f"No subscriber for '{self._name}', event dropped")
            return
        self._handler(*args, **kwargs)


__all__ = ["EventPort"]
