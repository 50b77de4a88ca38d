"""Speech output controller.

Serializes spoken utterances with a supersession model: a new utterance
cancels the one in flight and drops its completion callback.
"""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import SpeechConfig
    from ..synthesis.backend import SpeechBackend

logger = logging.getLogger(__name__)


class SpeechOutputController:
    """Speaks one utterance at a time.

    Each utterance gets a sequence token; a completion only counts if its
    token is still current, so a superseded or cancelled utterance never
    fires its callback and a current one fires at most once.
    """

    def __init__(
        self,
        backend: "SpeechBackend",
        config: "SpeechConfig | None" = None,
    ) -> None:
        """Initialize the controller.

        Args:
            backend: Speech synthesis capability
            config: Rate, pitch and volume settings
        """
        self._backend = backend
        self._rate = config.rate if config is not None else 0.9
        self._pitch = config.pitch if config is not None else 1.0
        self._volume = config.volume if config is not None else 0.8
        self._token = 0
        self._in_flight: int | None = None
        self._on_complete: Callable[[], None] | None = None
        self._current_text: str | None = None

    @property
    def is_speaking(self) -> bool:
        """Check if an utterance is in flight."""
        return self._in_flight is not None

    @property
    def current_text(self) -> str | None:
        """Get the text of the utterance in flight."""
        return self._current_text

    def speak(self, text: str, on_complete: Callable[[], None] | None = None) -> None:
        """Speak text, superseding anything in flight.

        Args:
            text: Text to speak
            on_complete: Called once when this utterance finishes
        """
        if self._in_flight is not None:
            logger.debug(f"Superseding utterance: {self._current_text!r}")
            self._backend.cancel()

        self._token += 1
        token = self._token
        self._in_flight = token
        self._on_complete = on_complete
        self._current_text = text

        logger.info(f"Speaking: {text}")
        try:
            self._backend.speak(
                text,
                self._rate,
                self._pitch,
                self._volume,
                lambda: self._finished(token),
            )
        except Exception as e:
            # Treat a failed synthesis as finished so the caller's flow goes on
            logger.error(f"Speech synthesis failed: {e}")
            self._finished(token)

    def cancel(self) -> None:
        """Stop the utterance in flight without firing its callback."""
        if self._in_flight is None:
            return
        self._in_flight = None
        self._on_complete = None
        self._current_text = None
        self._backend.cancel()

    def _finished(self, token: int) -> None:
        if token != self._in_flight:
            logger.debug(f"Ignoring completion of superseded utterance #{token}")
            return

        callback = self._on_complete
        self._in_flight = None
        self._on_complete = None
        self._current_text = None

        if callback is not None:
            callback()


__all__ = ["SpeechOutputController"]
