"""Console recognizer that treats typed lines as speech.

Used by the demo shell on hosts without a speech recognizer. Each line
read from the input stream becomes one final result. Lines starting with
"!" inject recognizer events for manual testing: "!network", "!no-speech",
"!not-allowed", "!end".
"""

import logging
import sys
import threading
from typing import TextIO

from ..clock import Clock
from ..errors import RecognizerStateError
from .recognizer import RecognitionErrorCode, RecognitionListener, RecognizerSettings, Utterance

logger = logging.getLogger(__name__)


class ConsoleRecognizer:
    """Recognizer fed from a text stream.

    The reader thread never touches listener state directly; every event
    is posted to the clock's loop.
    """

    def __init__(self, clock: Clock, stream: TextIO | None = None) -> None:
        """Initialize console recognizer.

        Args:
            clock: Loop that receives all events
            stream: Input stream (default: sys.stdin)
        """
        self._clock = clock
        self._stream = stream or sys.stdin
        self._listener: RecognitionListener | None = None
        self._settings = RecognizerSettings()
        self._running = False
        self._lock = threading.Lock()
        self._reader: threading.Thread | None = None

    @property
    def is_available(self) -> bool:
        """Console input is always available."""
        return True

    def configure(self, settings: RecognizerSettings) -> None:
        """Store settings (language is informational only)."""
        self._settings = settings

    def attach(self, listener: RecognitionListener) -> None:
        """Attach the event listener."""
        self._listener = listener

    def start(self) -> None:
        """Begin forwarding lines."""
        with self._lock:
            if self._running:
                raise RecognizerStateError("recognition has already started")
            self._running = True

        if self._reader is None:
            self._reader = threading.Thread(target=self._read_loop, name="console-recognizer", daemon=True)
            self._reader.start()

        self._clock.call_soon(self._emit_start)

    def stop(self) -> None:
        """Stop forwarding lines."""
        with self._lock:
            was_running = self._running
            self._running = False
        if was_running:
            self._clock.call_soon(self._emit_end)

    def _emit_start(self) -> None:
        if self._listener is not None:
            self._listener.on_session_start()

    def _emit_end(self) -> None:
        if self._listener is not None:
            self._listener.on_session_end()

    def _read_loop(self) -> None:
        for raw in self._stream:
            line = raw.strip()
            with self._lock:
                if not self._running:
                    logger.debug(f"Ignoring input while not listening: {line!r}")
                    continue

            if line.startswith("!"):
                self._clock.call_soon(lambda code=line[1:]: self._inject(code))
            else:
                utterance = Utterance(text=line, confidence=1.0, is_final=True)
                self._clock.call_soon(lambda u=utterance: self._deliver(u))

        logger.info("Console input closed")

    def _deliver(self, utterance: Utterance) -> None:
        if self._listener is not None:
            self._listener.on_result(utterance)

    def _inject(self, code: str) -> None:
        if self._listener is None:
            return
        if code == "end":
            with self._lock:
                self._running = False
            self._listener.on_session_end()
            return

        self._listener.on_error(RecognitionErrorCode.from_code(code))
        with self._lock:
            was_running = self._running
            self._running = False
        if was_running:
            self._listener.on_session_end()


__all__ = ["ConsoleRecognizer"]
