"""Mock recognizer for testing.

Provides a scriptable recognizer: tests push results, errors and session
ends into the attached listener and inspect the start/stop requests the
controller made.
"""

from ..errors import RecognizerStateError
from .recognizer import RecognitionErrorCode, RecognitionListener, RecognizerSettings, Utterance


class MockRecognizer:
    """Mock recognizer for testing.

    With auto_ack enabled (the default), start() and stop() acknowledge
    synchronously by emitting session-start / session-end.
    """

    def __init__(self, available: bool = True, auto_ack: bool = True) -> None:
        """Initialize mock recognizer.

        Args:
            available: Value reported by is_available
            auto_ack: Emit session events immediately on start/stop
        """
        self._available = available
        self._auto_ack = auto_ack
        self._listener: RecognitionListener | None = None
        self._settings = RecognizerSettings()
        self._running = False
        self._start_calls = 0
        self._stop_calls = 0

    @property
    def is_available(self) -> bool:
        """Get configured availability."""
        return self._available

    def configure(self, settings: RecognizerSettings) -> None:
        """Store settings."""
        self._settings = settings

    def attach(self, listener: RecognitionListener) -> None:
        """Attach the event listener."""
        self._listener = listener

    def start(self) -> None:
        """Record a start request."""
        self._start_calls += 1
        if self._running:
            raise RecognizerStateError("recognition has already started")
        if self._auto_ack:
            self.emit_start()

    def stop(self) -> None:
        """Record a stop request."""
        self._stop_calls += 1
        if self._auto_ack and self._running:
            self.emit_end()

    def emit_start(self) -> None:
        """Emit session-start."""
        self._running = True
        if self._listener is not None:
            self._listener.on_session_start()

    def emit_end(self) -> None:
        """Emit session-end."""
        self._running = False
        if self._listener is not None:
            self._listener.on_session_end()

    def emit_result(self, text: str, confidence: float = 0.9, is_final: bool = True) -> None:
        """Emit a recognition result."""
        if self._listener is not None:
            self._listener.on_result(Utterance(text=text, confidence=confidence, is_final=is_final))

    def emit_error(self, code: RecognitionErrorCode | str, end_session: bool = True) -> None:
        """Emit an error, followed by session-end like a browser recognizer.

        Args:
            code: Error code or raw error string
            end_session: Also emit session-end if a session is running
        """
        if isinstance(code, str):
            code = RecognitionErrorCode.from_code(code)
        if self._listener is not None:
            self._listener.on_error(code)
        if end_session and self._running:
            self.emit_end()

    @property
    def settings(self) -> RecognizerSettings:
        """Get applied settings."""
        return self._settings

    @property
    def running(self) -> bool:
        """Check if a session is running."""
        return self._running

    @property
    def start_calls(self) -> int:
        """Get number of start requests."""
        return self._start_calls

    @property
    def stop_calls(self) -> int:
        """Get number of stop requests."""
        return self._stop_calls

    def clear(self) -> None:
        """Reset call counters."""
        self._start_calls = 0
        self._stop_calls = 0


__all__ = ["MockRecognizer"]
