"""Recognition session state and pure transition functions.

The speech input controller never mutates its session in place: every
change goes through one of the functions below, which take a
RecognitionSession and return a new one. Retry counting and permanent
disabling live here so they can be tested without a recognizer.
"""

from dataclasses import dataclass, replace
from enum import Enum
from urllib.parse import urlparse

from ..recognition.recognizer import RecognitionErrorCode

LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "::1", "[::1]"})


class ListeningState(Enum):
    """State of the single recognition session."""

    IDLE = "idle"
    WAITING_FOR_WAKE_WORD = "waiting_for_wake_word"
    ACTIVE_LISTENING = "active_listening"
    PERMANENTLY_DISABLED = "permanently_disabled"


class ErrorKind(Enum):
    """Classification of a recognizer error."""

    TRANSIENT_NETWORK = "transient_network"
    INSECURE_ORIGIN = "insecure_origin"
    PERMISSION_DENIED = "permission_denied"
    NO_INPUT = "no_input"
    ABORTED = "aborted"
    UNKNOWN = "unknown"


class DisableReason(Enum):
    """Why listening was permanently disabled."""

    RETRIES_EXHAUSTED = "retries_exhausted"
    INSECURE_ORIGIN = "insecure_origin"
    PERMISSION_DENIED = "permission_denied"


class ErrorAction(Enum):
    """What the controller does after an error."""

    RETRY = "retry"
    DISABLE = "disable"
    IGNORE = "ignore"


@dataclass(frozen=True)
class RecognitionSession:
    """Immutable snapshot of the recognition session.

    Attributes:
        state: Current listening state
        retry_count: Consecutive failed attempts since the last success
        running: True between the recognizer's session-start and session-end
        stop_requested: True while a stop request awaits its session-end
        start_pending: True if a start was asked for while a stop was pending
        disabled_reason: Cause of the permanent disable, if any
    """

    state: ListeningState = ListeningState.IDLE
    retry_count: int = 0
    running: bool = False
    stop_requested: bool = False
    start_pending: bool = False
    disabled_reason: DisableReason | None = None

    @property
    def is_disabled(self) -> bool:
        """Check if listening is permanently disabled."""
        return self.state == ListeningState.PERMANENTLY_DISABLED

    @property
    def is_waiting(self) -> bool:
        """Check if the wake-word matcher owns the recognizer output."""
        return self.state == ListeningState.WAITING_FOR_WAKE_WORD


def is_secure_origin(origin: str) -> bool:
    """Check if an origin may use networked recognition.

    HTTPS origins and local hosts are secure.

    Args:
        origin: Origin URL such as "https://example.com"

    Returns:
        True for https:// origins and localhost addresses
    """
    parsed = urlparse(origin)
    if parsed.scheme == "https":
        return True
    host = (parsed.hostname or "").lower()
    return host in LOCAL_HOSTS


def classify_error(code: RecognitionErrorCode, secure_origin: bool) -> ErrorKind:
    """Map a recognizer error code onto an error kind.

    Args:
        code: Code reported by the recognizer
        secure_origin: Whether the engine runs on a secure origin

    Returns:
        ErrorKind for the policy table
    """
    if code == RecognitionErrorCode.NETWORK:
        return ErrorKind.TRANSIENT_NETWORK if secure_origin else ErrorKind.INSECURE_ORIGIN
    if code == RecognitionErrorCode.NOT_ALLOWED:
        return ErrorKind.PERMISSION_DENIED
    if code == RecognitionErrorCode.NO_SPEECH:
        return ErrorKind.NO_INPUT
    if code == RecognitionErrorCode.ABORTED:
        return ErrorKind.ABORTED
    return ErrorKind.UNKNOWN


def begin_wake_word(session: RecognitionSession) -> RecognitionSession:
    """Enter wake-word listening on an explicit start.

    The retry budget is refreshed only when no recognizer session is
    running. A disabled session is returned unchanged.
    """
    if session.is_disabled:
        return session
    retry_count = session.retry_count if session.running else 0
    return replace(session, state=ListeningState.WAITING_FOR_WAKE_WORD, retry_count=retry_count)


def begin_active(session: RecognitionSession) -> RecognitionSession:
    """Hand recognizer output to the active transcript consumer."""
    if session.is_disabled:
        return session
    return replace(session, state=ListeningState.ACTIVE_LISTENING)


def go_idle(session: RecognitionSession) -> RecognitionSession:
    """Leave listening. A disabled session stays disabled."""
    if session.is_disabled:
        return session
    return replace(session, state=ListeningState.IDLE, start_pending=False)


def request_stop(session: RecognitionSession) -> RecognitionSession:
    """Record that a stop request has been sent to the recognizer."""
    return replace(session, stop_requested=True)


def defer_start(session: RecognitionSession) -> RecognitionSession:
    """Remember a start that must wait for the pending session-end."""
    return replace(session, start_pending=True)


def session_started(session: RecognitionSession) -> RecognitionSession:
    """Apply the recognizer's session-start event.

    A start is not proof of health, so the retry count is kept.
    """
    return replace(session, running=True, stop_requested=False, start_pending=False)


def session_ended(session: RecognitionSession) -> RecognitionSession:
    """Apply the recognizer's session-end event."""
    return replace(session, running=False, stop_requested=False, start_pending=False)


def result_received(session: RecognitionSession) -> RecognitionSession:
    """Apply a successful final result: the recognizer is healthy."""
    return replace(session, retry_count=0)


def wake_word_detected(session: RecognitionSession) -> RecognitionSession:
    """Switch from wake-word matching to active listening."""
    return replace(session, state=ListeningState.ACTIVE_LISTENING, retry_count=0)


def disable(session: RecognitionSession, reason: DisableReason) -> RecognitionSession:
    """Enter the terminal disabled state."""
    return replace(
        session,
        state=ListeningState.PERMANENTLY_DISABLED,
        disabled_reason=reason,
        start_pending=False,
    )


def reset(session: RecognitionSession) -> RecognitionSession:
    """Explicit external reset: clear the disable and the retry budget."""
    return replace(session, state=ListeningState.IDLE, retry_count=0, disabled_reason=None)


def can_restart(session: RecognitionSession, max_retries: int) -> bool:
    """Check if an automatic restart is allowed after a session end."""
    return session.is_waiting and session.retry_count < max_retries


def apply_error(
    session: RecognitionSession,
    kind: ErrorKind,
    max_retries: int,
) -> tuple[RecognitionSession, ErrorAction]:
    """Apply the error policy table.

    Args:
        session: Current session
        kind: Classified error
        max_retries: Retry budget

    Returns:
        Tuple of (new session, action the controller should take)
    """
    if session.is_disabled:
        return session, ErrorAction.IGNORE

    if kind == ErrorKind.ABORTED:
        return session, ErrorAction.IGNORE

    if kind == ErrorKind.INSECURE_ORIGIN:
        return disable(session, DisableReason.INSECURE_ORIGIN), ErrorAction.DISABLE

    if kind == ErrorKind.PERMISSION_DENIED:
        return disable(session, DisableReason.PERMISSION_DENIED), ErrorAction.DISABLE

    if kind == ErrorKind.NO_INPUT:
        if can_restart(session, max_retries):
            return session, ErrorAction.RETRY
        return session, ErrorAction.IGNORE

    # Transient network and unknown errors share the retry budget
    bumped = replace(session, retry_count=session.retry_count + 1)
    if bumped.retry_count < max_retries:
        return bumped, ErrorAction.RETRY
    return disable(bumped, DisableReason.RETRIES_EXHAUSTED), ErrorAction.DISABLE


__all__ = [
    "DisableReason",
    "ErrorAction",
    "ErrorKind",
    "ListeningState",
    "RecognitionSession",
    "apply_error",
    "begin_active",
    "begin_wake_word",
    "can_restart",
    "classify_error",
    "defer_start",
    "disable",
    "go_idle",
    "is_secure_origin",
    "request_stop",
    "reset",
    "result_received",
    "session_ended",
    "session_started",
    "wake_word_detected",
]
