"""Speech input controller.

Owns the single recognition session. Implements wake-word matching,
error classification with a bounded fixed-delay retry budget, permanent
disabling, and routing of transcripts to the active consumer.

Recognizer errors never escape this module: they become state
transitions, a final spoken message, and at most one alert per cause.
"""

import logging
from typing import TYPE_CHECKING

from ..config import WakeWordConfig
from ..errors import RecognizerStateError
from ..events import EventPort
from ..recognition.recognizer import RecognitionErrorCode, RecognizerSettings, Utterance
from . import session as transitions
from .session import DisableReason, ErrorAction, ErrorKind, ListeningState, RecognitionSession

if TYPE_CHECKING:
    from ..clock import Clock, TimerHandle
    from ..recognition.recognizer import Recognizer
    from .output import SpeechOutputController

logger = logging.getLogger(__name__)

DISABLE_MESSAGES: dict[DisableReason, str] = {
    DisableReason.RETRIES_EXHAUSTED: (
        "Speech recognition keeps failing, so I've stopped listening. "
        "Check your connection and reset voice control to try again."
    ),
    DisableReason.INSECURE_ORIGIN: (
        "Speech recognition needs a secure connection. "
        "Open the app over HTTPS or from localhost to use voice commands."
    ),
    DisableReason.PERMISSION_DENIED: (
        "Microphone access was denied. "
        "Allow microphone access, then reset voice control to use voice commands."
    ),
}


class SpeechInputController:
    """Drives the recognizer through the listening state machine.

    Signals (single subscriber each):
        wake_word_detected(): the wake phrase was heard
        listening_changed(bool): the recognizer started or stopped capturing
        transcript(str): a final transcript while actively listening
        alert(DisableReason, str): listening was disabled, shown once per cause
    """

    def __init__(
        self,
        recognizer: "Recognizer",
        output: "SpeechOutputController",
        clock: "Clock",
        config: WakeWordConfig | None = None,
    ) -> None:
        """Initialize the controller and attach it to the recognizer.

        Args:
            recognizer: Speech recognition capability
            output: Controller used for acknowledgement and error messages
            clock: Loop used for retry timers
            config: Wake phrase, origin and retry settings
        """
        self._recognizer = recognizer
        self._output = output
        self._clock = clock
        self._config = config or WakeWordConfig()
        self._wake_phrase = self._config.phrase.lower().strip()
        self._secure_origin = transitions.is_secure_origin(self._config.origin)

        self._session = RecognitionSession()
        self._retry: TimerHandle | None = None
        self._alerted: set[DisableReason] = set()

        self.wake_word_detected: EventPort[[]] = EventPort("wake_word_detected")
        self.listening_changed: EventPort[[bool]] = EventPort("listening_changed")
        self.transcript: EventPort[[str]] = EventPort("transcript")
        self.alert: EventPort[[DisableReason, str]] = EventPort("alert")

        self._recognizer.configure(
            RecognizerSettings(language=self._config.language, continuous=True, interim_results=True)
        )
        self._recognizer.attach(self)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def session(self) -> RecognitionSession:
        """Get the current session snapshot."""
        return self._session

    @property
    def state(self) -> ListeningState:
        """Get the current listening state."""
        return self._session.state

    @property
    def retry_count(self) -> int:
        """Get consecutive failures since the last success."""
        return self._session.retry_count

    @property
    def is_listening(self) -> bool:
        """Check if the recognizer is capturing."""
        return self._session.running

    @property
    def has_pending_retry(self) -> bool:
        """Check if a retry restart is scheduled."""
        return self._retry is not None

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def start_wake_word_listening(self) -> None:
        """Listen for the wake phrase.

        Idempotent. Logs and returns if recognition is unavailable or
        disabled; a disabled session needs reset() first.
        """
        if not self._recognizer.is_available:
            logger.warning("Speech recognition not available")
            return
        if self._session.is_disabled:
            logger.warning("Wake word listening is disabled; reset required")
            return

        self._set(transitions.begin_wake_word(self._session))
        if self._session.running:
            logger.debug("Speech recognition already listening")
            self._defer_start_if_stopping()
            return
        self._request_start()

    def start_active_listening(self) -> None:
        """Listen for a transcript for the active session."""
        if not self._recognizer.is_available:
            logger.warning("Speech recognition not available")
            return
        if self._session.is_disabled:
            logger.warning("Active listening is disabled; reset required")
            return

        self._set(transitions.begin_active(self._session))
        if self._session.running:
            self._defer_start_if_stopping()
            return
        self._request_start()

    def stop_wake_word_listening(self) -> None:
        """Stop listening entirely. Safe to call when already stopped."""
        self._cancel_retry()
        self._set(transitions.go_idle(self._session))
        self._request_stop()

    def stop_active_listening(self) -> None:
        """End active listening. No effect unless actively listening."""
        if self._session.state != ListeningState.ACTIVE_LISTENING:
            return
        self._cancel_retry()
        self._set(transitions.go_idle(self._session))
        self._request_stop()

    def reset(self) -> None:
        """Clear a permanent disable and the retry budget."""
        self._cancel_retry()
        self._alerted.clear()
        self._set(transitions.reset(self._session))
        logger.info("Speech input reset")

    def shutdown(self) -> None:
        """Stop listening and cancel timers."""
        self._cancel_retry()
        self._set(transitions.go_idle(self._session))
        self._request_stop()

    # ------------------------------------------------------------------
    # Recognizer events
    # ------------------------------------------------------------------

    def on_session_start(self) -> None:
        """Handle the recognizer's session-start event."""
        self._set(transitions.session_started(self._session))
        self.listening_changed.emit(True)

    def on_session_end(self) -> None:
        """Handle the recognizer's session-end event.

        While waiting for the wake word the session is restarted after a
        fixed delay, so wake-word listening stays available even though
        recognizers end sessions on their own. An active session that
        ended without being asked to is restarted the same way. A start
        requested while the stop was still pending is issued now.
        """
        requested = self._session.stop_requested
        pending_start = self._session.start_pending
        self._set(transitions.session_ended(self._session))
        self.listening_changed.emit(False)

        if self._session.is_disabled or self._retry is not None:
            return
        if pending_start and self._session.state in (
            ListeningState.WAITING_FOR_WAKE_WORD,
            ListeningState.ACTIVE_LISTENING,
        ):
            logger.debug("Issuing start deferred behind a stop request")
            self._request_start()
            return
        if transitions.can_restart(self._session, self._config.max_retries):
            self._schedule_retry(self._config.restart_delay)
        elif self._session.state == ListeningState.ACTIVE_LISTENING and not requested:
            self._schedule_retry(self._config.restart_delay)

    def on_result(self, utterance: Utterance) -> None:
        """Handle a recognition result. Interim results are ignored."""
        if not utterance.is_final:
            return

        text = utterance.text.lower().strip()
        state = self._session.state

        if state == ListeningState.WAITING_FOR_WAKE_WORD:
            self._set(transitions.result_received(self._session))
            if self._wake_phrase in text:
                self._handle_wake_word()
            else:
                logger.debug(f"No wake phrase in: {text!r}")
        elif state == ListeningState.ACTIVE_LISTENING:
            self._set(transitions.result_received(self._session))
            logger.info(f"Heard: {text!r} (confidence {utterance.confidence:.2f})")
            self.transcript.emit(text)
        else:
            logger.debug(f"Ignoring result in state {state.value}: {text!r}")

    def on_error(self, code: RecognitionErrorCode) -> None:
        """Classify a recognizer error and apply the retry policy."""
        self._cancel_retry()

        kind = transitions.classify_error(code, self._secure_origin)
        if kind == ErrorKind.ABORTED:
            logger.debug("Speech recognition aborted")
            return

        logger.warning(f"Speech recognition error: {code.value} ({kind.value})")
        session, action = transitions.apply_error(self._session, kind, self._config.max_retries)
        self._set(session)

        if action == ErrorAction.RETRY:
            delay = self._retry_delay(kind)
            logger.warning(
                f"Retry {self._session.retry_count}/{self._config.max_retries} in {delay:.1f}s"
            )
            self._schedule_retry(delay)
        elif action == ErrorAction.DISABLE and self._session.disabled_reason is not None:
            self._handle_disable(self._session.disabled_reason)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set(self, session: RecognitionSession) -> None:
        if session.state != self._session.state:
            logger.info(f"Listening state: {self._session.state.value} -> {session.state.value}")
        self._session = session

    def _request_start(self) -> None:
        try:
            self._recognizer.start()
        except RecognizerStateError:
            logger.info("Speech recognition was already running, syncing state")
            self._set(transitions.session_started(self._session))
        except Exception as e:
            logger.error(f"Error starting speech recognition: {e}")
            self.on_error(RecognitionErrorCode.OTHER)

    def _defer_start_if_stopping(self) -> None:
        if self._session.stop_requested:
            logger.debug("Stop still pending, deferring start until session end")
            self._set(transitions.defer_start(self._session))

    def _request_stop(self) -> None:
        if not self._session.running or self._session.stop_requested:
            return
        self._set(transitions.request_stop(self._session))
        try:
            self._recognizer.stop()
        except Exception as e:
            logger.error(f"Error stopping speech recognition: {e}")

    def _retry_delay(self, kind: ErrorKind) -> float:
        if kind == ErrorKind.TRANSIENT_NETWORK:
            return self._config.network_retry_delay
        if kind == ErrorKind.NO_INPUT:
            return self._config.no_speech_delay
        return self._config.unknown_retry_delay

    def _schedule_retry(self, delay: float) -> None:
        self._cancel_retry()
        self._retry = self._clock.call_later(delay, self._retry_start)

    def _cancel_retry(self) -> None:
        if self._retry is not None:
            self._retry.cancel()
            self._retry = None

    def _retry_start(self) -> None:
        self._retry = None
        state = self._session.state
        if state not in (ListeningState.WAITING_FOR_WAKE_WORD, ListeningState.ACTIVE_LISTENING):
            return
        if self._session.running:
            return
        logger.debug("Restarting speech recognition")
        self._request_start()

    def _handle_wake_word(self) -> None:
        logger.info(f"Wake word detected: '{self._wake_phrase}'")
        self._set(transitions.wake_word_detected(self._session))
        self.wake_word_detected.emit()
        if self._config.acknowledgement:
            self._output.speak(self._config.acknowledgement)

    def _handle_disable(self, reason: DisableReason) -> None:
        logger.error(f"Speech recognition permanently disabled: {reason.value}")
        self._request_stop()

        if reason in self._alerted:
            return
        self._alerted.add(reason)
        message = DISABLE_MESSAGES[reason]
        self._output.speak(message)
        self.alert.emit(reason, message)


__all__ = ["DISABLE_MESSAGES", "SpeechInputController"]
