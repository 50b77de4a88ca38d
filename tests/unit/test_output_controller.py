"""Unit tests for the speech output controller."""

from collections.abc import Callable

import pytest

from hivoice.config import SpeechConfig
from hivoice.synthesis import MockSpeechBackend
from hivoice.voice import SpeechOutputController


class FailingBackend:
    """Backend whose synthesis always raises."""

    is_available = True

    def speak(self, text: str, rate: float, pitch: float, volume: float, on_done: Callable[[], None]) -> None:
        raise RuntimeError("synthesizer crashed")

    def cancel(self) -> None:
        pass


@pytest.fixture
def backend() -> MockSpeechBackend:
    return MockSpeechBackend()


@pytest.fixture
def output(backend: MockSpeechBackend) -> SpeechOutputController:
    return SpeechOutputController(backend, SpeechConfig())


class TestSpeak:
    """Tests for speaking and completion."""

    def test_speak_reaches_backend(self, output: SpeechOutputController, backend: MockSpeechBackend) -> None:
        output.speak("Hello")
        assert backend.spoken == ["Hello"]
        assert output.is_speaking is True
        assert output.current_text == "Hello"

    def test_completion_fires_once(self, output: SpeechOutputController, backend: MockSpeechBackend) -> None:
        done: list[str] = []
        output.speak("Hello", on_complete=lambda: done.append("hello"))

        backend.finish()

        assert done == ["hello"]
        assert output.is_speaking is False
        assert backend.finish() is False
        assert done == ["hello"]

    def test_new_utterance_supersedes(self, output: SpeechOutputController, backend: MockSpeechBackend) -> None:
        done: list[str] = []
        output.speak("first", on_complete=lambda: done.append("first"))
        output.speak("second", on_complete=lambda: done.append("second"))

        assert backend.cancel_count == 1
        backend.finish()

        assert done == ["second"]

    def test_cancel_drops_callback(self, output: SpeechOutputController, backend: MockSpeechBackend) -> None:
        done: list[str] = []
        output.speak("Hello", on_complete=lambda: done.append("hello"))

        output.cancel()
        backend.finish()

        assert done == []
        assert output.is_speaking is False

    def test_cancel_when_idle_is_noop(self, output: SpeechOutputController, backend: MockSpeechBackend) -> None:
        output.cancel()
        assert backend.cancel_count == 0

    def test_stale_completion_is_ignored(self) -> None:
        # A backend that keeps every callback, including superseded ones
        callbacks: list[Callable[[], None]] = []

        class RecordingBackend:
            is_available = True

            def speak(self, text, rate, pitch, volume, on_done) -> None:
                callbacks.append(on_done)

            def cancel(self) -> None:
                pass

        output = SpeechOutputController(RecordingBackend())
        done: list[str] = []
        output.speak("first", on_complete=lambda: done.append("first"))
        output.speak("second", on_complete=lambda: done.append("second"))

        callbacks[0]()
        assert done == []
        assert output.is_speaking is True

        callbacks[1]()
        callbacks[1]()
        assert done == ["second"]

    def test_callback_may_speak_again(self, output: SpeechOutputController, backend: MockSpeechBackend) -> None:
        output.speak("one", on_complete=lambda: output.speak("two"))
        backend.finish()
        assert backend.spoken == ["one", "two"]
        assert output.current_text == "two"

    def test_synthesis_failure_counts_as_finished(self) -> None:
        output = SpeechOutputController(FailingBackend())
        done: list[bool] = []

        output.speak("Hello", on_complete=lambda: done.append(True))

        assert done == [True]
        assert output.is_speaking is False
