"""Unit tests for clocks and event ports."""

import threading
from datetime import datetime, timedelta

from hivoice.clock import EventLoopClock, ManualClock, create_clock
from hivoice.events import EventPort


class TestManualClock:
    """Tests for the manually advanced clock."""

    def test_default_start_is_fixed(self) -> None:
        clock = ManualClock()
        assert clock.now() == datetime(2025, 3, 10, 12, 0, 0).astimezone()
        assert clock.now().tzinfo is not None

    def test_callbacks_run_in_due_order(self) -> None:
        clock = ManualClock()
        ran: list[str] = []
        clock.call_later(2.0, lambda: ran.append("b"))
        clock.call_later(1.0, lambda: ran.append("a"))
        clock.call_later(2.0, lambda: ran.append("c"))

        assert clock.advance(1.5) == 1
        assert ran == ["a"]
        clock.advance(1.0)
        assert ran == ["a", "b", "c"]

    def test_advance_moves_wall_time(self) -> None:
        clock = ManualClock()
        start = clock.now()
        seen: list[datetime] = []
        clock.call_later(30.0, lambda: seen.append(clock.now()))

        clock.advance(60.0)

        assert seen == [start + timedelta(seconds=30)]
        assert clock.now() == start + timedelta(seconds=60)

    def test_cancelled_timer_never_runs(self) -> None:
        clock = ManualClock()
        ran: list[bool] = []
        handle = clock.call_later(1.0, lambda: ran.append(True))

        handle.cancel()
        handle.cancel()
        clock.advance(5.0)

        assert ran == []
        assert handle.cancelled is True
        assert clock.pending_count == 0

    def test_nested_scheduling_inside_window(self) -> None:
        clock = ManualClock()
        ran: list[str] = []
        clock.call_later(1.0, lambda: clock.call_later(1.0, lambda: ran.append("nested")))

        clock.advance(2.0)

        assert ran == ["nested"]

    def test_pending_delays(self) -> None:
        clock = ManualClock()
        clock.call_later(3.0, lambda: None)
        clock.call_later(1.0, lambda: None)
        clock.advance(0.5)
        assert clock.pending_delays == [0.5, 2.5]

    def test_run_pending_runs_call_soon(self) -> None:
        clock = ManualClock()
        ran: list[bool] = []
        clock.call_soon(lambda: ran.append(True))
        assert clock.run_pending() == 1
        assert ran == [True]


class TestEventLoopClock:
    """Tests for the real-time dispatcher."""

    def test_runs_callbacks_on_loop_thread(self) -> None:
        clock = EventLoopClock()
        done = threading.Event()
        threads: list[str] = []

        def callback() -> None:
            threads.append(threading.current_thread().name)
            done.set()

        clock.start()
        try:
            clock.call_later(0.01, callback)
            assert done.wait(timeout=2.0)
        finally:
            clock.stop()

        assert threads == ["hivoice-loop"]
        assert clock.is_running is False

    def test_failing_callback_does_not_stop_loop(self) -> None:
        clock = EventLoopClock()
        done = threading.Event()

        def boom() -> None:
            raise ValueError("boom")

        clock.start()
        try:
            clock.call_soon(boom)
            clock.call_later(0.01, done.set)
            assert done.wait(timeout=2.0)
        finally:
            clock.stop()

    def test_cancelled_timer_is_skipped(self) -> None:
        clock = EventLoopClock()
        ran: list[str] = []
        done = threading.Event()

        clock.start()
        try:
            handle = clock.call_later(0.05, lambda: ran.append("cancelled"))
            handle.cancel()
            clock.call_later(0.1, done.set)
            assert done.wait(timeout=2.0)
        finally:
            clock.stop()

        assert ran == []

    def test_now_is_timezone_aware(self) -> None:
        assert EventLoopClock().now().tzinfo is not None

    def test_factory(self) -> None:
        assert isinstance(create_clock(use_mock=True), ManualClock)
        assert isinstance(create_clock(), EventLoopClock)


class TestEventPort:
    """Tests for single-subscriber event ports."""

    def test_emit_calls_handler(self) -> None:
        port: EventPort[[str]] = EventPort("transcript")
        seen: list[str] = []
        port.subscribe(seen.append)

        port.emit("hello")

        assert seen == ["hello"]
        assert port.has_subscriber is True
        assert port.name == "transcript"

    def test_subscribe_replaces_handler(self) -> None:
        port: EventPort[[str]] = EventPort("transcript")
        first: list[str] = []
        second: list[str] = []
        port.subscribe(first.append)
        port.subscribe(second.append)

        port.emit("hello")

        assert first == []
        assert second == ["hello"]

    def test_emit_without_subscriber_is_dropped(self) -> None:
        port: EventPort[[]] = EventPort("wake_word")
        port.emit()
        assert port.has_subscriber is False

    def test_clear(self) -> None:
        port: EventPort[[int]] = EventPort("count")
        seen: list[int] = []
        port.subscribe(seen.append)
        port.clear()
        port.emit(1)
        assert seen == []
