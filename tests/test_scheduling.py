"""Tests for debouncing and per-frame coalescing."""

from __future__ import annotations

import threading

from glyphgrid.scheduling import Debouncer, FrameCoalescer


class TestDebouncer:
    def test_burst_collapses_to_last_call(self):
        calls = []
        debounced = Debouncer(lambda *a, **k: calls.append((a, k)), delay=60)
        debounced(1)
        debounced(2)
        debounced(3, flag=True)
        assert debounced.pending
        assert calls == []
        assert debounced.flush() is True
        assert calls == [((3,), {"flag": True})]
        assert not debounced.pending
        assert debounced.flush() is False

    def test_cancel_drops_pending_call(self):
        calls = []
        debounced = Debouncer(calls.append, delay=60)
        debounced("x")
        debounced.cancel()
        assert not debounced.pending
        assert debounced.flush() is False
        assert calls == []

    def test_timer_fires_after_quiet_period(self):
        fired = threading.Event()
        seen = []

        def callback(value):
            seen.append(value)
            fired.set()

        debounced = Debouncer(callback, delay=0.01)
        debounced("a")
        debounced("b")
        assert fired.wait(timeout=5)
        assert seen == ["b"]


class TestFrameCoalescer:
    def test_only_latest_request_runs(self):
        calls = []
        frames = FrameCoalescer()
        first = frames.request(lambda: calls.append(1))
        second = frames.request(lambda: calls.append(2))
        assert second != first
        assert frames.pending
        assert frames.run_frame() is True
        assert calls == [2]
        assert not frames.pending

    def test_empty_frame_is_noop(self):
        assert FrameCoalescer().run_frame() is False

    def test_cancel(self):
        calls = []
        frames = FrameCoalescer()
        frames.request(lambda: calls.append(1))
        frames.cancel()
        assert frames.run_frame() is False
        assert calls == []
