# glyphgrid/scheduling.py
from __future__ import annotations

"""
Call coalescing for the canvas controller.

Debouncer      : cancel-and-reschedule timer; only the last call in a quiet
                 period runs.
FrameCoalescer : at most one queued mutation per frame; a newer request
                 replaces the pending one; run_frame() executes it.
"""

import itertools
import threading
from typing import Any, Callable, Dict, Optional, Tuple

from .constants import DEBOUNCE_SECONDS


class Debouncer:
    """
    Wrap callback so rapid calls collapse into one.

    Each call cancels the pending timer and schedules a new one with the
    latest arguments. flush() runs a pending call now; cancel() drops it.
    """

    def __init__(self, callback: Callable[..., Any], delay: float = DEBOUNCE_SECONDS) -> None:
        self._callback = callback
        self._delay = max(0.0, float(delay))
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[Tuple[Tuple[Any, ...], Dict[str, Any]]] = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            timer = threading.Timer(self._delay, self._fire)
            timer.daemon = True
            self._timer = timer
        timer.start()

    def _take(self) -> Optional[Tuple[Tuple[Any, ...], Dict[str, Any]]]:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            call, self._pending = self._pending, None
            return call

    def _fire(self) -> None:
        call = self._take()
        if call is not None:
            self._callback(*call[0], **call[1])

    def flush(self) -> bool:
        """Run the pending call immediately. Returns True if one ran."""
        call = self._take()
        if call is None:
            return False
        self._callback(*call[0], **call[1])
        return True

    def cancel(self) -> None:
        self._take()


class FrameCoalescer:
    """
    Pending-frame token guarding a single queued callback.

    request() queues work for the next frame, replacing anything already
    queued. run_frame() is called once per frame by the host and executes the
    queued work, if any. cancel() clears the token.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._token: Optional[int] = None
        self._callback: Optional[Callable[[], Any]] = None

    @property
    def pending(self) -> bool:
        return self._token is not None

    def request(self, callback: Callable[[], Any]) -> int:
        self._token = next(self._counter)
        self._callback = callback
        return self._token

    def cancel(self) -> None:
        self._token = None
        self._callback = None

    def run_frame(self) -> bool:
        """Execute the queued callback. Returns True if one ran."""
        if self._token is None or self._callback is None:
            return False
        callback = self._callback
        self.cancel()
        callback()
        return True


__all__ = ["Debouncer", "FrameCoalescer"]
