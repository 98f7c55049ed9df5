"""Deadline-bounded polling with cooperative cancellation."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional


class PollCancelled(RuntimeError):
    """Raised when a wait observes the cancellation event."""


class Deadline:
    """Wall-clock deadline computed once, at construction."""

    def __init__(self, timeout_s: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._timeout_s = float(timeout_s)
        self._end = clock() + self._timeout_s

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    def remaining(self) -> float:
        return max(0.0, self._end - self._clock())

    def expired(self) -> bool:
        return self._clock() >= self._end


def wait_interval(
    interval_s: float,
    *,
    cancel: Optional[threading.Event] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Sleep one polling interval, raising `PollCancelled` if cancellation is requested."""

    if cancel is not None and cancel.is_set():
        raise PollCancelled("wait cancelled")
    sleep(interval_s)
    if cancel is not None and cancel.is_set():
        raise PollCancelled("wait cancelled")
