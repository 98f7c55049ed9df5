"""SIGINT/SIGTERM handling for the UI test runner.

The first signal sets the cancellation event and raises `TerminationSignal`
in the main thread, so the active ``with`` block unwinds and the emulator is
torn down. Once the event is set (first signal, or the lifecycle entering
teardown) further signals are only logged, so they cannot interrupt cleanup.
"""

from __future__ import annotations

import contextlib
import logging
import signal
import threading
from typing import Iterator, Optional, Sequence

logger = logging.getLogger(__name__)

SIGNAL_EXIT_CODE = 130


class TerminationSignal(Exception):
    """Raised from the signal handler; unwinds to the CLI which exits 130."""

    exit_code = SIGNAL_EXIT_CODE

    def __init__(self, signum: int) -> None:
        self.signum = signum
        try:
            name = signal.Signals(signum).name
        except ValueError:
            name = str(signum)
        super().__init__(f"received {name}")


@contextlib.contextmanager
def termination_signals(
    cancel: Optional[threading.Event] = None,
    *,
    signums: Sequence[int] = (signal.SIGINT, signal.SIGTERM),
) -> Iterator[threading.Event]:
    event = cancel if cancel is not None else threading.Event()

    def _handler(signum, frame):  # noqa: ARG001
        if event.is_set():
            logger.warning("Ignoring signal %s; already terminating.", signum)
            return
        event.set()
        raise TerminationSignal(signum)

    previous = {}
    for signum in signums:
        previous[signum] = signal.getsignal(signum)
        signal.signal(signum, _handler)
    try:
        yield event
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
