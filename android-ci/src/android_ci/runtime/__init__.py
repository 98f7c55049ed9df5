"""Runtime helpers for the UI test runner (emulator lifecycle, polling, signals)."""

from __future__ import annotations

from android_ci.runtime.polling import Deadline, PollCancelled, wait_interval
from android_ci.runtime.signals import TerminationSignal, termination_signals

__all__ = [
    "Deadline",
    "PollCancelled",
    "TerminationSignal",
    "termination_signals",
    "wait_interval",
]
