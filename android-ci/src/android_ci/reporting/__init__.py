from __future__ import annotations

from android_ci.reporting.console import Console, Severity, configure_logging
from android_ci.reporting.report import HealthReport, Verdict, print_summary

__all__ = [
    "Console",
    "HealthReport",
    "Severity",
    "Verdict",
    "configure_logging",
    "print_summary",
]
