"""Toolchain health checks (Java, Gradle wrapper, Android SDK layout)."""

from __future__ import annotations

from android_ci.health.checks import HealthContext, HealthOptions, run_health_checks

__all__ = [
    "HealthContext",
    "HealthOptions",
    "run_health_checks",
]
