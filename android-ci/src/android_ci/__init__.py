"""android-ci: pre-flight checks and emulator glue for Android UI test jobs.

Two entry points are provided:
- a health check that validates Java, Gradle and the Android SDK layout
- a UI test runner that boots an AVD, runs the connected test task and
  always tears the emulator down again
"""

__all__ = [
    "cli",
    "health",
    "reporting",
    "runtime",
    "versioning",
]
