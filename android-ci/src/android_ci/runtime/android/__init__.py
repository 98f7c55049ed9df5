"""Android runtime helpers.

This package intentionally contains *thin* wrappers around adb/emulator
operations: the adb controller and the single-emulator lifecycle used by the
UI test runner.
"""
