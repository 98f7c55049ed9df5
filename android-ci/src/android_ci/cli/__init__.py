"""Command-line entry points (``android-ci-health-check``, ``android-ci-run-ui-tests``)."""
