"""Tagged console output over the standard `logging` module.

Verdict lines go through the ``android_ci.console`` logger and render as
``[<timestamp> ]<TAG>  <message>``; every other ``android_ci.*`` logger keeps
the plain ``[LEVEL] name: message`` format and is mostly DEBUG.
"""

from __future__ import annotations

import logging
import os
import sys
from enum import Enum
from typing import IO, Optional

CONSOLE_LOGGER = "android_ci.console"
_ROOT_LOGGER = "android_ci"
_HANDLER_MARK = "_android_ci_console"

_ANSI = {
    "bold": "\033[1m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
}
_RESET = "\033[0m"


class Severity(str, Enum):
    INFO = "INFO"
    OK = "OK"
    WARN = "WARN"
    FAIL = "FAIL"


_SEVERITY_LEVEL = {
    Severity.INFO: logging.INFO,
    Severity.OK: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.FAIL: logging.ERROR,
}
_SEVERITY_COLOR = {
    Severity.INFO: "cyan",
    Severity.OK: "green",
    Severity.WARN: "yellow",
    Severity.FAIL: "red",
}


def color_enabled(stream: IO[str]) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:
        return False


class ConsoleFormatter(logging.Formatter):
    def __init__(self, *, timestamps: bool = False, color: bool = False) -> None:
        super().__init__("[%(levelname)s] %(name)s: %(message)s")
        self._timestamps = timestamps
        self._color = color

    def _paint(self, text: str, color: Optional[str]) -> str:
        if not self._color or not color:
            return text
        return f"{_ANSI[color]}{text}{_RESET}"

    def format(self, record: logging.LogRecord) -> str:
        if record.name != CONSOLE_LOGGER:
            return super().format(record)

        message = record.getMessage()
        tag = getattr(record, "tag", None)
        if tag:
            # Pad before painting so escape codes don't skew alignment.
            line = self._paint(f"{tag:<6}", _SEVERITY_COLOR.get(Severity(tag))) + message
        else:
            line = self._paint(message, getattr(record, "color", None))

        if getattr(record, "plain", False) or not self._timestamps:
            return line
        return f"{self.formatTime(record, '%Y-%m-%d %H:%M:%S')} {line}"


def configure_logging(
    *,
    timestamps: bool = False,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
    color: Optional[bool] = None,
) -> logging.Handler:
    """Install the console handler on the ``android_ci`` logger (replacing ours)."""

    stream = stream if stream is not None else sys.stdout
    root = logging.getLogger(_ROOT_LOGGER)
    for h in list(root.handlers):
        if getattr(h, _HANDLER_MARK, False):
            root.removeHandler(h)

    handler = logging.StreamHandler(stream)
    setattr(handler, _HANDLER_MARK, True)
    handler.setFormatter(
        ConsoleFormatter(
            timestamps=timestamps,
            color=color_enabled(stream) if color is None else color,
        )
    )
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.propagate = False
    return handler


class Console:
    """One-line, severity-tagged progress output."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(CONSOLE_LOGGER)

    def emit(self, severity: Severity, message: str) -> None:
        self._logger.log(
            _SEVERITY_LEVEL[severity], "%s", message, extra={"tag": severity.value}
        )

    def info(self, message: str) -> None:
        self.emit(Severity.INFO, message)

    def ok(self, message: str) -> None:
        self.emit(Severity.OK, message)

    def warn(self, message: str) -> None:
        self.emit(Severity.WARN, message)

    def fail(self, message: str) -> None:
        self.emit(Severity.FAIL, message)

    def say(self, text: str = "", *, color: Optional[str] = None, plain: bool = True) -> None:
        self._logger.info("%s", text, extra={"color": color, "plain": plain})

    def step(self, title: str) -> None:
        self.say("")
        self.say(f"── {title} " + "─" * 41, color="bold", plain=False)
