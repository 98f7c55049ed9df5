"""adb wrapper used by the emulator lifecycle.

This is a *minimal* controller: only the handful of adb operations the UI
test runner needs (boot property, device state, settings, emulator console
kill). Commands target the single running emulator (``adb -e``) unless an
explicit serial is given.

Notes
-----
* We do not attempt to provide a device farm controller here.
* A missing adb binary, one that cannot be executed or a hung adb call is
  reported as `AndroidControllerError`, the same as a non-zero exit.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


class AndroidControllerError(RuntimeError):
    """Raised when an adb operation fails."""


@dataclass(frozen=True)
class AdbResult:
    args: list[str]
    stdout: str
    stderr: str
    returncode: int

    def ok(self) -> bool:
        return self.returncode == 0


class AndroidController:
    """Thin wrapper around adb for boot polling and emulator shutdown."""

    def __init__(
        self,
        *,
        adb_path: str = "adb",
        serial: Optional[str] = None,
        timeout_s: float = 30.0,
    ) -> None:
        self._adb_path = adb_path
        self._serial = serial
        self._timeout_s = timeout_s

    @property
    def adb_path(self) -> str:
        return self._adb_path

    @property
    def serial(self) -> Optional[str]:
        return self._serial

    def _base_cmd(self) -> list[str]:
        cmd = [self._adb_path]
        if self._serial:
            cmd += ["-s", self._serial]
        else:
            cmd.append("-e")
        return cmd

    def adb(self, *args: str, timeout_s: float | None = None, check: bool = True) -> AdbResult:
        """Run an adb command and return stdout/stderr/returncode."""

        cmd = self._base_cmd() + list(args)
        logger.debug("adb: %s", " ".join(shlex.quote(c) for c in cmd))
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout_s if timeout_s is None else float(timeout_s),
            )
        except FileNotFoundError as e:
            raise AndroidControllerError(f"adb not found: {self._adb_path}") from e
        except subprocess.TimeoutExpired as e:
            raise AndroidControllerError(f"adb command timed out: {' '.join(cmd)}") from e
        except OSError as e:
            raise AndroidControllerError(f"cannot run adb {self._adb_path}: {e}") from e

        result = AdbResult(
            args=cmd,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            returncode=proc.returncode,
        )
        if check and not result.ok():
            raise AndroidControllerError(
                f"adb command failed (rc={result.returncode}): {' '.join(cmd)}\n"
                f"stdout: {result.stdout}\n"
                f"stderr: {result.stderr}"
            )
        return result

    def adb_shell(
        self,
        command: str,
        *,
        timeout_s: float | None = None,
        check: bool = True,
    ) -> AdbResult:
        return self.adb("shell", command, timeout_s=timeout_s, check=check)

    def getprop(self, name: str, *, timeout_s: float | None = None) -> str:
        res = self.adb_shell(f"getprop {shlex.quote(name)}", timeout_s=timeout_s)
        return res.stdout.strip()

    def boot_completed(self, *, timeout_s: float | None = 10.0) -> bool:
        """True once the device reports ``sys.boot_completed=1``.

        A device that is not reachable yet is simply "not booted".
        """

        try:
            return self.getprop("sys.boot_completed", timeout_s=timeout_s) == "1"
        except AndroidControllerError as e:
            logger.debug("boot_completed probe failed: %s", e)
            return False

    def get_state(self, *, timeout_s: float | None = 10.0) -> Optional[str]:
        """Device state (``device``, ``offline``...) or None when no device answers."""

        try:
            res = self.adb("get-state", timeout_s=timeout_s, check=False)
        except AndroidControllerError as e:
            logger.debug("get-state failed: %s", e)
            return None
        if not res.ok():
            return None
        return res.stdout.strip() or None

    def is_device_present(self) -> bool:
        return self.get_state() is not None

    def settings_put(
        self,
        *,
        namespace: str,
        key: str,
        value: str,
        timeout_s: float | None = None,
        check: bool = True,
    ) -> AdbResult:
        cmd = " ".join(shlex.quote(p) for p in ("settings", "put", namespace, key, value))
        return self.adb_shell(cmd, timeout_s=timeout_s, check=check)

    def emu_kill(self, *, timeout_s: float | None = None) -> AdbResult:
        """Ask the emulator console to shut the emulator down."""

        return self.adb("emu", "kill", timeout_s=timeout_s, check=False)
