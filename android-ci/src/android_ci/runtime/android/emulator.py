"""Single-emulator lifecycle for UI test runs.

States::

    NOT_STARTED -> LAUNCHED -> BOOTED -> RUNNING_TESTS -> TERMINATING -> TERMINATED

`EmulatorLifecycle` owns the spawned emulator process and its log file for
the whole run. Used as a context manager it guarantees `teardown()` on every
exit path the interpreter can observe (normal return, exceptions, and
`TerminationSignal` raised from the SIGINT/SIGTERM handler). Teardown is
one-shot: later calls are no-ops.
"""

from __future__ import annotations

import collections
import datetime
import enum
import logging
import shlex
import subprocess
import threading
import time
from pathlib import Path
from typing import IO, Callable, Optional, Sequence

from android_ci.reporting.console import Console
from android_ci.runtime.android.controller import AndroidController, AndroidControllerError
from android_ci.runtime.polling import Deadline, PollCancelled, wait_interval
from android_ci.runtime.signals import TerminationSignal

logger = logging.getLogger(__name__)

DEFAULT_BOOT_TIMEOUT_S = 60.0
DEFAULT_POLL_INTERVAL_S = 1.0
SHUTDOWN_TIMEOUT_S = 60.0
LOG_TAIL_LINES = 50
COMMAND_NOT_FOUND_EXIT_CODE = 127


class EmulatorLifecycleError(RuntimeError):
    """A lifecycle step failed; the run stops with `exit_code`."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class LifecycleState(str, enum.Enum):
    NOT_STARTED = "not_started"
    LAUNCHED = "launched"
    BOOTED = "booted"
    RUNNING_TESTS = "running_tests"
    TERMINATING = "terminating"
    TERMINATED = "terminated"


class EmulatorTool:
    """The SDK ``emulator`` launcher/enumerator."""

    def __init__(self, *, emulator_path: str = "emulator", timeout_s: float = 30.0) -> None:
        self._emulator_path = emulator_path
        self._timeout_s = timeout_s

    @property
    def emulator_path(self) -> str:
        return self._emulator_path

    def list_avds(self) -> list[str]:
        cmd = [self._emulator_path, "-list-avds"]
        logger.debug("emulator: %s", " ".join(cmd))
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, timeout=self._timeout_s)
        except FileNotFoundError as e:
            raise EmulatorLifecycleError(f"emulator not found: {self._emulator_path}") from e
        except subprocess.TimeoutExpired as e:
            raise EmulatorLifecycleError("emulator -list-avds timed out") from e
        except OSError as e:
            raise EmulatorLifecycleError(f"cannot run emulator {self._emulator_path}: {e}") from e
        if proc.returncode != 0:
            raise EmulatorLifecycleError(
                f"emulator -list-avds failed (rc={proc.returncode}): {(proc.stderr or '').strip()}"
            )
        return [line.strip() for line in (proc.stdout or "").splitlines() if line.strip()]

    def launch(self, avd_name: str, *, log_file: IO[bytes]) -> subprocess.Popen:
        cmd = [self._emulator_path, "-avd", avd_name, "-no-snapshot"]
        logger.debug("emulator: %s", " ".join(shlex.quote(c) for c in cmd))
        try:
            return subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=log_file,
                stderr=subprocess.STDOUT,
            )
        except OSError as e:
            raise EmulatorLifecycleError(f"failed to start emulator: {e}") from e


def tail_lines(path: Path, n: int = LOG_TAIL_LINES) -> list[str]:
    try:
        with path.open("r", encoding="utf-8", errors="replace") as f:
            return [line.rstrip("\n") for line in collections.deque(f, maxlen=n)]
    except OSError:
        return []


class EmulatorLifecycle:
    """Launch, boot-wait, test and tear down one AVD."""

    def __init__(
        self,
        *,
        avd_name: str,
        log_dir: Path,
        controller: AndroidController,
        emulator: EmulatorTool,
        console: Optional[Console] = None,
        boot_timeout_s: float = DEFAULT_BOOT_TIMEOUT_S,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
        shutdown_timeout_s: float = SHUTDOWN_TIMEOUT_S,
        cancel: Optional[threading.Event] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        started_at: Optional[datetime.datetime] = None,
    ) -> None:
        self.avd_name = avd_name
        self.log_dir = Path(log_dir)
        self.boot_timeout_s = float(boot_timeout_s)
        self.poll_interval_s = float(poll_interval_s)
        self.shutdown_timeout_s = float(shutdown_timeout_s)
        self.cancel = cancel if cancel is not None else threading.Event()
        self.state = LifecycleState.NOT_STARTED

        self._controller = controller
        self._emulator = emulator
        self._console = console or Console()
        self._clock = clock
        self._sleep = sleep
        self._t0 = clock()
        stamp = (started_at or datetime.datetime.now()).strftime("%Y-%m-%d_%H-%M-%S")
        self.log_file = self.log_dir / f"{stamp}.log"

        self._process: Optional[subprocess.Popen] = None
        self._log_handle: Optional[IO[bytes]] = None
        self._cleanup_ran = False

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process is not None else None

    @property
    def cleanup_ran(self) -> bool:
        return self._cleanup_ran

    def __enter__(self) -> "EmulatorLifecycle":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if isinstance(exc, (TerminationSignal, PollCancelled)):
            self._console.warn("Received termination signal, exiting…")
        elif exc is not None and not isinstance(exc, EmulatorLifecycleError):
            self._console.fail(f"Error in state {self.state.value} ({type(exc).__name__}: {exc}).")
            logger.debug("unexpected error", exc_info=(exc_type, exc, tb))
        self.teardown()
        return False

    # ------------------------------- Launch -------------------------------

    def ensure_avd_exists(self) -> None:
        avds = self._emulator.list_avds()
        if self.avd_name in avds:
            self._console.ok(f"AVD '{self.avd_name}' exists.")
            return
        self._console.fail(f"AVD '{self.avd_name}' not found.")
        self._console.info("Available AVDs:")
        for name in avds:
            self._console.say(name)
        self._console.say("")
        raise EmulatorLifecycleError(f"AVD '{self.avd_name}' not found.")

    def launch(self) -> int:
        if self.state is not LifecycleState.NOT_STARTED:
            raise EmulatorLifecycleError(f"cannot launch from state {self.state.value}")
        self._console.step("Launch emulator")
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._console.info(f"Starting emulator '{self.avd_name}' (logs → {self.log_file})")
        self._log_handle = self.log_file.open("wb")
        try:
            self._process = self._emulator.launch(self.avd_name, log_file=self._log_handle)
        except BaseException:
            self._close_log()
            raise
        self.state = LifecycleState.LAUNCHED
        self._console.ok(f"Emulator PID: {self._process.pid}")
        return self._process.pid

    # ------------------------------ Boot wait ------------------------------

    def _process_alive(self) -> bool:
        return self._process is None or self._process.poll() is None

    def _fail_with_log_tail(self, message: str) -> None:
        self._console.fail(message)
        self._console.info(f"Last {LOG_TAIL_LINES} lines from emulator log:")
        if self._log_handle is not None:
            self._log_handle.flush()
        for line in tail_lines(self.log_file):
            self._console.say(line)
        raise EmulatorLifecycleError(message)

    def wait_for_boot(self) -> None:
        if self.state is not LifecycleState.LAUNCHED:
            raise EmulatorLifecycleError(f"cannot wait for boot from state {self.state.value}")
        self._console.step("Wait for boot")
        self._console.info(
            f"Waiting for emulator '{self.avd_name}' to report sys.boot_completed=1 "
            f"(timeout: {self.boot_timeout_s:g}s)…"
        )
        deadline = Deadline(self.boot_timeout_s, clock=self._clock)
        while not self._controller.boot_completed():
            if not self._process_alive():
                self._fail_with_log_tail(f"Emulator process {self.pid} exited during boot.")
            if deadline.expired():
                self._fail_with_log_tail(
                    f"Timeout waiting for emulator '{self.avd_name}' to fully boot."
                )
            wait_interval(self.poll_interval_s, cancel=self.cancel, sleep=self._sleep)
        self.state = LifecycleState.BOOTED
        self._console.ok("Emulator fully booted.")

    # ------------------------------- Device -------------------------------

    def set_show_touches(self, enabled: bool = True) -> bool:
        """Best-effort; a device that refuses the setting is only a warning."""

        value = "1" if enabled else "0"
        try:
            self._controller.settings_put(namespace="system", key="show_touches", value=value)
        except AndroidControllerError as e:
            logger.debug("show_touches=%s failed: %s", value, e)
            self._console.warn(f"Could not set show_touches={value} (ignored).")
            return False
        self._console.ok(f"Show touches set to {value}.")
        return True

    def run_tests(self, command: Sequence[str], *, cwd: Optional[Path] = None) -> int:
        if self.state is not LifecycleState.BOOTED:
            raise EmulatorLifecycleError(f"cannot run tests from state {self.state.value}")
        self.state = LifecycleState.RUNNING_TESTS
        self._console.info(f"Executing: {' '.join(shlex.quote(c) for c in command)}")
        try:
            proc = subprocess.run(list(command), cwd=str(cwd) if cwd is not None else None)
        except FileNotFoundError:
            self._console.fail(f"Test command not found: {command[0]}")
            return COMMAND_NOT_FOUND_EXIT_CODE
        if proc.returncode == 0:
            self._console.ok("Gradle connected tests finished.")
        else:
            self._console.fail(f"Test command exited with code {proc.returncode}.")
        return proc.returncode

    # ------------------------------- Teardown ------------------------------

    def _close_log(self) -> None:
        if self._log_handle is not None:
            self._log_handle.close()
            self._log_handle = None

    def _shutdown_device(self) -> None:
        if not self._controller.is_device_present():
            self._console.info("No emulator running.")
            return

        self._console.info("Killing emulator…")
        try:
            self._controller.emu_kill()
        except AndroidControllerError as e:
            logger.debug("emu kill failed: %s", e)

        self._console.info(
            f"Waiting for emulator to shut down ({self.shutdown_timeout_s:g}s)…"
        )
        # Not cancellable: by now the cancel event may already be set.
        deadline = Deadline(self.shutdown_timeout_s, clock=self._clock)
        while self._controller.is_device_present():
            if deadline.expired():
                self._console.warn("Timeout waiting for shutdown.")
                return
            self._sleep(1.0)
        self._console.ok("Emulator is down.")

    def _reap_process(self, grace_s: float = 10.0) -> None:
        proc = self._process
        if proc is None:
            return
        if proc.poll() is None:
            self._console.warn(f"Emulator process {proc.pid} still running; terminating it.")
            proc.terminate()
            try:
                proc.wait(timeout=grace_s)
            except subprocess.TimeoutExpired:
                proc.kill()
                proc.wait(timeout=grace_s)
        logger.debug("emulator process %s exited with %s", proc.pid, proc.returncode)

    def teardown(self) -> None:
        if self._cleanup_ran:
            return
        self._cleanup_ran = True
        self.state = LifecycleState.TERMINATING
        # Further SIGINT/SIGTERM are ignored from here on.
        self.cancel.set()

        self._console.step("Cleanup")
        # The spawned process is reaped even if an adb step raised.
        try:
            try:
                self._controller.settings_put(
                    namespace="system", key="show_touches", value="0", check=False
                )
            except AndroidControllerError as e:
                logger.debug("show_touches reset failed: %s", e)
            try:
                self._shutdown_device()
            except AndroidControllerError as e:
                self._console.warn(f"Could not shut the emulator down via adb ({e}).")
        finally:
            try:
                self._reap_process()
            finally:
                self._close_log()
                self.state = LifecycleState.TERMINATED

        elapsed = int(self._clock() - self._t0)
        self._console.ok(f"Cleanup done. Total time: {elapsed}s")
