"""Health check verdicts and the final summary.

`HealthReport` is the result struct threaded through every check: checks
append verdicts to it, the CLI renders the summary from it and derives the
exit code. Warnings never affect the exit code.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from android_ci.reporting.console import Console, Severity


@dataclass(frozen=True)
class Verdict:
    severity: Severity
    message: str

    def format(self) -> str:
        return f"{self.severity.value}: {self.message}"


@dataclass
class HealthReport:
    verdicts: list[Verdict] = field(default_factory=list)
    console: Optional[Console] = None
    sdk_root: Optional[str] = None

    def record(self, severity: Severity, message: str) -> Verdict:
        verdict = Verdict(severity=severity, message=message)
        self.verdicts.append(verdict)
        if self.console is not None:
            self.console.emit(severity, message)
        return verdict

    def info(self, message: str) -> Verdict:
        return self.record(Severity.INFO, message)

    def ok(self, message: str) -> Verdict:
        return self.record(Severity.OK, message)

    def warn(self, message: str) -> Verdict:
        return self.record(Severity.WARN, message)

    def fail(self, message: str) -> Verdict:
        return self.record(Severity.FAIL, message)

    @property
    def failures(self) -> list[str]:
        return [v.message for v in self.verdicts if v.severity is Severity.FAIL]

    @property
    def warnings(self) -> list[str]:
        return [v.message for v in self.verdicts if v.severity is Severity.WARN]

    @property
    def passed(self) -> bool:
        return not self.failures

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.passed,
            "exit_code": self.exit_code,
            "sdk_root": self.sdk_root,
            "failures": self.failures,
            "warnings": self.warnings,
            "verdicts": [
                {"severity": v.severity.value, "message": v.message} for v in self.verdicts
            ],
        }

    def write_json(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )
        return path


def print_summary(report: HealthReport, console: Console) -> None:
    console.say("")
    console.say("Summary:", color="bold")
    if report.failures:
        console.say("  REQUIRED checks failed:", color="red")
        for msg in report.failures:
            console.say(f"    • {msg}")
    else:
        console.say("  All REQUIRED checks passed.", color="green")
    if report.warnings:
        console.say("  Warnings:", color="yellow")
        for msg in report.warnings:
            console.say(f"    • {msg}")
    console.say("")
    if report.failures:
        console.say("Health check FAILED.", color="red")
    else:
        console.say("Health check PASSED.", color="green")
