"""Ordered toolchain checks for Android UI test jobs.

Every check appends verdicts to the shared `HealthReport` and returns; no
check aborts the run, so one invocation surfaces every problem. The SDK
layout checks only run once an SDK root directory has been resolved.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence

from android_ci.health import sdk
from android_ci.health.java import JavaDetails, detect_java
from android_ci.reporting.report import HealthReport
from android_ci.versioning import version_ge

LICENSES_HINT = "Run: yes | sdkmanager --licenses"


@dataclass(frozen=True)
class HealthOptions:
    sdk_root: Optional[str] = None
    java_vendor: Optional[re.Pattern[str]] = None
    java_version: Optional[str] = None
    min_build_tools: Optional[str] = None
    platform_apis: Sequence[str] = ()
    project_dir: Path = Path(".")


@dataclass
class HealthContext:
    """Host environment seen by the checks (overridable in tests)."""

    env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    home: Path = field(default_factory=Path.home)
    java_probe: Callable[[str], JavaDetails] = detect_java
    sdk_locations: Optional[Sequence[Path]] = None

    def which(self, name: str) -> Optional[Path]:
        return sdk.which(name, self.env)

    def sdk_candidates(self) -> list[Path]:
        if self.sdk_locations is not None:
            return list(self.sdk_locations)
        return sdk.default_sdk_locations(self.home)


def check_java(opts: HealthOptions, ctx: HealthContext, report: HealthReport) -> None:
    java = ctx.which("java")
    if java is None:
        report.fail("Java not found in PATH.")
        return

    details = ctx.java_probe(str(java))
    if not details.version:
        report.fail("Unable to detect Java runtime version.")
        return

    vendor = details.vendor_or_unknown()
    if opts.java_vendor is not None:
        pattern = opts.java_vendor.pattern
        haystack = f"{vendor} {details.banner}"
        if opts.java_vendor.search(haystack):
            report.ok(f"Java vendor matches /{pattern}/ ({vendor}).")
        else:
            report.fail(f"Java vendor mismatch. Wanted /{pattern}/, got '{vendor}'.")
    else:
        report.ok(f"Java vendor detected: {vendor}")

    if opts.java_version:
        if details.version == opts.java_version:
            report.ok(f"Java version matches {opts.java_version}.")
        else:
            report.fail(
                f"Java version mismatch. Wanted {opts.java_version}, got {details.version}."
            )
    else:
        report.ok(f"Java runtime version detected: {details.version}")


def check_gradle_wrapper(opts: HealthOptions, ctx: HealthContext, report: HealthReport) -> None:
    if sdk.is_executable(opts.project_dir / "gradlew"):
        report.ok("Gradle wrapper present (./gradlew).")
    elif ctx.which("gradle") is not None:
        report.warn("Gradle wrapper missing; using system 'gradle' may cause CI inconsistencies.")
    else:
        report.fail("Neither ./gradlew nor 'gradle' found.")


def check_sdk_root(
    opts: HealthOptions, ctx: HealthContext, report: HealthReport
) -> Optional[Path]:
    root = sdk.resolve_sdk_root(opts.sdk_root, ctx.env, candidates=ctx.sdk_candidates())
    if root is None:
        report.fail(
            "Android SDK root not found. Set ANDROID_SDK_ROOT or ANDROID_HOME, or pass --sdk-root."
        )
        return None
    if not root.is_dir():
        report.fail(f"SDK root path does not exist: {root}")
        return None
    report.sdk_root = str(root)
    report.ok(f"Android SDK root: {root}")
    return root


def check_tools_presence(sdk_root: Path, ctx: HealthContext, report: HealthReport) -> None:
    tools = sdk.locate_sdk_tools(sdk_root, ctx.env)

    if tools.adb is not None:
        report.ok(f"adb present ({tools.adb})")
    else:
        report.fail("Missing platform-tools/adb under SDK.")
    if tools.emulator is not None:
        report.ok(f"emulator present ({tools.emulator})")
    else:
        report.fail("Missing emulator under SDK.")
    if tools.sdkmanager is not None:
        report.ok(f"sdkmanager found ({tools.sdkmanager})")
    else:
        report.fail("sdkmanager not found (install cmdline-tools).")
    if tools.avdmanager is not None:
        report.ok(f"avdmanager found ({tools.avdmanager})")
    else:
        report.fail("avdmanager not found (install cmdline-tools).")


def check_platform_tools_version(sdk_root: Path, report: HealthReport) -> None:
    if not (sdk_root / "platform-tools" / "source.properties").is_file():
        report.warn("platform-tools source.properties not found; version unknown.")
        return
    version = sdk.platform_tools_version(sdk_root)
    if version:
        report.ok(f"platform-tools version {version}")
    else:
        report.warn("platform-tools present but version unknown.")


def check_build_tools(opts: HealthOptions, sdk_root: Path, report: HealthReport) -> None:
    base = sdk_root / "build-tools"
    if not base.is_dir():
        report.fail(f"No Build-Tools installed under {base}.")
        return
    latest = sdk.latest_build_tools(sdk_root)
    if latest is None:
        report.fail("Build-Tools directory exists but empty.")
        return
    report.ok(f"Build-Tools installed (latest: {latest})")
    if opts.min_build_tools and not version_ge(latest, opts.min_build_tools):
        report.fail(f"Build-Tools {latest} < required {opts.min_build_tools}.")


def check_platforms(opts: HealthOptions, sdk_root: Path, report: HealthReport) -> None:
    base = sdk_root / "platforms"
    if not base.is_dir():
        report.fail(f"No Android platforms installed under {base}.")
        return
    installed = sdk.installed_platform_apis(sdk_root)
    if not installed:
        report.fail(f"No API levels present in {base}.")
        return
    report.ok(f"Installed Android APIs: {' '.join(installed)}")

    # Duplicates are checked (and reported) independently.
    for api in opts.platform_apis:
        if api in installed:
            report.ok(f"Required platform API {api} is installed.")
        else:
            report.fail(
                f"Required platform API {api} is NOT installed (expected {base / f'android-{api}'})."
            )


def check_licenses(sdk_root: Path, report: HealthReport) -> None:
    licdir = sdk_root / "licenses"
    if not licdir.is_dir():
        report.fail(f"SDK licenses directory missing ({licdir}). {LICENSES_HINT}")
        return

    if sdk.license_present(sdk_root, sdk.ANDROID_LICENSE):
        report.ok(f"{sdk.ANDROID_LICENSE} present.")
    else:
        report.fail(f"{sdk.ANDROID_LICENSE} missing. {LICENSES_HINT}")

    if sdk.license_present(sdk_root, sdk.PREVIEW_LICENSE):
        report.ok(f"{sdk.PREVIEW_LICENSE} present.")
    else:
        report.warn(f"{sdk.PREVIEW_LICENSE} missing (OK unless using preview SDKs).")


def run_health_checks(
    opts: HealthOptions,
    report: HealthReport,
    *,
    ctx: Optional[HealthContext] = None,
) -> HealthReport:
    ctx = ctx or HealthContext()

    check_java(opts, ctx, report)
    check_gradle_wrapper(opts, ctx, report)
    sdk_root = check_sdk_root(opts, ctx, report)

    if sdk_root is not None:
        check_tools_presence(sdk_root, ctx, report)
        check_platform_tools_version(sdk_root, report)
        check_build_tools(opts, sdk_root, report)
        check_platforms(opts, sdk_root, report)
        check_licenses(sdk_root, report)
    return report
