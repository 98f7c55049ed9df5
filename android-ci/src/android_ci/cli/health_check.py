from __future__ import annotations

import argparse
import re
import textwrap
from pathlib import Path
from typing import Optional, Sequence

from android_ci.health.checks import HealthContext, HealthOptions, run_health_checks
from android_ci.health.profile import ProfileError, load_profile, split_api_values
from android_ci.reporting.console import Console, configure_logging
from android_ci.reporting.report import HealthReport, print_summary

_EPILOG = textwrap.dedent(
    """\
    Notes:
    - Exits non-zero if any REQUIRED checks fail. Warnings do not affect exit code.
    - Licenses are ALWAYS checked. If missing, this fails.
    """
)


def _vendor_regex(value: str) -> re.Pattern[str]:
    try:
        return re.compile(value, re.IGNORECASE)
    except re.error as e:
        raise argparse.ArgumentTypeError(f"invalid regex {value!r}: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="android-ci-health-check",
        description="Validate the Java/Android SDK toolchain before running UI tests.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument(
        "--sdk-root",
        type=str,
        default=None,
        help="Override ANDROID_HOME/ANDROID_SDK_ROOT autodetect.",
    )
    parser.add_argument(
        "--java-vendor",
        type=_vendor_regex,
        default=None,
        metavar="REGEX",
        help='Require Java vendor/distribution to match this regex (e.g. "Corretto|Temurin").',
    )
    parser.add_argument(
        "--java-version",
        type=str,
        default=None,
        help="Require exact Java runtime version (e.g. 17.0.8).",
    )
    parser.add_argument(
        "--min-build-tools",
        type=str,
        default=None,
        help="Minimum Build-Tools version (e.g. 34.0.0).",
    )
    parser.add_argument(
        "--platform-api",
        action="append",
        default=[],
        metavar="API[,API...]",
        help="Require one or more Android platform API levels to be installed. May repeat.",
    )
    parser.add_argument(
        "--profile",
        type=Path,
        default=None,
        help="YAML requirements profile; explicit flags override its values.",
    )
    parser.add_argument(
        "--project-dir",
        type=Path,
        default=Path("."),
        help="Project directory holding ./gradlew (default: .)",
    )
    parser.add_argument(
        "--report-json",
        type=Path,
        default=None,
        help="Also write the verdicts to this JSON file.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def resolve_options(
    args: argparse.Namespace, parser: argparse.ArgumentParser
) -> HealthOptions:
    profile = {}
    if args.profile is not None:
        try:
            profile = load_profile(args.profile)
        except ProfileError as e:
            parser.error(str(e))

    java_vendor = args.java_vendor
    if java_vendor is None and profile.get("java_vendor"):
        try:
            java_vendor = _vendor_regex(profile["java_vendor"])
        except argparse.ArgumentTypeError as e:
            parser.error(f"profile java_vendor: {e}")

    return HealthOptions(
        sdk_root=args.sdk_root or profile.get("sdk_root"),
        java_vendor=java_vendor,
        java_version=args.java_version or profile.get("java_version"),
        min_build_tools=args.min_build_tools or profile.get("min_build_tools"),
        platform_apis=tuple(
            list(profile.get("platform_apis", [])) + split_api_values(args.platform_api)
        ),
        project_dir=args.project_dir,
    )


def main(
    argv: Optional[Sequence[str]] = None, *, ctx: Optional[HealthContext] = None
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    opts = resolve_options(args, parser)

    configure_logging(verbose=args.verbose)
    console = Console()
    console.info("Starting Android UI tests health check…")

    report = HealthReport(console=console)
    run_health_checks(opts, report, ctx=ctx)
    print_summary(report, console)

    if args.report_json is not None:
        report.write_json(args.report_json)
    return report.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
