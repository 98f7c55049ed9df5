from __future__ import annotations

import json
from pathlib import Path

import pytest

from android_ci.cli.health_check import build_parser, main, resolve_options
from android_ci.health.checks import HealthContext
from android_ci.health.java import JavaDetails

_TEMURIN = JavaDetails(
    version="17.0.8",
    vendor="Eclipse Adoptium",
    banner='openjdk version "17.0.8" 2023-07-18\nOpenJDK Runtime Environment Temurin-17.0.8+7',
)


@pytest.fixture
def workspace(tmp_path: Path, write_exe, make_sdk):
    bin_dir = tmp_path / "bin"
    write_exe(bin_dir / "java")
    project = tmp_path / "app"
    write_exe(project / "gradlew")
    sdk_root = make_sdk()
    ctx = HealthContext(
        env={"PATH": str(bin_dir)},
        home=tmp_path / "home",
        java_probe=lambda _path: _TEMURIN,
        sdk_locations=[],
    )
    return {"sdk": sdk_root, "project": project, "ctx": ctx, "tmp": tmp_path}


def _base_args(ws) -> list[str]:
    return ["--sdk-root", str(ws["sdk"]), "--project-dir", str(ws["project"])]


@pytest.mark.parametrize(
    "argv",
    [
        ["--bogus"],
        ["--sdk-root"],
        ["--java-vendor", "Temurin("],
        ["--sdk"],
    ],
)
def test_argument_errors_exit_2(argv, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    assert excinfo.value.code == 2
    assert "usage:" in capsys.readouterr().err


def test_help_exits_0(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])
    assert excinfo.value.code == 0
    out = capsys.readouterr().out
    assert "--platform-api" in out
    assert "Licenses are ALWAYS checked" in out


def test_healthy_toolchain_passes(workspace, capsys) -> None:
    rc = main(
        _base_args(workspace)
        + ["--java-vendor", "temurin|corretto", "--java-version", "17.0.8", "--platform-api", "34"],
        ctx=workspace["ctx"],
    )

    out = capsys.readouterr().out
    assert rc == 0
    assert out.startswith("INFO  Starting Android UI tests health check…\n")
    assert "OK    Java vendor matches /temurin|corretto/ (Eclipse Adoptium)." in out
    assert "OK    Required platform API 34 is installed." in out
    assert "All REQUIRED checks passed." in out
    assert out.rstrip().endswith("Health check PASSED.")


def test_build_tools_below_minimum_fails(workspace, capsys) -> None:
    rc = main(_base_args(workspace) + ["--min-build-tools", "35.0.0"], ctx=workspace["ctx"])

    out = capsys.readouterr().out
    assert rc == 1
    assert "OK    Build-Tools installed (latest: 34.0.0)" in out
    assert "    • Build-Tools 34.0.0 < required 35.0.0." in out
    assert out.rstrip().endswith("Health check FAILED.")


def test_warnings_do_not_change_exit_code(workspace, capsys) -> None:
    (workspace["sdk"] / "licenses" / "android-sdk-preview-license").unlink()

    rc = main(_base_args(workspace), ctx=workspace["ctx"])

    out = capsys.readouterr().out
    assert rc == 0
    assert "  Warnings:\n    • android-sdk-preview-license missing" in out


def test_report_json_is_written(workspace, capsys) -> None:
    target = workspace["tmp"] / "out" / "health.json"

    rc = main(
        _base_args(workspace) + ["--platform-api", "30,34", "--report-json", str(target)],
        ctx=workspace["ctx"],
    )

    capsys.readouterr()
    data = json.loads(target.read_text(encoding="utf-8"))
    assert rc == 1
    assert data["ok"] is False
    assert data["exit_code"] == 1
    assert data["sdk_root"] == str(workspace["sdk"])
    assert len(data["failures"]) == 1
    assert data["failures"][0].startswith("Required platform API 30 is NOT installed")
    assert {"severity": "OK", "message": "Required platform API 34 is installed."} in data[
        "verdicts"
    ]


def test_profile_values_merge_with_flags(tmp_path: Path) -> None:
    profile = tmp_path / "ci.yaml"
    profile.write_text(
        "java_vendor: Corretto\njava_version: 17.0.8\nmin_build_tools: 33.0.2\nplatform_apis: [33]\n",
        encoding="utf-8",
    )
    parser = build_parser()
    args = parser.parse_args(
        ["--profile", str(profile), "--min-build-tools", "34.0.0", "--platform-api", "34,35"]
    )

    opts = resolve_options(args, parser)

    assert opts.java_vendor is not None and opts.java_vendor.pattern == "Corretto"
    assert opts.java_version == "17.0.8"
    assert opts.min_build_tools == "34.0.0"
    assert opts.platform_apis == ("33", "34", "35")


def test_invalid_profile_is_a_usage_error(tmp_path: Path, capsys) -> None:
    profile = tmp_path / "bad.yaml"
    profile.write_text("java_vendor: Corretto\nunknown_key: 1\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["--profile", str(profile)])

    assert excinfo.value.code == 2
    assert "unknown_key" in capsys.readouterr().err
