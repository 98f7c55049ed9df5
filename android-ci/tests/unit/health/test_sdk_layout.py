from __future__ import annotations

from pathlib import Path

from android_ci.health import sdk


def test_resolve_sdk_root_precedence(tmp_path: Path) -> None:
    conventional = tmp_path / "Android" / "Sdk"
    conventional.mkdir(parents=True)
    env = {"ANDROID_SDK_ROOT": "/from/sdk_root", "ANDROID_HOME": "/from/home"}

    assert sdk.resolve_sdk_root("/explicit", env, candidates=[conventional]) == Path("/explicit")
    assert sdk.resolve_sdk_root(None, env, candidates=[conventional]) == Path("/from/sdk_root")
    assert sdk.resolve_sdk_root(
        None, {"ANDROID_HOME": "/from/home"}, candidates=[conventional]
    ) == Path("/from/home")
    assert sdk.resolve_sdk_root(None, {}, candidates=[tmp_path / "missing", conventional]) == (
        conventional
    )
    assert sdk.resolve_sdk_root(None, {}, candidates=[tmp_path / "missing"]) is None


def test_env_value_is_returned_even_if_missing(tmp_path: Path) -> None:
    # Existence of an explicitly configured root is reported by the check, not skipped.
    missing = tmp_path / "nope"
    assert sdk.resolve_sdk_root(None, {"ANDROID_HOME": str(missing)}) == missing


def test_latest_build_tools(make_sdk) -> None:
    root = make_sdk(build_tools=("30.0.0", "34.0.0", "29.9.2"))
    assert sdk.installed_build_tools(root) == ["29.9.2", "30.0.0", "34.0.0"]
    assert sdk.latest_build_tools(root) == "34.0.0"


def test_latest_build_tools_is_numeric_not_lexicographic(make_sdk) -> None:
    root = make_sdk(build_tools=("9.0.0", "10.0.0"))
    assert sdk.latest_build_tools(root) == "10.0.0"


def test_installed_platform_apis_sorted_numerically(make_sdk) -> None:
    root = make_sdk(platforms=("9", "34", "28"))
    (root / "platforms" / "android-TiramisuPrivacySandbox").mkdir()
    (root / "platforms" / "README").write_text("x", encoding="utf-8")
    assert sdk.installed_platform_apis(root) == ["9", "28", "34"]


def test_platform_tools_version(make_sdk, tmp_path: Path) -> None:
    root = make_sdk(platform_tools_revision="35.0.1")
    assert sdk.platform_tools_version(root) == "35.0.1"

    (root / "platform-tools" / "source.properties").write_text(
        "Pkg.Desc=x\n", encoding="utf-8"
    )
    assert sdk.platform_tools_version(root) is None
    assert sdk.platform_tools_version(tmp_path / "elsewhere") is None


def test_license_present_requires_content(make_sdk) -> None:
    root = make_sdk(android_license="", preview_license=None)
    assert sdk.license_present(root, sdk.ANDROID_LICENSE) is False
    assert sdk.license_present(root, sdk.PREVIEW_LICENSE) is False

    (root / "licenses" / sdk.ANDROID_LICENSE).write_text("abc\n", encoding="utf-8")
    assert sdk.license_present(root, sdk.ANDROID_LICENSE) is True


def test_locate_tools_falls_back_to_latest_cmdline_tools(make_sdk, write_exe) -> None:
    root = make_sdk(cmdline_tools="latest")
    write_exe(root / "cmdline-tools" / "11.0" / "bin" / "sdkmanager")
    write_exe(root / "cmdline-tools" / "bin" / "sdkmanager")

    tools = sdk.locate_sdk_tools(root, {"PATH": ""})

    assert tools.adb == root / "platform-tools" / "adb"
    assert tools.emulator == root / "emulator" / "emulator"
    assert tools.sdkmanager == root / "cmdline-tools" / "latest" / "bin" / "sdkmanager"
    assert tools.avdmanager == root / "cmdline-tools" / "latest" / "bin" / "avdmanager"


def test_locate_tools_prefers_path(make_sdk, write_exe, tmp_path: Path) -> None:
    root = make_sdk()
    bin_dir = tmp_path / "bin"
    on_path = write_exe(bin_dir / "sdkmanager")

    tools = sdk.locate_sdk_tools(root, {"PATH": str(bin_dir)})

    assert tools.sdkmanager == on_path
    assert tools.avdmanager == root / "cmdline-tools" / "latest" / "bin" / "avdmanager"


def test_locate_tools_reports_missing(tmp_path: Path) -> None:
    root = tmp_path / "empty-sdk"
    root.mkdir()
    tools = sdk.locate_sdk_tools(root, {"PATH": ""})
    assert tools == sdk.SdkTools(adb=None, emulator=None, sdkmanager=None, avdmanager=None)
