from __future__ import annotations

import sys
from pathlib import Path


def _ensure_src_on_path() -> None:
    src = Path(__file__).resolve().parents[1] / "src"
    src_str = str(src)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_src_on_path()


import pytest  # noqa: E402


def _write_exe(path: Path, body: str = "#!/bin/sh\nexit 0\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")
    path.chmod(0o755)
    return path


def _build_sdk(
    root: Path,
    *,
    build_tools: tuple[str, ...] = ("30.0.0", "34.0.0", "29.9.2"),
    platforms: tuple[str, ...] = ("33", "34"),
    platform_tools_revision: str | None = "35.0.1",
    cmdline_tools: str | None = "latest",
    android_license: str | None = "24333f8a63b6825ea9c5514f83c2829b004d1fee\n",
    preview_license: str | None = "84831b9409646a918e30573bab4c9c91346d8abd\n",
) -> Path:
    """A conventional SDK tree; pass None/() to leave a part out."""

    _write_exe(root / "platform-tools" / "adb")
    _write_exe(root / "emulator" / "emulator")
    if platform_tools_revision is not None:
        (root / "platform-tools" / "source.properties").write_text(
            f"Pkg.Desc=Android SDK Platform-Tools\nPkg.Revision={platform_tools_revision}\n",
            encoding="utf-8",
        )
    if cmdline_tools is not None:
        _write_exe(root / "cmdline-tools" / cmdline_tools / "bin" / "sdkmanager")
        _write_exe(root / "cmdline-tools" / cmdline_tools / "bin" / "avdmanager")
    for v in build_tools:
        (root / "build-tools" / v).mkdir(parents=True, exist_ok=True)
    for api in platforms:
        (root / "platforms" / f"android-{api}").mkdir(parents=True, exist_ok=True)
    if android_license is not None or preview_license is not None:
        (root / "licenses").mkdir(parents=True, exist_ok=True)
    if android_license is not None:
        (root / "licenses" / "android-sdk-license").write_text(android_license, encoding="utf-8")
    if preview_license is not None:
        (root / "licenses" / "android-sdk-preview-license").write_text(
            preview_license, encoding="utf-8"
        )
    return root


@pytest.fixture
def write_exe():
    return _write_exe


@pytest.fixture
def make_sdk(tmp_path: Path):
    def _make(**kwargs) -> Path:
        return _build_sdk(tmp_path / "sdk", **kwargs)

    return _make
