"""Android SDK layout probes.

Pure filesystem inspection of the conventional SDK tree::

    <sdk>/platform-tools/adb, source.properties
    <sdk>/emulator/emulator
    <sdk>/cmdline-tools/<version>/bin/{sdkmanager,avdmanager}
    <sdk>/build-tools/<version>/
    <sdk>/platforms/android-<api>/
    <sdk>/licenses/
"""

from __future__ import annotations

import os
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

from android_ci.versioning import max_version

SDK_ROOT_ENV_VARS = ("ANDROID_SDK_ROOT", "ANDROID_HOME")

ANDROID_LICENSE = "android-sdk-license"
PREVIEW_LICENSE = "android-sdk-preview-license"

_PLATFORM_DIR = re.compile(r"^android-(\d+)$")


def default_sdk_locations(home: Path) -> list[Path]:
    return [
        home / "Android" / "Sdk",
        home / "Library" / "Android" / "sdk",
        Path("/usr/lib/android-sdk"),
        Path("/opt/android-sdk"),
        Path("/opt/android-sdk-linux"),
    ]


def resolve_sdk_root(
    override: Optional[str],
    env: Mapping[str, str],
    *,
    candidates: Sequence[Path] = (),
) -> Optional[Path]:
    """Explicit override, then $ANDROID_SDK_ROOT/$ANDROID_HOME, then known paths.

    Override and environment values are returned as given (existence is the
    caller's check); of the conventional locations only an existing directory
    counts.
    """

    if override:
        return Path(override)
    for name in SDK_ROOT_ENV_VARS:
        value = env.get(name)
        if value:
            return Path(value)
    for p in candidates:
        if p.is_dir():
            return p
    return None


def is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def which(name: str, env: Mapping[str, str]) -> Optional[Path]:
    found = shutil.which(name, path=env.get("PATH", os.defpath))
    return Path(found) if found else None


@dataclass(frozen=True)
class SdkTools:
    adb: Optional[Path]
    emulator: Optional[Path]
    sdkmanager: Optional[Path]
    avdmanager: Optional[Path]


def latest_cmdline_tools_dir(sdk_root: Path) -> Optional[Path]:
    base = sdk_root / "cmdline-tools"
    if not base.is_dir():
        return None
    names = sorted(p.name for p in base.iterdir() if p.name != "bin")
    return base / names[-1] if names else None


def locate_sdk_tools(sdk_root: Path, env: Mapping[str, str]) -> SdkTools:
    adb = sdk_root / "platform-tools" / "adb"
    emulator = sdk_root / "emulator" / "emulator"

    managers: Dict[str, Optional[Path]] = {}
    latest = None
    for name in ("sdkmanager", "avdmanager"):
        found = which(name, env)
        if found is None:
            if latest is None:
                latest = latest_cmdline_tools_dir(sdk_root)
            candidate = latest / "bin" / name if latest is not None else None
            if candidate is not None and is_executable(candidate):
                found = candidate
        managers[name] = found

    return SdkTools(
        adb=adb if is_executable(adb) else None,
        emulator=emulator if is_executable(emulator) else None,
        sdkmanager=managers["sdkmanager"],
        avdmanager=managers["avdmanager"],
    )


def read_properties_file(path: Path) -> Dict[str, str]:
    """Read a ``key=value`` file such as ``source.properties``."""

    props: Dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        props.setdefault(key.strip(), value.strip())
    return props


def platform_tools_version(sdk_root: Path) -> Optional[str]:
    path = sdk_root / "platform-tools" / "source.properties"
    if not path.is_file():
        return None
    try:
        props = read_properties_file(path)
    except OSError:
        return None
    return props.get("Pkg.Revision") or None


def installed_build_tools(sdk_root: Path) -> list[str]:
    base = sdk_root / "build-tools"
    if not base.is_dir():
        return []
    return sorted(p.name for p in base.iterdir() if p.is_dir())


def latest_build_tools(sdk_root: Path) -> Optional[str]:
    return max_version(installed_build_tools(sdk_root))


def installed_platform_apis(sdk_root: Path) -> list[str]:
    base = sdk_root / "platforms"
    if not base.is_dir():
        return []
    apis = []
    for p in base.iterdir():
        m = _PLATFORM_DIR.match(p.name)
        if m and p.is_dir():
            apis.append(m.group(1))
    return sorted(apis, key=int)


def license_present(sdk_root: Path, name: str) -> bool:
    """True only for an existing, non-empty license file."""

    path = sdk_root / "licenses" / name
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError:
        return False
