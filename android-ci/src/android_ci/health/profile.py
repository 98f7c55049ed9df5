"""Requirements profiles for the health check.

A profile pins the toolchain a project expects so CI jobs don't repeat the
same flags::

    java_vendor: "Temurin|Corretto"
    java_version: 17.0.8
    min_build_tools: 34.0.0
    platform_apis: [33, 34]

YAML (``.yaml``/``.yml``) and JSON files are accepted; the top level must be
an object matching `PROFILE_SCHEMA`. Versions with a single dot must be
quoted (``min_build_tools: "34.10"``).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import yaml
from jsonschema import Draft202012Validator

_SCALAR = {"type": ["string", "number"]}

PROFILE_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "sdk_root": {"type": "string"},
        "java_vendor": {"type": "string"},
        # Strings only: YAML would read 34.10 as the float 34.1.
        "java_version": {"type": "string"},
        "min_build_tools": {"type": "string"},
        "platform_apis": {
            "anyOf": [
                _SCALAR,
                {"type": "array", "items": _SCALAR},
            ]
        },
    },
}

_VALIDATOR = Draft202012Validator(PROFILE_SCHEMA)


class ProfileError(RuntimeError):
    pass


def split_api_values(raw: Any) -> list[str]:
    """Flatten ``"33,34"``, ``[33, "34,35"]`` or ``33`` into ``["33", "34", ...]``."""

    if raw is None:
        return []
    items = raw if isinstance(raw, (list, tuple)) else [raw]
    out: list[str] = []
    for item in items:
        for part in str(item).split(","):
            part = part.strip()
            if part:
                out.append(part)
    return out


def _read_profile(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ProfileError(f"cannot read profile {path}: {e}") from e

    if path.suffix.lower() == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ProfileError(f"invalid JSON in profile {path}: {e}") from e
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ProfileError(f"invalid YAML in profile {path}: {e}") from e


def validate_profile(data: Any, *, where: str) -> None:
    errors = sorted(_VALIDATOR.iter_errors(data), key=lambda e: list(e.path))
    if errors:
        msgs = []
        for e in errors:
            loc = "/".join(str(p) for p in e.path)
            msgs.append(f"{where}:{loc}: {e.message}")
        raise ProfileError("; ".join(msgs))


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def load_profile(path: Path) -> Dict[str, Any]:
    data = _read_profile(path)
    if data is None:
        data = {}
    validate_profile(data, where=str(path))

    return {
        "sdk_root": _optional_str(data.get("sdk_root")),
        "java_vendor": _optional_str(data.get("java_vendor")),
        "java_version": _optional_str(data.get("java_version")),
        "min_build_tools": _optional_str(data.get("min_build_tools")),
        "platform_apis": split_api_values(data.get("platform_apis")),
    }
