"""Import shim for the src/ layout.

The real package lives under `android-ci/src/android_ci/`. This lets the repo
root run the CLIs without installing or setting PYTHONPATH, e.g.
`python -m android_ci.cli.health_check --help`.
"""

from __future__ import annotations

from pathlib import Path

_REPO_ROOT = Path(__file__).resolve().parents[1]
_REAL_PKG = _REPO_ROOT / "android-ci" / "src" / "android_ci"
if _REAL_PKG.is_dir():
    __path__.append(str(_REAL_PKG))  # type: ignore[name-defined]

__all__ = ["cli", "health", "reporting", "runtime", "versioning"]
