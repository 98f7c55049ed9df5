"""Dotted numeric version parsing and ordering.

Only the leading digit run of each segment is used (``34.0.0-rc1`` is treated
as ``34.0.0``); anything else collapses to zero. This is not semver.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Tuple

VersionTuple = Tuple[int, int, int]

_LEADING_DIGITS = re.compile(r"\s*(\d+)")


def _segment_value(segment: str) -> int:
    m = _LEADING_DIGITS.match(segment)
    return int(m.group(1)) if m else 0


def parse_version(text: str) -> VersionTuple:
    parts = str(text).strip().split(".")
    values = [_segment_value(p) for p in parts[:3]]
    while len(values) < 3:
        values.append(0)
    return (values[0], values[1], values[2])


def version_ge(a: str, b: str) -> bool:
    """Return True when version ``a`` is greater than or equal to ``b``."""

    return parse_version(a) >= parse_version(b)


def max_version(names: Iterable[str]) -> Optional[str]:
    best: Optional[str] = None
    for name in names:
        if best is None or parse_version(name) >= parse_version(best):
            best = name
    return best
