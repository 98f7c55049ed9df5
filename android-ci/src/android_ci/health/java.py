"""Java runtime detection.

Sources, in order of preference:
  * ``java -XshowSettings:properties -version`` (``java.runtime.version``,
    ``java.vendor``)
  * the ``java -version`` banner (``version "17.0.8"`` plus vendor keywords)

Anything neither source yields is left as None ("unknown").
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)

# Checked in order against the lower-cased banner.
_BANNER_VENDORS = (
    ("corretto", "Corretto"),
    ("temurin", "Temurin"),
    ("zulu", "Zulu"),
    ("oracle", "Oracle"),
    ("ibm semeru", "Semeru"),
    ("azul", "Azul"),
)

UNKNOWN_VENDOR = "Unknown"


@dataclass(frozen=True)
class JavaDetails:
    version: Optional[str]
    vendor: Optional[str]
    banner: str = ""

    def vendor_or_unknown(self) -> str:
        return self.vendor or UNKNOWN_VENDOR


def parse_properties(text: str) -> Dict[str, str]:
    """Parse ``key = value`` lines from ``-XshowSettings:properties`` output.

    Continuation lines of multi-valued properties (no ``=``) are skipped; the
    first occurrence of a key wins.
    """

    props: Dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if " = " not in line:
            continue
        key, value = line.split(" = ", 1)
        key = key.strip()
        if key and key not in props:
            props[key] = value.strip()
    return props


def parse_banner_version(banner: str) -> Optional[str]:
    m = re.search(r'version\s+"([^"]+)"', banner)
    return m.group(1) if m else None


def guess_vendor(banner: str) -> Optional[str]:
    lower = banner.lower()
    for needle, vendor in _BANNER_VENDORS:
        if needle in lower:
            return vendor
    return None


def resolve_java_details(*, properties_output: str, banner: str) -> JavaDetails:
    props = parse_properties(properties_output)
    version = props.get("java.runtime.version") or parse_banner_version(banner)
    vendor = props.get("java.vendor") or guess_vendor(banner)
    return JavaDetails(version=version or None, vendor=vendor or None, banner=banner.strip())


def _run_java(java_path: str, *args: str, timeout_s: float) -> str:
    # The JVM prints both the banner and the property dump on stderr.
    try:
        proc = subprocess.run(
            [java_path, *args],
            capture_output=True,
            text=True,
            timeout=timeout_s,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("java %s failed: %s", " ".join(args), e)
        return ""
    return (proc.stderr or "") + (proc.stdout or "")


def detect_java(java_path: str, *, timeout_s: float = 30.0) -> JavaDetails:
    banner = _run_java(java_path, "-version", timeout_s=timeout_s)
    props = _run_java(java_path, "-XshowSettings:properties", "-version", timeout_s=timeout_s)
    details = resolve_java_details(properties_output=props, banner=banner)
    logger.debug("java details: version=%s vendor=%s", details.version, details.vendor)
    return details
