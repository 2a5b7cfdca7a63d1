"""
Semantic version parsing, comparison, and bump classification.

All functions here are pure. Version strings that are not valid semantic
versions never raise; callers get ``None`` (or a zero distance) back and
are expected to exclude the entry from further consideration.
"""

import re
from dataclasses import dataclass
from typing import Optional

import semver

from pkghealth.core.models import BumpType

# Characters stripped from a declared range to find its concrete version
_RANGE_OPERATORS = re.compile(r"[\^~>=<]")


@dataclass(frozen=True)
class VersionDistance:
    """How far a version lags behind another, scoped to the highest differing tier."""

    major_behind: int = 0
    minor_behind: int = 0
    patch_behind: int = 0


def parse_version(text: object) -> Optional[semver.Version]:
    """Parse a version string, returning None if it is not valid semver.

    A single leading ``v`` or ``=`` is accepted, as npm does. Ordering and
    equality of the result follow semver precedence, so build metadata is
    ignored and a pre-release sorts before its release.
    """
    if not isinstance(text, str):
        return None
    cleaned = text.strip()
    if cleaned[:1] in ("v", "="):
        cleaned = cleaned[1:].lstrip()
    try:
        return semver.Version.parse(cleaned)
    except ValueError:
        return None


def valid_version(text: object) -> str | None:
    """Return the version without build metadata if ``text`` is valid semver."""
    version = parse_version(text)
    if version is None:
        return None
    return str(version.replace(build=None))


def extract_concrete_version(version_range: object) -> str | None:
    """Reduce a declared range to one exact version, if it names one.

    Range operators are stripped and the remainder must itself be a valid
    semantic version. ``"^1.2.3"`` gives ``"1.2.3"``; ``"1.x"`` and
    ``">=1.0.0 <2.0.0"`` give None.
    """
    if not isinstance(version_range, str):
        return None
    cleaned = _RANGE_OPERATORS.sub("", version_range).strip()
    return valid_version(cleaned)


def compare_versions(left: str, right: str) -> int | None:
    """Compare two versions: -1, 0 or 1, or None if either is malformed."""
    a = parse_version(left)
    b = parse_version(right)
    if a is None or b is None:
        return None
    return a.compare(b)


def is_newer(candidate: str, baseline: str) -> bool:
    """Return True if ``candidate`` has strictly higher precedence than ``baseline``."""
    return compare_versions(candidate, baseline) == 1


def classify_bump(current: str, latest: str) -> BumpType | None:
    """Classify the upgrade from ``current`` to ``latest``.

    The first differing of major, minor and patch decides. Versions that
    share the same triple (pre-release or build differences only) are a
    patch bump. Returns None when either side is malformed.
    """
    a = parse_version(current)
    b = parse_version(latest)
    if a is None or b is None:
        return None

    if a.major != b.major:
        return BumpType.MAJOR
    if a.minor != b.minor:
        return BumpType.MINOR
    return BumpType.PATCH


def distance(current: str, latest: str) -> VersionDistance:
    """Compute how many versions ``current`` is behind ``latest``.

    Only the highest differing tier is reported: when majors differ the
    minor and patch deltas are zero, and when minors differ the patch
    delta is zero.
    """
    a = parse_version(current)
    b = parse_version(latest)
    if a is None or b is None:
        return VersionDistance()

    major_behind = b.major - a.major
    minor_behind = b.minor - a.minor if major_behind == 0 else 0
    patch_behind = b.patch - a.patch if major_behind == 0 and minor_behind == 0 else 0
    return VersionDistance(major_behind, minor_behind, patch_behind)


def has_breaking_changes(current: str, latest: str) -> bool:
    """Return True if moving from ``current`` to ``latest`` crosses a major version."""
    a = parse_version(current)
    b = parse_version(latest)
    if a is None or b is None:
        return False
    return a.major < b.major
