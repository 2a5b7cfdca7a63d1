"""
npm-style version range matching.

Thin wrappers over ``nodesemver``, which follows npm's range grammar and
its pre-release rule. Malformed input never raises here.
"""

import nodesemver


def valid_range(text: object) -> bool:
    """Return True if ``text`` is a range npm would accept."""
    if not isinstance(text, str):
        return False
    return nodesemver.valid_range(text, loose=False) is not None


def satisfies(version: str, version_range: str) -> bool:
    """Return True if ``version`` falls inside ``version_range``.

    Invalid versions or ranges simply do not match.
    """
    if not isinstance(version, str) or not isinstance(version_range, str):
        return False
    try:
        return nodesemver.satisfies(version, version_range, loose=False)
    except (ValueError, TypeError):
        return False
