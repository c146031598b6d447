"""
Version comparison utilities for spm-audit.

Swift packages tag releases loosely (``v1.2.3``, ``release/1.2.3``,
``wire-3.0.1``), so ordering is done with a lenient component-wise
comparator instead of PEP 440. :func:`get_update_type` still uses
``packaging`` to label an update for display.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from packaging.version import InvalidVersion, Version, parse

from spmaudit.constants import PRERELEASE_MARKERS

_V_PREFIX = re.compile(r"^[vV](?=\d)")
_PATH_PREFIX = re.compile(r"^(?:release|version)/", re.IGNORECASE)
_NAME_PREFIX = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*-(?=\d+(?:\.\d+)+$)")
_DIGITS = re.compile(r"[0-9]+")
_STRICT_VERSION = re.compile(r"\d+\.\d+(?:\.\d+)?")


# ---------------------------------------------------------------------------
# Tag normalization
# ---------------------------------------------------------------------------


def normalize_version(tag: str) -> str:
    """Strip the decorations commonly found on release tags.

    Removes surrounding whitespace, a ``v``/``V`` prefix followed by a
    digit, a ``release/`` or ``version/`` prefix and a leading ``name-``
    prefix when the rest of the tag is numeric-dotted. Prefixes are
    stripped repeatedly until the value stops changing, which makes the
    function idempotent.

    Examples:
        >>> normalize_version("v1.0.0")
        '1.0.0'
        >>> normalize_version("release/v2.1")
        '2.1'
        >>> normalize_version("wire-3.0.1")
        '3.0.1'
    """
    current = tag.strip()
    while True:
        stripped = _PATH_PREFIX.sub("", current, count=1)
        stripped = _V_PREFIX.sub("", stripped, count=1)
        stripped = _NAME_PREFIX.sub("", stripped, count=1)
        if stripped == current:
            return current
        current = stripped


def version_components(version: str) -> List[int]:
    """Split a version into integer components.

    Components that are not pure digit runs are dropped, so
    ``"1.0.0-beta"`` yields ``[1, 0]``.
    """
    return [
        int(part) for part in version.split(".") if _DIGITS.fullmatch(part)
    ]


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


def compare_versions(left: str, right: str) -> int:
    """Compare two versions component by component.

    The shorter component list is padded with zeros, so ``"1.1"`` equals
    ``"1.1.0"``.

    Returns:
        ``-1`` if ``left`` is older, ``1`` if newer, ``0`` if equal.
    """
    a = version_components(left)
    b = version_components(right)
    width = max(len(a), len(b))
    a += [0] * (width - len(a))
    b += [0] * (width - len(b))

    for x, y in zip(a, b):
        if x != y:
            return 1 if x > y else -1
    return 0


def is_newer(candidate: str, current: str) -> bool:
    """Return True if ``candidate`` sorts strictly after ``current``."""
    return compare_versions(candidate, current) > 0


def is_downgrade(candidate: str, current: str) -> bool:
    """Return True if moving from ``current`` to ``candidate`` goes backwards."""
    return compare_versions(current, candidate) > 0


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def is_valid_semver(tag: str) -> bool:
    """Return True if the normalized tag has 2 or 3 digit-led components.

    Examples:
        >>> is_valid_semver("v2.3.4")
        True
        >>> is_valid_semver("swift53")
        False
    """
    parts = normalize_version(tag).split(".")
    if not 2 <= len(parts) <= 3:
        return False
    return all(part[:1].isdigit() for part in parts)


def is_prerelease(tag: str) -> bool:
    """Return True if the tag carries a prerelease marker."""
    lowered = tag.lower()
    return any(marker in lowered for marker in PRERELEASE_MARKERS)


def is_valid_version(version: str) -> bool:
    """Return True for strict ``MAJOR.MINOR[.PATCH]`` integer versions."""
    return _STRICT_VERSION.fullmatch(version.strip()) is not None


# ---------------------------------------------------------------------------
# Display labels
# ---------------------------------------------------------------------------


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
) -> str:
    """Determine the semantic update type between two versions.

    Args:
        current_version: Currently declared version, or ``None`` if absent.
        target_version: Target version to compare against.

    Returns:
        One of:
            - ``"new"``       : No current version exists
            - ``"same"``      : Versions are identical
            - ``"downgrade"`` : Target version is lower than current
            - ``"major"``     : Major version change
            - ``"minor"``     : Minor version change
            - ``"patch"``     : Patch-level change
            - ``"update"``    : Update that cannot be classified further
            - ``"unknown"``   : Invalid or unsupported version comparison

    Examples:
        >>> get_update_type("1.0.0", "2.0.0")
        'major'
        >>> get_update_type(None, "1.0.0")
        'new'
        >>> get_update_type("1.2.3", "1.2.3")
        'same'
    """
    if current_version is None and target_version is None:
        return "unknown"

    if current_version is None:
        return "new"

    if target_version is None:
        return "unknown"

    try:
        current = _parse_version(normalize_version(current_version))
        target = _parse_version(normalize_version(target_version))

        if target == current:
            return "same"

        if target < current:
            return "downgrade"

        return _classify_upgrade(current, target)

    except InvalidVersion:
        return "unknown"


def _parse_version(value: str) -> Version:
    """Parse a version string into a PEP 440 Version object."""
    parsed = parse(value)
    if not isinstance(parsed, Version):
        raise InvalidVersion(value)
    return parsed


def _classify_upgrade(current: Version, target: Version) -> str:
    """Classify an upgrade between two valid versions."""
    current_major, current_minor, current_patch = _normalize_release(current)
    target_major, target_minor, target_patch = _normalize_release(target)

    if current_major != target_major:
        return "major"

    if current_minor != target_minor:
        return "minor"

    if current_patch != target_patch:
        return "patch"

    # Covers pre-release → release or metadata-only updates
    return "update"


def _normalize_release(version: Version) -> Tuple[int, int, int]:
    """Normalize a version's release segment to (major, minor, patch)."""
    release = version.release
    major = release[0] if len(release) > 0 else 0
    minor = release[1] if len(release) > 1 else 0
    patch = release[2] if len(release) > 2 else 0
    return major, minor, patch
