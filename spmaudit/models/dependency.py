"""
Dependency data model for spm-audit.

This module defines the representation of a Swift package dependency as
discovered on disk, together with the URL helpers used to derive its
identity. The canonical URL (``.git`` and trailing ``/`` stripped) is the
deduplication key across a scan.
"""

from __future__ import annotations

import re
import enum
from pathlib import Path
from dataclasses import dataclass
from typing import Optional, Tuple

from spmaudit.constants import LOCKFILE_FILENAME, SUPPORTED_HOST

_HTTPS_URL = re.compile(
    r"^(?:https?|git|ssh)://(?:[^@/]+@)?(?P<host>[^/:]+)(?::\d+)?/"
    r"(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
)
_SCP_URL = re.compile(
    r"^(?:[^@/]+@)?(?P<host>[^/:]+):(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
)


class RequirementKind(enum.Enum):
    """Version constraint strategy declared for a dependency."""

    EXACT = "exactVersion"
    UP_TO_NEXT_MAJOR = "upToNextMajorVersion"
    UP_TO_NEXT_MINOR = "upToNextMinorVersion"
    RANGE = "versionRange"
    BRANCH = "branch"
    REVISION = "revision"

    @property
    def display_name(self) -> str:
        """Short label used in the audit table."""
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_raw(cls, raw: str) -> Optional["RequirementKind"]:
        """Return the kind for a descriptor ``kind`` value, or None if unknown."""
        try:
            return cls(raw)
        except ValueError:
            return None


_DISPLAY_NAMES = {
    RequirementKind.EXACT: "Exact",
    RequirementKind.UP_TO_NEXT_MAJOR: "^Major",
    RequirementKind.UP_TO_NEXT_MINOR: "^Minor",
    RequirementKind.RANGE: "Range",
    RequirementKind.BRANCH: "Branch",
    RequirementKind.REVISION: "Revision",
}


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------


def canonical_url(url: str) -> str:
    """Strip surrounding whitespace, a trailing ``/`` and a ``.git`` suffix.

    Example:
        >>> canonical_url("https://github.com/apple/swift-nio.git")
        'https://github.com/apple/swift-nio'
    """
    cleaned = url.strip().rstrip("/")
    if cleaned.endswith(".git"):
        cleaned = cleaned[: -len(".git")]
    return cleaned


def name_from_url(url: str) -> str:
    """Return the last path segment of ``url`` without ``.git``."""
    cleaned = canonical_url(url)
    return re.split(r"[/:]", cleaned)[-1]


def _split_url(url: str) -> Optional[Tuple[str, str, str]]:
    cleaned = url.strip()
    match = _HTTPS_URL.match(cleaned) or _SCP_URL.match(cleaned)
    if match is None:
        return None
    return match.group("host").lower(), match.group("owner"), match.group("repo")


def parse_repo_slug(url: str) -> Optional[Tuple[str, str]]:
    """Extract ``(owner, repo)`` from a GitHub URL.

    Both ``https://github.com/<owner>/<repo>[.git]`` and the SSH form
    ``git@github.com:<owner>/<repo>[.git]`` are understood. Any other host
    yields ``None``.

    Example:
        >>> parse_repo_slug("git@github.com:apple/swift-log.git")
        ('apple', 'swift-log')
    """
    parts = _split_url(url)
    if parts is None:
        return None
    host, owner, repo = parts
    if host != SUPPORTED_HOST:
        return None
    return owner, repo


def is_supported_host(url: str) -> bool:
    """Return True if ``url`` points at the single supported forge."""
    parts = _split_url(url)
    return parts is not None and parts[0] == SUPPORTED_HOST


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DependencyRecord:
    """
    A dependency as declared in a manifest or pinned in a lockfile.

    Records are created fresh on every scan and never mutated; the
    swift-tools-version found in a checkout is attached by building a
    copy with :func:`dataclasses.replace`.

    Attributes:
        name: Last path segment of the URL, ``.git`` stripped.
        url: Canonical repository URL, the deduplication key.
        declared_version: Pinned or resolved version text as found locally.
        source_file: Manifest or lockfile that produced the record.
        requirement_kind: Declared constraint strategy, ``None`` when the
            dependency is transitive (not declared by the project).
        swift_tools_version: Tools version read from the local checkout.
    """

    name: str
    url: str
    declared_version: str
    source_file: str
    requirement_kind: Optional[RequirementKind] = None
    swift_tools_version: Optional[str] = None

    @classmethod
    def from_url(
        cls,
        url: str,
        declared_version: str,
        source_file: str,
        requirement_kind: Optional[RequirementKind] = None,
    ) -> "DependencyRecord":
        """Build a record, deriving ``name`` and the canonical ``url``."""
        return cls(
            name=name_from_url(url),
            url=canonical_url(url),
            declared_version=declared_version,
            source_file=source_file,
            requirement_kind=requirement_kind,
        )

    @property
    def is_lockfile_backed(self) -> bool:
        """True when the record came from a ``Package.resolved`` file."""
        return Path(self.source_file).name == LOCKFILE_FILENAME

    @property
    def owner_repo(self) -> Optional[Tuple[str, str]]:
        """``(owner, repo)`` of the upstream GitHub repository, if parseable."""
        return parse_repo_slug(self.url)

    @property
    def requirement_label(self) -> str:
        """Display label of the requirement kind, ``-`` when transitive."""
        if self.requirement_kind is None:
            return "-"
        return self.requirement_kind.display_name

    def __str__(self) -> str:
        return f"{self.name} {self.declared_version} ({self.url})"
