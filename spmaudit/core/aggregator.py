"""Deterministic grouping of audit results.

Audit tasks complete in arbitrary order. :func:`group_results` groups
results by the file that declared them, orders the groups by path and the
entries of each group by dependency name. Both sorts use plain string
ordering, so the same set of results always renders the same way.
"""

from __future__ import annotations

from pathlib import PurePath
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from spmaudit.constants import LOCKFILE_FILENAME, MANIFEST_FILENAME
from spmaudit.models.result import AuditResult


@dataclass
class ResultGroup:
    """Audit results that share a source file."""

    source_file: str
    results: List[AuditResult] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return source_display_name(self.source_file)

    @property
    def update_count(self) -> int:
        return count_updates(self.results)


def group_results(results: Iterable[AuditResult]) -> List[ResultGroup]:
    """Group by ``source_file``; sort groups by path and entries by name.

    Example:
        >>> [g.source_file for g in group_results(results)]
        ['App/Package.swift', 'Lib/Package.swift']
    """
    buckets: Dict[str, List[AuditResult]] = {}
    for result in results:
        buckets.setdefault(result.record.source_file, []).append(result)

    return [
        ResultGroup(
            source_file=source,
            results=sorted(buckets[source], key=lambda r: r.record.name),
        )
        for source in sorted(buckets)
    ]


def count_updates(results: Iterable[AuditResult]) -> int:
    """Number of results with an update available."""
    return sum(1 for result in results if result.outcome.has_update)


def source_display_name(path: str) -> str:
    """Human-readable label for a manifest or lockfile path.

    Examples:
        >>> source_display_name("/work/MyLib/Package.swift")
        'MyLib (Package.swift)'
        >>> source_display_name(
        ...     "/work/App.xcodeproj/project.xcworkspace/xcshareddata/swiftpm/Package.resolved"
        ... )
        'App (Xcode Project)'
    """
    parts = PurePath(path).parts
    name = parts[-1] if parts else path

    if name == MANIFEST_FILENAME:
        if len(parts) > 1 and parts[-2] not in ("/", "."):
            return f"{parts[-2]} ({MANIFEST_FILENAME})"
        return MANIFEST_FILENAME

    if name == LOCKFILE_FILENAME:
        for part in parts:
            if part.endswith(".xcodeproj"):
                return f"{part[: -len('.xcodeproj')]} (Xcode Project)"
        return LOCKFILE_FILENAME

    return path
