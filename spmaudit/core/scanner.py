"""Filesystem scanner that discovers Swift package dependencies.

The scanner walks a project tree, hands every ``Package.swift`` to the
manifest parser and every ``Package.resolved`` to the lockfile parser and
reconciler, and returns one :class:`DependencyRecord` per canonical URL.

Directory and file names are visited in sorted order, so "first seen wins"
deduplication gives the same answer on every run. Scanning is best-effort:
unreadable directories and broken files are logged and skipped.

Typical usage::

    scanner = DependencyScanner("path/to/project")
    for record in scanner.scan():
        print(record.name, record.declared_version)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from spmaudit.constants import (
    LOCKFILE_FILENAME,
    MANIFEST_FILENAME,
    SKIPPED_DIRECTORY_NAMES,
    SKIPPED_DIRECTORY_SUFFIXES,
)
from spmaudit.core.parsers import LockfileParser, ManifestParser
from spmaudit.core.reconciler import RequirementReconciler
from spmaudit.exceptions import FileOperationError, ParseError
from spmaudit.models.dependency import DependencyRecord, RequirementKind
from spmaudit.utils.filesystem import safe_read_file
from spmaudit.utils.logger import get_logger

logger = get_logger("scanner")

PathLike = Union[str, Path]


def is_skipped_directory(name: str) -> bool:
    """Return True for build output and test fixture directories."""
    return name in SKIPPED_DIRECTORY_NAMES or any(
        name.endswith(suffix) for suffix in SKIPPED_DIRECTORY_SUFFIXES
    )


class DependencyScanner:
    """Discover dependencies declared under a root directory.

    Args:
        root: Directory to scan.
        include_transitive: Keep lockfile pins the project does not declare.
        manifest_parser: Parser for ``Package.swift``.
        lockfile_parser: Parser for ``Package.resolved``.
    """

    def __init__(
        self,
        root: PathLike,
        include_transitive: bool = False,
        *,
        manifest_parser: Optional[ManifestParser] = None,
        lockfile_parser: Optional[LockfileParser] = None,
    ) -> None:
        self.root = Path(root)
        self.include_transitive = include_transitive
        self.manifest_parser = manifest_parser or ManifestParser()
        self.lockfile_parser = lockfile_parser or LockfileParser()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def scan(self) -> List[DependencyRecord]:
        """Return deduplicated records in traversal order."""
        if not self.root.is_dir():
            logger.warning("Scan root is not a directory: %s", self.root)
            return []

        seen: Dict[str, DependencyRecord] = {}
        for path in self.iter_source_files():
            for record in self._records_from(path):
                if record.url in seen:
                    logger.debug(
                        "Duplicate %s in %s (first seen in %s)",
                        record.url,
                        record.source_file,
                        seen[record.url].source_file,
                    )
                    continue
                seen[record.url] = record

        logger.info("Found %d dependencies under %s", len(seen), self.root)
        return list(seen.values())

    def find_by_name(self, name: str) -> List[DependencyRecord]:
        """Return every record whose name matches ``name`` case-insensitively.

        Unlike :meth:`scan`, occurrences of the same URL in different files
        are all returned, so callers can tell when a package is declared in
        more than one place.
        """
        wanted = name.lower()
        matches: List[DependencyRecord] = []
        for path in self.iter_source_files():
            matches.extend(
                record
                for record in self._records_from(path)
                if record.name.lower() == wanted
            )
        return matches

    def iter_source_files(self) -> List[Path]:
        """Return manifests and lockfiles in deterministic walk order.

        Within a directory the manifest comes before the lockfile, so a
        declared dependency is never shadowed by its own pin.
        """
        found: List[Path] = []

        def _on_error(exc: OSError) -> None:
            logger.debug("Cannot read directory %s: %s", exc.filename, exc)

        for dirpath, dirnames, filenames in os.walk(self.root, onerror=_on_error):
            dirnames[:] = sorted(d for d in dirnames if not is_skipped_directory(d))
            ordered = sorted(filenames, key=lambda f: (f != MANIFEST_FILENAME, f))
            for filename in ordered:
                if filename in (MANIFEST_FILENAME, LOCKFILE_FILENAME):
                    found.append(Path(dirpath) / filename)

        return found

    # ------------------------------------------------------------------
    # Extraction (private)
    # ------------------------------------------------------------------

    def _records_from(self, path: Path) -> List[DependencyRecord]:
        try:
            text = safe_read_file(path)
        except FileOperationError as exc:
            logger.warning("Skipping unreadable file %s: %s", path, exc)
            return []

        if path.name == MANIFEST_FILENAME:
            return [
                DependencyRecord.from_url(
                    url, version, str(path), requirement_kind=RequirementKind.EXACT
                )
                for url, version in self.manifest_parser.parse(text)
            ]

        try:
            pins = self.lockfile_parser.parse(text, file_path=str(path))
        except ParseError as exc:
            logger.warning("Skipping unparseable lockfile %s: %s", path, exc)
            return []

        reconciler = RequirementReconciler(include_transitive=self.include_transitive)
        return reconciler.reconcile(path, pins)
