"""Rewrite exact dependency versions in ``Package.swift``.

Updates are deliberately conservative:

- a package declared in more than one file is refused rather than guessed;
- an explicit target version must be ``MAJOR.MINOR[.PATCH]`` and must exist
  among the upstream releases;
- only ``Package.swift`` is ever written. Dependencies tracked by an Xcode
  project (found through ``Package.resolved``) have to be changed in Xcode;
- the manifest must contain exactly one ``url: "<url>", exact: "<version>"``
  declaration for the package, and only its version literal is replaced;
- every check runs before the file is touched, and the write is atomic.

Typical usage::

    async with HTTPClient() as http:
        updater = PackageUpdater(".", ReleaseResolver(http))
        report = await updater.update_package("swift-log", "1.6.1")
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional, Pattern, Tuple, Union

from spmaudit.core.release_resolver import ReleaseResolver
from spmaudit.core.scanner import DependencyScanner
from spmaudit.exceptions import (
    AmbiguousMatchError,
    InvalidVersionError,
    MultipleSourcesError,
    PackageNotFoundError,
    SPMAuditError,
    UnsupportedUpdateError,
    UpdateError,
    VersionNotFoundError,
)
from spmaudit.models.dependency import DependencyRecord
from spmaudit.models.result import UpdateReport
from spmaudit.utils.filesystem import safe_read_file, safe_write_file
from spmaudit.utils.logger import get_logger
from spmaudit.utils.version_utils import (
    is_downgrade,
    is_valid_version,
    normalize_version,
)

logger = get_logger("updater")

PathLike = Union[str, Path]


def declaration_pattern(url: str) -> Pattern[str]:
    """Pattern matching the exact-version declaration of ``url``.

    The version literal is captured in group 1. A ``.git`` suffix on the
    declared URL is accepted.
    """
    return re.compile(
        r'url:\s*"' + re.escape(url) + r'(?:\.git)?/?",\s*exact:\s*"([^"]+)"'
    )


def rewrite_declaration(text: str, url: str, new_version: str, *, file_path: str) -> str:
    """Return ``text`` with the exact version of ``url`` replaced.

    Raises:
        AmbiguousMatchError: If the declaration occurs zero or several times.
    """
    matches = list(declaration_pattern(url).finditer(text))
    if len(matches) != 1:
        raise AmbiguousMatchError(file_path, len(matches))

    start, end = matches[0].span(1)
    return text[:start] + new_version + text[end:]


class PackageUpdater:
    """Update exact versions of dependencies declared under ``root``.

    Args:
        root: Project directory to scan.
        resolver: Upstream lookups used to validate or choose versions.
        create_backup: Keep a timestamped copy of each rewritten manifest.
    """

    def __init__(
        self,
        root: PathLike,
        resolver: ReleaseResolver,
        *,
        create_backup: bool = False,
    ) -> None:
        self.root = Path(root)
        self.resolver = resolver
        self.create_backup = create_backup
        self.scanner = DependencyScanner(self.root, include_transitive=False)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def update_package(
        self,
        name: str,
        version: Optional[str] = None,
    ) -> UpdateReport:
        """Update one package to ``version``, or to its latest release.

        Raises:
            PackageNotFoundError: No declaration of ``name`` exists.
            MultipleSourcesError: ``name`` is declared in several files.
            UnsupportedUpdateError: ``name`` is tracked by an Xcode project.
            InvalidVersionError: ``version`` is not dotted-integer.
            VersionNotFoundError: ``version`` (or any release) is not upstream.
            AmbiguousMatchError: The manifest declaration cannot be located
                unambiguously.
            NetworkError: GitHub could not be queried.
        """
        record = self._locate(name)
        target = await self._resolve_target(record, version)
        return self._apply(record, target)

    async def update_all(self) -> List[UpdateReport]:
        """Move every direct dependency to its latest release.

        Packages are processed one at a time; a failure is recorded in that
        package's report and the remaining packages are still processed.
        """
        reports: List[UpdateReport] = []
        for record in self.scanner.scan():
            try:
                self._ensure_writable(record)
                target = await self._latest_version(record)
                if target == record.declared_version:
                    reports.append(
                        UpdateReport(
                            name=record.name,
                            source_file=record.source_file,
                            previous_version=record.declared_version,
                            new_version=target,
                        )
                    )
                    continue
                reports.append(self._apply(record, target))
            except SPMAuditError as exc:
                logger.warning("Failed to update %s: %s", record.name, exc)
                reports.append(
                    UpdateReport(
                        name=record.name,
                        source_file=record.source_file,
                        previous_version=record.declared_version,
                        error=exc.message,
                    )
                )
        return reports

    # ------------------------------------------------------------------
    # Steps (private)
    # ------------------------------------------------------------------

    def _locate(self, name: str) -> DependencyRecord:
        records = self.scanner.find_by_name(name)
        if not records:
            raise PackageNotFoundError(name)

        sources = {record.source_file for record in records}
        if len(sources) > 1:
            raise MultipleSourcesError(name, list(sources))

        record = records[0]
        self._ensure_writable(record)
        return record

    @staticmethod
    def _ensure_writable(record: DependencyRecord) -> None:
        if record.is_lockfile_backed:
            raise UnsupportedUpdateError(record.name)

    async def _resolve_target(
        self,
        record: DependencyRecord,
        version: Optional[str],
    ) -> str:
        if version is None:
            return await self._latest_version(record)

        if not is_valid_version(version):
            raise InvalidVersionError(version)

        owner, repo = self._slug(record)
        wanted = normalize_version(version)
        available = await self.resolver.fetch_release_versions(owner, repo)
        if wanted not in available:
            raise VersionNotFoundError(record.name, version)
        return wanted

    async def _latest_version(self, record: DependencyRecord) -> str:
        owner, repo = self._slug(record)
        latest = await self.resolver.fetch_latest_version(owner, repo)
        if latest is None:
            raise VersionNotFoundError(record.name, "latest")
        return latest

    @staticmethod
    def _slug(record: DependencyRecord) -> Tuple[str, str]:
        slug = record.owner_repo
        if slug is None:
            raise UpdateError(f"Could not parse GitHub URL: {record.url}")
        return slug

    def _apply(self, record: DependencyRecord, target: str) -> UpdateReport:
        report = UpdateReport(
            name=record.name,
            source_file=record.source_file,
            previous_version=record.declared_version,
            new_version=target,
        )

        if is_downgrade(target, record.declared_version):
            logger.warning(
                "Downgrading %s from %s to %s",
                record.name,
                record.declared_version,
                target,
            )
            report.downgrade = True

        text = safe_read_file(record.source_file)
        updated = rewrite_declaration(
            text, record.url, target, file_path=record.source_file
        )
        if updated == text:
            return report

        backup = safe_write_file(
            record.source_file, updated, create_backup_copy=self.create_backup
        )
        report.changed = True
        report.backup_path = str(backup) if backup else None
        logger.info(
            "Updated %s from %s to %s in %s",
            record.name,
            record.declared_version,
            target,
            record.source_file,
        )
        return report
