"""Documentation hygiene signals read from local files.

SwiftPM keeps a clone of every resolved dependency under
``<package>/.build/checkouts/<name>``. When that clone exists it is
inspected directly for a README, a license file, the agent instruction
files ``CLAUDE.md`` and ``AGENTS.md`` and the declared
``swift-tools-version``. Xcode keeps its clones in DerivedData, which is
not inspected, so Xcode-backed dependencies report every local signal as
unknown and rely on the remote lookups instead.
"""

from __future__ import annotations

from pathlib import Path
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from spmaudit.constants import (
    AGENTS_FILENAME,
    BUILD_DIRECTORY,
    CHECKOUTS_DIRECTORY,
    CLAUDE_FILENAME,
    LICENSE_PREFIXES,
    MANIFEST_FILENAME,
    README_PREFIXES,
)
from spmaudit.core.parsers import ManifestParser
from spmaudit.exceptions import FileOperationError
from spmaudit.models.dependency import DependencyRecord
from spmaudit.models.license import LicenseCategory, classify_license
from spmaudit.models.result import SignalStatus
from spmaudit.utils.filesystem import safe_read_file
from spmaudit.utils.logger import get_logger

logger = get_logger("hygiene")

PathLike = Union[str, Path]

_XCODE_CONTAINER_SUFFIXES = (".xcodeproj", ".xcworkspace")


@dataclass(frozen=True)
class HygieneSignals:
    """Hygiene signals gathered for one dependency."""

    readme: SignalStatus = SignalStatus.UNKNOWN
    license: LicenseCategory = LicenseCategory.UNKNOWN
    claude_file: SignalStatus = SignalStatus.UNKNOWN
    agents_file: SignalStatus = SignalStatus.UNKNOWN
    swift_tools_version: Optional[str] = None


def _inside_xcode_container(path: Path) -> bool:
    return any(part.endswith(_XCODE_CONTAINER_SUFFIXES) for part in path.parts)


def _files_with_prefix(directory: Path, prefixes: Sequence[str]) -> List[Path]:
    """Return regular files whose lower-cased name starts with a prefix."""
    try:
        entries = sorted(directory.iterdir())
    except OSError:
        return []
    return [
        entry
        for entry in entries
        if entry.is_file() and entry.name.lower().startswith(tuple(prefixes))
    ]


def checkout_dir_for(record: DependencyRecord) -> Optional[Path]:
    """Return where SwiftPM would have checked out ``record``.

    ``None`` for dependencies tracked by an Xcode project.
    """
    source = Path(record.source_file)
    if _inside_xcode_container(source):
        return None
    return source.parent / BUILD_DIRECTORY / CHECKOUTS_DIRECTORY / record.name


def find_checkout(record: DependencyRecord) -> Optional[Path]:
    """Return the existing checkout directory of ``record``, if any.

    SwiftPM may change the case of the directory name, so a
    case-insensitive match is accepted.
    """
    expected = checkout_dir_for(record)
    if expected is None:
        return None
    if expected.is_dir():
        return expected

    try:
        siblings = sorted(expected.parent.iterdir())
    except OSError:
        return None

    wanted = record.name.lower()
    for sibling in siblings:
        if sibling.is_dir() and sibling.name.lower() == wanted:
            return sibling
    return None


class LocalCheckoutInspector:
    """Read hygiene signals from a dependency's local checkout.

    Args:
        checkout_dir: Checkout directory, or ``None`` when unavailable. In
            that case every signal is reported as unknown.
    """

    def __init__(self, checkout_dir: Optional[PathLike]) -> None:
        self.checkout_dir = Path(checkout_dir) if checkout_dir is not None else None

    @property
    def available(self) -> bool:
        return self.checkout_dir is not None and self.checkout_dir.is_dir()

    def readme(self) -> SignalStatus:
        if not self.available:
            return SignalStatus.UNKNOWN
        assert self.checkout_dir is not None
        return SignalStatus.from_bool(
            bool(_files_with_prefix(self.checkout_dir, README_PREFIXES))
        )

    def license(self) -> LicenseCategory:
        if not self.available:
            return LicenseCategory.UNKNOWN
        assert self.checkout_dir is not None

        candidates = _files_with_prefix(self.checkout_dir, LICENSE_PREFIXES)
        if not candidates:
            return LicenseCategory.MISSING

        try:
            return classify_license(safe_read_file(candidates[0]))
        except FileOperationError as exc:
            logger.debug("Cannot read license %s: %s", candidates[0], exc)
            return LicenseCategory.UNKNOWN

    def has_file(self, filename: str) -> SignalStatus:
        if not self.available:
            return SignalStatus.UNKNOWN
        assert self.checkout_dir is not None
        return SignalStatus.from_bool((self.checkout_dir / filename).is_file())

    def swift_tools_version(self) -> Optional[str]:
        if not self.available:
            return None
        assert self.checkout_dir is not None

        manifest = self.checkout_dir / MANIFEST_FILENAME
        if not manifest.is_file():
            return None
        try:
            return ManifestParser().parse_tools_version(safe_read_file(manifest))
        except FileOperationError as exc:
            logger.debug("Cannot read %s: %s", manifest, exc)
            return None

    def inspect(self) -> HygieneSignals:
        """Collect every signal in one pass."""
        return HygieneSignals(
            readme=self.readme(),
            license=self.license(),
            claude_file=self.has_file(CLAUDE_FILENAME),
            agents_file=self.has_file(AGENTS_FILENAME),
            swift_tools_version=self.swift_tools_version(),
        )


def project_directory_for(source_file: PathLike, root: PathLike) -> Path:
    """Return the project directory that owns a manifest or lockfile.

    For a lockfile inside ``App.xcodeproj`` this is the directory holding
    the ``.xcodeproj``; otherwise the file's own directory.
    """
    source = Path(source_file)
    if source.name == MANIFEST_FILENAME:
        return source.parent

    parts = source.parts
    for index, part in enumerate(parts):
        if part.endswith(_XCODE_CONTAINER_SUFFIXES):
            return Path(*parts[:index]) if index else Path(root)
    return source.parent


def check_project_readme(source_file: PathLike, root: PathLike) -> SignalStatus:
    """Report whether the project owning ``source_file`` has a README."""
    directory = project_directory_for(source_file, root)
    return SignalStatus.from_bool(bool(_files_with_prefix(directory, README_PREFIXES)))
