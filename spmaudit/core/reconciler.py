"""Annotate lockfile pins with the requirement kinds declared by Xcode.

A ``Package.resolved`` inside an Xcode project lists every resolved
package, direct or not. The project's ``project.pbxproj`` declares only
the direct ones, so a pin without a descriptor entry is treated as a
transitive dependency and dropped unless the caller asks for transitive
dependencies.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from spmaudit.constants import DESCRIPTOR_FILENAME, WORKSPACE_METADATA_SUFFIX
from spmaudit.core.parsers import DescriptorParser, LockfilePin
from spmaudit.exceptions import FileOperationError
from spmaudit.models.dependency import (
    DependencyRecord,
    RequirementKind,
    canonical_url,
    is_supported_host,
)
from spmaudit.utils.filesystem import safe_read_file
from spmaudit.utils.logger import get_logger

logger = get_logger("reconciler")

PathLike = Union[str, Path]


def descriptor_path_for(lockfile_path: PathLike) -> Path:
    """Return the ``project.pbxproj`` that belongs to a lockfile.

    ``App.xcodeproj/project.xcworkspace/xcshareddata/swiftpm/Package.resolved``
    maps to ``App.xcodeproj/project.pbxproj``. For a lockfile outside an
    Xcode project the descriptor is looked for in the same directory, where
    it normally does not exist.
    """
    directory = Path(lockfile_path).parent.as_posix()
    suffix = "/" + WORKSPACE_METADATA_SUFFIX
    if directory.endswith(suffix):
        directory = directory[: -len(suffix)]
    return Path(directory) / DESCRIPTOR_FILENAME


def load_requirement_map(descriptor_path: PathLike) -> Dict[str, RequirementKind]:
    """Read and parse a descriptor, returning ``{}`` if it is unavailable."""
    path = Path(descriptor_path)
    if not path.is_file():
        logger.debug("No project descriptor at %s", path)
        return {}

    try:
        text = safe_read_file(path)
    except FileOperationError as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return {}

    return DescriptorParser().parse(text)


class RequirementReconciler:
    """Turn lockfile pins into :class:`DependencyRecord` objects.

    Args:
        include_transitive: Keep pins that the project does not declare,
            with ``requirement_kind=None``.
        requirement_map: Pre-loaded descriptor map. When omitted it is read
            from the descriptor beside the lockfile.

    Example::

        >>> reconciler = RequirementReconciler(include_transitive=False)
        >>> records = reconciler.reconcile(lockfile, pins)
    """

    def __init__(
        self,
        include_transitive: bool = False,
        requirement_map: Optional[Dict[str, RequirementKind]] = None,
    ) -> None:
        self.include_transitive = include_transitive
        self._requirement_map = requirement_map

    def reconcile(
        self,
        lockfile_path: PathLike,
        pins: Iterable[LockfilePin],
    ) -> List[DependencyRecord]:
        if self._requirement_map is not None:
            requirements = self._requirement_map
        else:
            requirements = load_requirement_map(descriptor_path_for(lockfile_path))

        records: List[DependencyRecord] = []
        for pin in pins:
            # Branch and revision pins carry no version to audit
            if pin.version is None:
                continue

            if not is_supported_host(pin.location):
                logger.debug("Skipping non-GitHub pin %s", pin.location)
                continue

            kind = requirements.get(canonical_url(pin.location))
            if kind is None:
                kind = requirements.get(pin.location)

            if kind is None and not self.include_transitive:
                logger.debug("Skipping transitive dependency %s", pin.identity)
                continue

            records.append(
                DependencyRecord.from_url(
                    pin.location,
                    pin.version,
                    str(lockfile_path),
                    requirement_kind=kind,
                )
            )

        return records
