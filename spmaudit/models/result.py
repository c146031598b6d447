"""
Audit and update result models for spm-audit.

An :class:`UpdateOutcome` records what upstream said about one dependency,
an :class:`AuditResult` pairs it with the dependency and its hygiene
signals, and an :class:`UpdateReport` describes one attempted rewrite of a
manifest. All of them are plain immutable data; rendering lives in the
commands.
"""

from __future__ import annotations

import enum
from datetime import datetime
from dataclasses import dataclass
from typing import Any, Dict, Optional

from spmaudit.models.dependency import DependencyRecord
from spmaudit.models.license import LicenseCategory
from spmaudit.utils.version_utils import get_update_type


class UpdateStatus(enum.Enum):
    """Variant of an :class:`UpdateOutcome`."""

    UP_TO_DATE = "up_to_date"
    UPDATE_AVAILABLE = "update_available"
    NO_RELEASES = "no_releases"
    ERROR = "error"


class SignalStatus(enum.Enum):
    """Result of a single hygiene check.

    ``UNKNOWN`` means the check could not be performed, which is distinct
    from ``MISSING`` (checked and absent).
    """

    PRESENT = "present"
    MISSING = "missing"
    UNKNOWN = "unknown"

    @classmethod
    def from_bool(cls, found: bool) -> "SignalStatus":
        return cls.PRESENT if found else cls.MISSING


@dataclass(frozen=True)
class UpdateOutcome:
    """
    Upstream status of one dependency.

    Use the classmethod constructors rather than building instances by
    hand; each one fills exactly the fields its variant needs.

    Attributes:
        status: Outcome variant.
        current: Locally declared version (``UPDATE_AVAILABLE`` only).
        latest: Newest stable upstream version.
        message: Error description (``ERROR`` only).
    """

    status: UpdateStatus
    current: Optional[str] = None
    latest: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def up_to_date(cls, latest: str) -> "UpdateOutcome":
        return cls(UpdateStatus.UP_TO_DATE, latest=latest)

    @classmethod
    def update_available(cls, current: str, latest: str) -> "UpdateOutcome":
        return cls(UpdateStatus.UPDATE_AVAILABLE, current=current, latest=latest)

    @classmethod
    def no_releases(cls) -> "UpdateOutcome":
        return cls(UpdateStatus.NO_RELEASES)

    @classmethod
    def error(cls, message: str) -> "UpdateOutcome":
        return cls(UpdateStatus.ERROR, message=message)

    @property
    def has_update(self) -> bool:
        return self.status is UpdateStatus.UPDATE_AVAILABLE

    @property
    def is_error(self) -> bool:
        return self.status is UpdateStatus.ERROR

    def __str__(self) -> str:
        if self.status is UpdateStatus.UPDATE_AVAILABLE:
            return f"update available: {self.current} -> {self.latest}"
        if self.status is UpdateStatus.UP_TO_DATE:
            return f"up to date ({self.latest})"
        if self.status is UpdateStatus.NO_RELEASES:
            return "no releases"
        return f"error: {self.message}"


@dataclass(frozen=True)
class AuditResult:
    """
    One dependency with its upstream outcome and hygiene signals.

    Attributes:
        record: The audited dependency.
        outcome: Upstream release status.
        readme: README presence in the dependency.
        license: Detected license family.
        claude_file: ``CLAUDE.md`` presence in the checkout.
        agents_file: ``AGENTS.md`` presence in the checkout.
        last_commit: Date of the latest upstream commit, if known.
    """

    record: DependencyRecord
    outcome: UpdateOutcome
    readme: SignalStatus = SignalStatus.UNKNOWN
    license: LicenseCategory = LicenseCategory.UNKNOWN
    claude_file: SignalStatus = SignalStatus.UNKNOWN
    agents_file: SignalStatus = SignalStatus.UNKNOWN
    last_commit: Optional[datetime] = None

    @property
    def update_type(self) -> Optional[str]:
        """``major``/``minor``/``patch`` label when an update is available."""
        if not self.outcome.has_update:
            return None
        return get_update_type(self.outcome.current, self.outcome.latest)

    def to_json(self) -> Dict[str, Any]:
        """
        Serialize the result to a JSON-compatible dictionary.

        Returns:
            JSON-safe representation, omitting empty fields.
        """
        record = self.record
        entry: Dict[str, Any] = {
            "name": record.name,
            "url": record.url,
            "source": record.source_file,
            "requirement": (
                record.requirement_kind.value if record.requirement_kind else None
            ),
            "current": record.declared_version,
            "status": self.outcome.status.value,
        }

        if self.outcome.latest:
            entry["latest"] = self.outcome.latest
        if self.update_type:
            entry["update_type"] = self.update_type
        if self.outcome.message:
            entry["error"] = self.outcome.message
        if record.swift_tools_version:
            entry["swift_tools_version"] = record.swift_tools_version

        entry["hygiene"] = {
            "readme": self.readme.value,
            "license": self.license.value,
            "claude_md": self.claude_file.value,
            "agents_md": self.agents_file.value,
        }
        if self.last_commit is not None:
            entry["last_commit"] = self.last_commit.isoformat()

        return entry


@dataclass
class UpdateReport:
    """
    Outcome of one attempted manifest rewrite.

    Attributes:
        name: Dependency name.
        source_file: Manifest that was (or would have been) rewritten.
        previous_version: Version declared before the update.
        new_version: Target version.
        downgrade: The target sorts before the previous version.
        changed: The file was actually rewritten.
        error: Failure message when the update was not applied.
        backup_path: Backup written before the rewrite, if requested.
    """

    name: str
    source_file: str
    previous_version: Optional[str] = None
    new_version: Optional[str] = None
    downgrade: bool = False
    changed: bool = False
    error: Optional[str] = None
    backup_path: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None
