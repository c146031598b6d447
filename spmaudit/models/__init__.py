"""
Unified data model exports for spm-audit.

This module re-exports all core data models to provide a stable and
convenient public API. Users can import models directly from
``spmaudit.models`` instead of individual submodules.

Example:
    >>> from spmaudit.models import DependencyRecord, UpdateOutcome
"""

from __future__ import annotations

from spmaudit.models.dependency import (
    DependencyRecord,
    RequirementKind,
    canonical_url,
    is_supported_host,
    name_from_url,
    parse_repo_slug,
)
from spmaudit.models.license import LicenseCategory, LicenseRule, classify_license
from spmaudit.models.result import (
    AuditResult,
    SignalStatus,
    UpdateOutcome,
    UpdateReport,
    UpdateStatus,
)

__all__ = [
    "DependencyRecord",
    "RequirementKind",
    "canonical_url",
    "is_supported_host",
    "name_from_url",
    "parse_repo_slug",
    "LicenseCategory",
    "LicenseRule",
    "classify_license",
    "AuditResult",
    "SignalStatus",
    "UpdateOutcome",
    "UpdateReport",
    "UpdateStatus",
]
