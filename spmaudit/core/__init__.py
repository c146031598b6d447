"""
Core functionality exports for spm-audit.

This module provides convenient access to the core subsystems of spm-audit.
Importing from here keeps user-facing imports clean and stable:

    from spmaudit.core import DependencyScanner, AuditChecker

Discovery (scanner, parsers, reconciler), upstream lookups (release
resolver), concurrent auditing (checker), result grouping (aggregator) and
manifest rewriting (updater) are re-exported here.
"""

from __future__ import annotations

from spmaudit.core.aggregator import (
    ResultGroup,
    count_updates,
    group_results,
    source_display_name,
)
from spmaudit.core.checker import AuditChecker, check_for_tool_update
from spmaudit.core.hygiene import (
    LocalCheckoutInspector,
    check_project_readme,
    checkout_dir_for,
)
from spmaudit.core.parsers import (
    DescriptorParser,
    LockfileParser,
    LockfilePin,
    ManifestParser,
)
from spmaudit.core.reconciler import (
    RequirementReconciler,
    descriptor_path_for,
    load_requirement_map,
)
from spmaudit.core.release_resolver import ReleaseResolver, get_github_token
from spmaudit.core.scanner import DependencyScanner
from spmaudit.core.updater import PackageUpdater

__all__ = [
    "AuditChecker",
    "DependencyScanner",
    "DescriptorParser",
    "LocalCheckoutInspector",
    "LockfileParser",
    "LockfilePin",
    "ManifestParser",
    "PackageUpdater",
    "ReleaseResolver",
    "RequirementReconciler",
    "ResultGroup",
    "check_for_tool_update",
    "check_project_readme",
    "checkout_dir_for",
    "count_updates",
    "descriptor_path_for",
    "get_github_token",
    "group_results",
    "load_requirement_map",
    "source_display_name",
]
