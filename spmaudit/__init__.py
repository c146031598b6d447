"""
spm-audit: audit Swift Package Manager dependencies against GitHub.

spm-audit scans a project tree for ``Package.swift`` manifests and
``Package.resolved`` lockfiles, works out which dependencies are declared,
and checks each one against its upstream GitHub releases. Alongside the
version status it reports documentation hygiene for every dependency:
README presence, license category, swift-tools-version, agent instruction
files and the date of the last commit.

Features include:
    • Concurrent release lookups with a releases → tags fallback
    • Xcode project support (requirement kinds from ``project.pbxproj``)
    • Optional reporting of transitive dependencies
    • Safe, anchored updates of exact versions in ``Package.swift``
"""

from __future__ import annotations

from spmaudit.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "spm-audit Contributors"
__license__ = "MIT"
__url__ = "https://github.com/Rspoon3/spm-audit"
__description__ = "Audit and update Swift Package Manager dependencies."

__all__ = [
    "__version__",
]
