"""
Utility helpers for spm-audit.

This package provides reusable utilities used across spm-audit, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- Async HTTP client utilities
- Version comparison helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from spmaudit.utils.filesystem import (
    create_backup,
    safe_read_file,
    safe_write_file,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from spmaudit.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
    verbosity_to_level,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from spmaudit.utils.console import (
    colorize_update_type,
    get_raw_console,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# HTTP utilities
# ---------------------------------------------------------------------------

from spmaudit.utils.http import HTTPClient

# ---------------------------------------------------------------------------
# Version utilities
# ---------------------------------------------------------------------------

from spmaudit.utils.version_utils import (
    compare_versions,
    get_update_type,
    is_downgrade,
    is_newer,
    is_prerelease,
    is_valid_semver,
    is_valid_version,
    normalize_version,
    version_components,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "print_error",
    "print_info",
    "print_table",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    "colorize_update_type",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    "verbosity_to_level",
    # Filesystem
    "safe_read_file",
    "safe_write_file",
    "create_backup",
    # HTTP
    "HTTPClient",
    # Version utilities
    "normalize_version",
    "version_components",
    "compare_versions",
    "is_newer",
    "is_downgrade",
    "is_valid_semver",
    "is_prerelease",
    "is_valid_version",
    "get_update_type",
]
