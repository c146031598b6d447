"""
Centralized constants for spm-audit.

This module defines immutable configuration values used across spm-audit,
including GitHub endpoints, network settings, file names recognised during
scanning, and logging formats. All values are intended to be treated as
read-only.
"""

from typing import Final, Sequence, Tuple

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = (
    "spm-audit/{version} (https://github.com/Rspoon3/spm-audit)"
)

# ---------------------------------------------------------------------------
# GitHub endpoints
# ---------------------------------------------------------------------------

#: The single forge whose repositories can be audited.
SUPPORTED_HOST: Final[str] = "github.com"

#: Base URL for the GitHub REST API.
GITHUB_API_BASE: Final[str] = "https://api.github.com"

#: Release list for a repository.
GITHUB_RELEASES_URL: Final[str] = GITHUB_API_BASE + "/repos/{owner}/{repo}/releases"

#: Tag list for a repository (one page of up to ``TAGS_PAGE_SIZE`` tags).
GITHUB_TAGS_URL: Final[str] = (
    GITHUB_API_BASE + "/repos/{owner}/{repo}/tags?per_page={per_page}"
)

#: Preferred README of a repository.
GITHUB_README_URL: Final[str] = GITHUB_API_BASE + "/repos/{owner}/{repo}/readme"

#: Detected license file of a repository.
GITHUB_LICENSE_URL: Final[str] = GITHUB_API_BASE + "/repos/{owner}/{repo}/license"

#: Most recent commit on the default branch.
GITHUB_COMMITS_URL: Final[str] = (
    GITHUB_API_BASE + "/repos/{owner}/{repo}/commits?per_page=1"
)

#: Versioned JSON media type requested from the API.
GITHUB_ACCEPT_HEADER: Final[str] = "application/vnd.github.v3+json"

#: Maximum page size accepted by the tags endpoint.
TAGS_PAGE_SIZE: Final[int] = 100

#: Environment variable holding a GitHub token.
GITHUB_TOKEN_ENV: Final[str] = "GITHUB_TOKEN"

#: Command used as a credential helper when the environment has no token.
GH_TOKEN_COMMAND: Final[Tuple[str, ...]] = ("gh", "auth", "token")

#: Release list of spm-audit itself, used by the startup self-check.
SELF_RELEASES_URL: Final[str] = GITHUB_API_BASE + "/repos/Rspoon3/spm-audit/releases"

#: Timeout in seconds for the startup self-check.
SELF_CHECK_TIMEOUT: Final[float] = 2.0

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

#: Maximum number of requests in flight at once.
DEFAULT_MAX_CONCURRENCY: Final[int] = 10

# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------

#: Primary manifest file name.
MANIFEST_FILENAME: Final[str] = "Package.swift"

#: Lockfile name.
LOCKFILE_FILENAME: Final[str] = "Package.resolved"

#: Xcode project descriptor file name.
DESCRIPTOR_FILENAME: Final[str] = "project.pbxproj"

#: Workspace metadata path that separates a lockfile from its ``.xcodeproj``.
WORKSPACE_METADATA_SUFFIX: Final[str] = "project.xcworkspace/xcshareddata/swiftpm"

#: Directory names never descended into while scanning.
SKIPPED_DIRECTORY_NAMES: Final[Sequence[str]] = (".build", "Fixtures")

#: Directory name suffixes never descended into while scanning.
SKIPPED_DIRECTORY_SUFFIXES: Final[Sequence[str]] = ("-tests",)

#: Build output directory holding SwiftPM checkouts.
BUILD_DIRECTORY: Final[str] = ".build"

#: Checkouts directory inside the build output.
CHECKOUTS_DIRECTORY: Final[str] = "checkouts"

# ---------------------------------------------------------------------------
# Hygiene files
# ---------------------------------------------------------------------------

#: File name prefixes recognised as a README.
README_PREFIXES: Final[Sequence[str]] = ("readme",)

#: File name prefixes recognised as a license file.
LICENSE_PREFIXES: Final[Sequence[str]] = ("license", "licence", "copying")

#: Agent instruction files reported per dependency.
CLAUDE_FILENAME: Final[str] = "CLAUDE.md"
AGENTS_FILENAME: Final[str] = "AGENTS.md"

#: Age thresholds (days) used to colour the last-commit column.
STALE_COMMIT_DAYS: Final[int] = 182
ABANDONED_COMMIT_DAYS: Final[int] = 365

# ---------------------------------------------------------------------------
# Version heuristics
# ---------------------------------------------------------------------------

#: Substrings that mark a tag as a prerelease (matched case-insensitively).
PRERELEASE_MARKERS: Final[Sequence[str]] = (
    "-alpha",
    "-beta",
    "-rc",
    "-pre",
    "-dev",
    "-snapshot",
    ".alpha",
    ".beta",
    ".rc",
    ".pre",
    ".dev",
    ".snapshot",
)

# ---------------------------------------------------------------------------
# Configuration defaults
# ---------------------------------------------------------------------------

#: Configuration file discovered in the working directory.
CONFIG_FILENAME: Final[str] = "spm-audit.toml"

#: Table holding spm-audit settings inside the configuration file.
CONFIG_SECTION: Final[str] = "spm-audit"

DEFAULT_INCLUDE_TRANSITIVE: Final[bool] = False
DEFAULT_CHECK_HYGIENE: Final[bool] = True
DEFAULT_CHECK_SELF_UPDATE: Final[bool] = True

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading project files.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
