"""
Custom exception hierarchy for spm-audit.

This module defines structured exception types used across spm-audit.
All exceptions inherit from :class:`SPMAuditError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

Errors raised while updating a single package derive from
:class:`UpdateError` and fall into three families:

- *not found*: :class:`PackageNotFoundError`, :class:`VersionNotFoundError`
- *ambiguous*: :class:`MultipleSourcesError`, :class:`AmbiguousMatchError`
- *unsupported*: :class:`UnsupportedUpdateError`, :class:`InvalidVersionError`
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional, Sequence


class SPMAuditError(Exception):
    """Base exception for all spm-audit errors.

    All spm-audit-specific exceptions should inherit from this class.
    It supports structured metadata via ``details`` for richer error
    reporting and debugging.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class ParseError(SPMAuditError):
    """Raised when a manifest, lockfile or project descriptor cannot be parsed.

    Args:
        message: Error description.
        file_path: Path to the file being parsed.
    """

    __slots__ = ("file_path",)

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "file", file_path)

        super().__init__(message, details)

        self.file_path = file_path


class NetworkError(SPMAuditError):
    """Raised when HTTP or network operations fail.

    Args:
        message: Error description.
        url: URL being accessed.
        status_code: HTTP status code, if available.
        response_body: Raw response body, truncated for safety.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        _add_if(details, "status_code", status_code)

        if response_body is not None:
            details["response"] = _truncate(response_body)

        super().__init__(message, details)

        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class GitHubError(NetworkError):
    """Raised for failures related to the GitHub API.

    Args:
        message: Error description.
        repository: ``owner/repo`` slug involved.
        **kwargs: Additional arguments forwarded to ``NetworkError``.
    """

    __slots__ = ("repository",)

    def __init__(
        self,
        message: str,
        *,
        repository: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.repository = repository
        if repository is not None:
            self.details["repository"] = repository


class RateLimitError(NetworkError):
    """Raised when the GitHub API quota is exhausted.

    Args:
        message: Error description.
        reset_at: Time the quota resets, already formatted for display.
        **kwargs: Additional arguments forwarded to ``NetworkError``.
    """

    __slots__ = ("reset_at",)

    def __init__(
        self,
        message: str,
        *,
        reset_at: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.reset_at = reset_at
        if reset_at is not None:
            self.details["reset_at"] = reset_at


class FileOperationError(SPMAuditError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/write/backup).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ConfigError(SPMAuditError):
    """Raised when the configuration file is missing, malformed or invalid.

    Args:
        message: Error description.
        config_path: Path of the configuration file.
        option: Offending option name, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


# ---------------------------------------------------------------------------
# Update errors
# ---------------------------------------------------------------------------


class UpdateError(SPMAuditError):
    """Base class for errors that abort a single update operation."""


class PackageNotFoundError(UpdateError):
    """Raised when no local occurrence of the requested package exists."""

    __slots__ = ("package_name",)

    def __init__(self, package_name: str) -> None:
        super().__init__(f"Package '{package_name}' not found in project")
        self.package_name = package_name


class VersionNotFoundError(UpdateError):
    """Raised when the requested version does not exist upstream."""

    __slots__ = ("package_name", "version")

    def __init__(self, package_name: str, version: str) -> None:
        super().__init__(
            f"Version '{version}' not found for package '{package_name}' on GitHub"
        )
        self.package_name = package_name
        self.version = version


class InvalidVersionError(UpdateError):
    """Raised when a requested version is not a dotted-integer string."""

    __slots__ = ("version",)

    def __init__(self, version: str) -> None:
        super().__init__(f"Invalid version format: '{version}'")
        self.version = version


class MultipleSourcesError(UpdateError):
    """Raised when a package is declared in more than one source file."""

    __slots__ = ("package_name", "sources")

    def __init__(self, package_name: str, sources: Sequence[str]) -> None:
        self.package_name = package_name
        self.sources = sorted(sources)
        super().__init__(
            f"Package '{package_name}' found in multiple files: "
            f"{', '.join(self.sources)}"
        )


class AmbiguousMatchError(UpdateError):
    """Raised when the manifest does not contain exactly one rewritable match."""

    __slots__ = ("file_path", "match_count")

    def __init__(self, file_path: str, match_count: int) -> None:
        super().__init__(
            "Expected exactly one match for package URL "
            f"(found {match_count})",
            {"file": file_path},
        )
        self.file_path = file_path
        self.match_count = match_count


class UnsupportedUpdateError(UpdateError):
    """Raised when a dependency cannot be updated automatically."""

    __slots__ = ("package_name",)

    def __init__(self, package_name: str, reason: Optional[str] = None) -> None:
        super().__init__(
            reason
            or (
                "Xcode project updates are not supported. Package "
                f"'{package_name}' is tracked by an Xcode project. "
                "Please update it manually."
            )
        )
        self.package_name = package_name
