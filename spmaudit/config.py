"""Configuration file loader for spm-audit.

Handles discovery, loading, parsing, and validation of ``spm-audit.toml``.
Settings live under the ``[spm-audit]`` table.

Discovery order:

1. Explicit path from ``--config`` or ``SPM_AUDIT_CONFIG``
2. ``spm-audit.toml`` in the current directory

Configuration precedence: defaults < config file < CLI args.

Typical usage::

    config = load_config()  # Auto-discover
    config = load_config(Path("custom.toml"))  # Explicit path

Example (``spm-audit.toml``)::

    [spm-audit]
    include_transitive = true
    check_hygiene = false
    max_concurrency = 4
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from spmaudit.exceptions import ConfigError
from spmaudit.utils.logger import get_logger
from spmaudit.constants import (
    CONFIG_FILENAME,
    CONFIG_SECTION,
    DEFAULT_CHECK_HYGIENE,
    DEFAULT_CHECK_SELF_UPDATE,
    DEFAULT_INCLUDE_TRANSITIVE,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_TIMEOUT,
)

logger = get_logger("config")

_BOOL_OPTIONS = ("include_transitive", "check_hygiene", "check_self_update")
_POSITIVE_INT_OPTIONS = ("max_concurrency", "timeout")


@dataclass
class SPMAuditConfig:
    """Parsed and validated spm-audit configuration.

    All fields have defaults, so an empty config file is valid.

    Attributes:
        include_transitive: Report lockfile pins the project does not
            declare directly.
        check_hygiene: Collect README, license, agent-file and last-commit
            signals during an audit.
        check_self_update: Look for a newer spm-audit release on startup.
        max_concurrency: Maximum number of GitHub requests in flight.
        timeout: Per-request timeout in seconds.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    include_transitive: bool = DEFAULT_INCLUDE_TRANSITIVE
    check_hygiene: bool = DEFAULT_CHECK_HYGIENE
    check_self_update: bool = DEFAULT_CHECK_SELF_UPDATE
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    timeout: int = DEFAULT_TIMEOUT

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        Excludes ``source_path`` metadata.
        """
        return {
            "include_transitive": self.include_transitive,
            "check_hygiene": self.check_hygiene,
            "check_self_update": self.check_self_update,
            "max_concurrency": self.max_concurrency,
            "timeout": self.timeout,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    candidate = Path.cwd() / CONFIG_FILENAME
    if candidate.is_file():
        logger.debug("Found %s: %s", CONFIG_FILENAME, candidate)
        return candidate

    logger.debug("No configuration file found")
    return None


def load_config(config_path: Optional[Path] = None) -> SPMAuditConfig:
    """Load and validate spm-audit configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`SPMAuditConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        return SPMAuditConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    section = raw.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise ConfigError(
            f"[{CONFIG_SECTION}] must be a table",
            config_path=str(resolved),
        )

    if not section:
        logger.debug("Config file found but no [%s] table, using defaults", CONFIG_SECTION)
        return SPMAuditConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> SPMAuditConfig:
    """Validate the ``[spm-audit]`` table.

    Rejects unknown keys and type mismatches. ``bool`` is not accepted
    where an integer is expected.
    """
    config = SPMAuditConfig()

    unknown = set(section) - set(_BOOL_OPTIONS) - set(_POSITIVE_INT_OPTIONS)
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    for option in _BOOL_OPTIONS:
        if option not in section:
            continue
        val = section[option]
        if not isinstance(val, bool):
            raise ConfigError(
                f"{option} must be a boolean, got {type(val).__name__}",
                config_path=config_path,
                option=option,
            )
        setattr(config, option, val)

    for option in _POSITIVE_INT_OPTIONS:
        if option not in section:
            continue
        val = section[option]
        if isinstance(val, bool) or not isinstance(val, int):
            raise ConfigError(
                f"{option} must be an integer, got {type(val).__name__}",
                config_path=config_path,
                option=option,
            )
        if val < 1:
            raise ConfigError(
                f"{option} must be at least 1, got {val}",
                config_path=config_path,
                option=option,
            )
        setattr(config, option, val)

    return config
