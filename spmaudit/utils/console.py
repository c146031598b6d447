"""
Console output utilities for spm-audit using Rich.

This module provides user-facing output helpers for CLI commands.
For diagnostic or debug output, use :mod:`spmaudit.utils.logger`.

Guidelines:
- print_* functions: user-facing status messages
- print_table: per-source audit tables
- Logging should never go through this module
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, List, Optional

from rich.table import Table
from rich.theme import Theme
from rich.console import Console

# ---------------------------------------------------------------------------
# Theme configuration
# ---------------------------------------------------------------------------

SPM_AUDIT_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "highlight": "bold magenta",
        "header": "bold blue",
    }
)

# ---------------------------------------------------------------------------
# Console lifecycle management
# ---------------------------------------------------------------------------

_console: Optional[Console] = None
_console_lock = threading.Lock()
_color_override: Optional[bool] = None


def _should_use_color() -> bool:
    """Return True if colored output should be enabled."""
    if _color_override is not None:
        return _color_override
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return a singleton Rich Console instance."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color()
                _console = Console(
                    theme=SPM_AUDIT_THEME,
                    no_color=not use_color,
                    highlight=use_color,
                )
    return _console


def reconfigure_console(*, color: Optional[bool] = None) -> None:
    """Reset the global console instance.

    Args:
        color: Force colors on or off. ``None`` restores detection from
            ``NO_COLOR``, ``CI`` and the terminal.
    """
    global _console, _color_override
    with _console_lock:
        _color_override = color
        _console = None


# ---------------------------------------------------------------------------
# Status message helpers
# ---------------------------------------------------------------------------


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    """Print a success message."""
    _get_console().print(f"{prefix} {message}", style="success")


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    """Print an error message."""
    _get_console().print(f"{prefix} {message}", style="error")


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    """Print a warning message."""
    _get_console().print(f"{prefix} {message}", style="warning")


def print_info(message: str) -> None:
    """Print a neutral progress message."""
    _get_console().print(message, style="info")


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
) -> None:
    """Render rows as a Rich table, one column per header.

    Cell values may contain Rich markup. ``column_styles`` maps a header to
    ``style``, ``justify`` and ``no_wrap`` settings; long cells fold.
    """
    if not data:
        return

    headers = headers or list(data[0])
    column_styles = column_styles or {}

    table = Table(title=title, title_style="header", header_style="bold")
    for header in headers:
        settings = column_styles.get(header, {})
        table.add_column(
            header,
            style=settings.get("style"),
            justify=settings.get("justify", "default"),
            no_wrap=settings.get("no_wrap", False),
            overflow="fold",
        )

    for row in data:
        table.add_row(*(str(row.get(header, "")) for header in headers))

    _get_console().print(table)


# ---------------------------------------------------------------------------
# Advanced / internal helpers
# ---------------------------------------------------------------------------


def get_raw_console() -> Console:
    """Return the underlying Rich Console instance."""
    return _get_console()


_UPDATE_TYPE_COLORS = {
    "major": "red",
    "minor": "yellow",
    "patch": "green",
    "downgrade": "red",
    "new": "cyan",
}


def colorize_update_type(update_type: str) -> str:
    """Wrap an update classification in Rich color markup.

    Classifications without a color (``same``, ``update``, ``unknown``)
    are returned unchanged.
    """
    color = _UPDATE_TYPE_COLORS.get(update_type.lower())
    return f"[{color}]{update_type}[/{color}]" if color else update_type
