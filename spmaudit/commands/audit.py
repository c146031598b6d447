"""Audit command implementation for spm-audit.

Scans a directory tree for ``Package.swift`` manifests and
``Package.resolved`` lockfiles, asks GitHub for the newest stable release
of every dependency and reports the results as one table per source file.

The command orchestrates four core components:

1. **DependencyScanner** discovers and deduplicates dependencies.
2. **ReleaseResolver** queries GitHub releases, falling back to tags.
3. **AuditChecker** runs one concurrent task per dependency and collects
   hygiene signals alongside the version outcome.
4. **group_results** restores a deterministic order for rendering.

Failures for individual dependencies are shown inline in the table and
never change the exit status.

Typical usage::

    # Audit the current directory
    $ spm-audit audit

    # Include transitive dependencies from Package.resolved
    $ spm-audit audit ~/Projects/MyApp --all

    # Machine-readable output without hygiene lookups
    $ spm-audit audit --no-hygiene --format json > report.json
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from rich.markup import escape
from pathlib import Path
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from spmaudit.__version__ import __version__
from spmaudit.exceptions import SPMAuditError
from spmaudit.context import pass_context, SPMAuditContext
from spmaudit.constants import ABANDONED_COMMIT_DAYS, STALE_COMMIT_DAYS
from spmaudit.core import (
    AuditChecker,
    DependencyScanner,
    ReleaseResolver,
    ResultGroup,
    check_for_tool_update,
    check_project_readme,
    count_updates,
    group_results,
)
from spmaudit.models import AuditResult, LicenseCategory, SignalStatus, UpdateStatus
from spmaudit.utils import (
    HTTPClient,
    get_logger,
    print_success,
    print_error,
    print_warning,
    print_info,
    print_table,
    get_raw_console,
    colorize_update_type,
)

logger = get_logger("commands.audit")

_DASH = "[dim]-[/dim]"
_VERSION_COLUMNS = ("Package", "Type", "Current", "Swift", "Latest", "Update", "Status")


@click.command()
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
)
@click.option(
    "--all",
    "-a",
    "include_all",
    is_flag=True,
    help="Also report transitive dependencies pinned in Package.resolved.",
)
@click.option(
    "--no-hygiene",
    is_flag=True,
    help="Skip README, license, agent-file and last-commit checks.",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def audit(
    ctx: SPMAuditContext,
    directory: Path,
    include_all: bool,
    no_hygiene: bool,
    format: str,
) -> None:
    """Check Swift package dependencies for newer releases.

    Scans DIRECTORY (default: current directory) recursively. Only
    dependencies the project declares directly are shown unless ``--all``
    is given.

    Args:
        ctx: spm-audit context with configuration and verbosity settings.
        directory: Root of the tree to scan.
        include_all: Report transitive lockfile pins as well.
        no_hygiene: Skip the documentation hygiene checks.
        format: Output format (``table`` or ``json``).

    Exits:
        0 once the report is printed, even when updates are available or
        individual lookups failed; 1 only on a fatal error.
    """
    config = ctx.get_config()
    include_transitive = include_all or config.include_transitive
    check_hygiene = config.check_hygiene and not no_hygiene

    try:
        groups = asyncio.run(
            _audit_async(
                ctx,
                directory,
                include_transitive=include_transitive,
                check_hygiene=check_hygiene,
                show_progress=format == "table",
            )
        )
    except SPMAuditError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in audit command")
        sys.exit(1)

    if format == "json":
        _display_json(groups)
        return

    if not groups:
        print_warning("No Swift package dependencies found")
        return

    for group in groups:
        _display_group(group, directory, check_hygiene)


# ---------------------------------------------------------------------------
# Async orchestration
# ---------------------------------------------------------------------------


async def _audit_async(
    ctx: SPMAuditContext,
    directory: Path,
    *,
    include_transitive: bool,
    check_hygiene: bool,
    show_progress: bool = True,
) -> List[ResultGroup]:
    """Async implementation of the audit command.

    Core logic:

    1. Look for a newer spm-audit release (best effort, bounded).
    2. Scan ``directory`` for dependencies.
    3. Audit every dependency concurrently through one shared client.
    4. Group and order the results.

    Returns:
        Result groups ordered by source file path.
    """
    config = ctx.get_config()

    if config.check_self_update and show_progress:
        newer = await check_for_tool_update(__version__)
        if newer:
            print_warning(
                f"spm-audit {newer} is available (installed: {__version__})"
            )

    scanner = DependencyScanner(directory, include_transitive=include_transitive)
    records = scanner.scan()
    if not records:
        return []

    if show_progress:
        print_info(f"Checking {len(records)} dependencies...")

    async with HTTPClient(
        timeout=config.timeout,
        max_concurrency=config.max_concurrency,
    ) as http:
        resolver = ReleaseResolver(http)
        if not resolver.authenticated:
            logger.info("No GitHub token found, using unauthenticated requests")

        checker = AuditChecker(resolver, check_hygiene=check_hygiene)
        results = await checker.check_dependencies(records)

    return group_results(results)


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _display_group(group: ResultGroup, root: Path, check_hygiene: bool) -> None:
    """Render one source group as a table followed by its summary."""
    data = [_create_table_row(result, check_hygiene) for result in group.results]

    column_styles: Dict[str, Dict[str, Any]] = {
        "Package": {"style": "bold cyan", "no_wrap": True},
        "Type": {"justify": "center", "no_wrap": True},
        "Current": {"justify": "center", "style": "dim"},
        "Swift": {"justify": "center"},
        "Latest": {"justify": "center", "style": "bold green"},
        "Update": {"justify": "center"},
        "Status": {"justify": "left"},
        "README": {"justify": "center"},
        "License": {"justify": "center"},
        "CLAUDE.md": {"justify": "center"},
        "AGENTS.md": {"justify": "center"},
        "Last Commit": {"justify": "center", "no_wrap": True},
    }

    headers = list(column_styles)
    if not check_hygiene:
        headers = [h for h in headers if h in _VERSION_COLUMNS]

    console = get_raw_console()
    console.print()
    print_table(
        data,
        headers=headers,
        title=group.display_name,
        column_styles=column_styles,
    )

    if check_hygiene:
        readme = check_project_readme(group.source_file, root)
        if readme is SignalStatus.MISSING:
            print_warning("Project has no README")

    failed = sum(1 for result in group.results if result.outcome.is_error)
    if failed:
        print_warning(f"{failed} lookup(s) failed")

    updates = count_updates(group.results)
    if updates:
        print_warning(f"{updates} update(s) available")
    elif not failed:
        print_success("All dependencies are up to date")


def _create_table_row(result: AuditResult, check_hygiene: bool = True) -> Dict[str, str]:
    """Build a Rich-formatted table row for a single result.

    Example::

        {
            "Package": "swift-log",
            "Type": "Exact",
            "Current": "1.0.0",
            "Latest": "1.2.0",
            "Update": "[yellow]minor[/yellow]",
            "Status": "[yellow]⬆ Update available[/yellow]",
            ...
        }
    """
    record = result.record
    outcome = result.outcome

    row = {
        "Package": record.name,
        "Type": record.requirement_label,
        "Current": record.declared_version,
        "Swift": record.swift_tools_version or _DASH,
        "Latest": outcome.latest or _DASH,
        "Update": colorize_update_type(result.update_type) if result.update_type else _DASH,
        "Status": _render_status(result),
    }
    if check_hygiene:
        row.update(
            {
                "README": _render_signal(result.readme),
                "License": _render_license(result.license),
                "CLAUDE.md": _render_signal(result.claude_file),
                "AGENTS.md": _render_signal(result.agents_file),
                "Last Commit": _render_last_commit(result.last_commit),
            }
        )
    return row


def _render_status(result: AuditResult) -> str:
    status = result.outcome.status
    if status is UpdateStatus.UP_TO_DATE:
        return "[green]✓ Up to date[/green]"
    if status is UpdateStatus.UPDATE_AVAILABLE:
        return "[yellow]⬆ Update available[/yellow]"
    if status is UpdateStatus.NO_RELEASES:
        return "[dim]No releases[/dim]"
    return f"[red]✗ {escape(result.outcome.message or '')}[/red]"


def _render_signal(signal: SignalStatus) -> str:
    if signal is SignalStatus.PRESENT:
        return "[green]✓[/green]"
    if signal is SignalStatus.MISSING:
        return "[red]✗[/red]"
    return "[dim]?[/dim]"


def _render_license(category: LicenseCategory) -> str:
    if category is LicenseCategory.UNKNOWN:
        return "[dim]?[/dim]"
    if category is LicenseCategory.MISSING:
        return "[red]Missing[/red]"
    if category.is_copyleft:
        return f"[yellow]{category.value}[/yellow]"
    if category.is_permissive:
        return f"[green]{category.value}[/green]"
    return category.value


def _render_last_commit(
    committed: Optional[datetime],
    now: Optional[datetime] = None,
) -> str:
    """Render a commit date, highlighting stale and abandoned projects."""
    if committed is None:
        return "[dim]?[/dim]"

    now = now or datetime.now(timezone.utc)
    if committed.tzinfo is None:
        committed = committed.replace(tzinfo=timezone.utc)
    age_days = (now - committed).days
    label = committed.strftime("%Y-%m-%d")

    if age_days > ABANDONED_COMMIT_DAYS:
        return f"[red]{label}[/red]"
    if age_days > STALE_COMMIT_DAYS:
        return f"[yellow]{label}[/yellow]"
    return label


def _display_json(groups: List[ResultGroup]) -> None:
    """Render results as JSON grouped by source file."""
    payload = [
        {
            "source": group.source_file,
            "name": group.display_name,
            "updates": group.update_count,
            "dependencies": [result.to_json() for result in group.results],
        }
        for group in groups
    ]
    click.echo(json.dumps(payload, indent=2))
