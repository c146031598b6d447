"""Update command implementation for spm-audit.

Rewrites ``exact:`` versions in ``Package.swift`` manifests. Two
subcommands are provided:

1. ``update all`` moves every direct dependency to its latest stable
   release, one package at a time, and prints a summary table.
2. ``update package`` changes a single dependency, either to its latest
   release or to an explicit ``--version`` that must exist upstream.

Dependencies that only appear in an Xcode project's ``Package.resolved``
cannot be changed here; the command reports them and leaves the project
untouched.

Typical usage::

    # Update everything, keeping a copy of each rewritten manifest
    $ spm-audit update all ~/Projects/MyLib --backup

    # Pin one package to a specific release
    $ spm-audit update package swift-log --version 1.6.1
"""

from __future__ import annotations

import sys
import asyncio
from pathlib import Path
from typing import List, Optional

import click
from rich.markup import escape

from spmaudit.models import UpdateReport
from spmaudit.exceptions import SPMAuditError
from spmaudit.context import pass_context, SPMAuditContext
from spmaudit.core import PackageUpdater, ReleaseResolver
from spmaudit.utils import (
    HTTPClient,
    get_logger,
    print_success,
    print_error,
    print_warning,
    print_table,
    colorize_update_type,
    get_update_type,
)

logger = get_logger("commands.update")

_directory_argument = click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
)
_backup_option = click.option(
    "--backup",
    is_flag=True,
    help="Keep a timestamped copy of each manifest before rewriting it.",
)


@click.group()
def update() -> None:
    """Update dependency versions in Package.swift manifests."""


@update.command("all")
@_directory_argument
@_backup_option
@pass_context
def update_all(ctx: SPMAuditContext, directory: Path, backup: bool) -> None:
    """Update every direct dependency under DIRECTORY to its latest release.

    Packages are processed sequentially. A failure for one package is shown
    in the summary and does not stop the others.

    Exits:
        0 once the summary is printed, including when individual packages
        could not be updated; 1 only on a fatal error.
    """
    try:
        reports = asyncio.run(_update_all_async(ctx, directory, backup))
    except SPMAuditError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in update all command")
        sys.exit(1)

    if not reports:
        print_warning("No Swift package dependencies found")
        return

    _display_summary(reports)

    failed = [r for r in reports if not r.succeeded]
    changed = [r for r in reports if r.changed]
    if changed:
        print_success(f"Updated {len(changed)} package(s)")
    if failed:
        print_warning(f"{len(failed)} package(s) could not be updated")
    if not changed and not failed:
        print_success("All dependencies are up to date")


@update.command("package")
@click.argument("name")
@_directory_argument
@click.option(
    "--version",
    "-v",
    "version",
    default=None,
    help="Target version (MAJOR.MINOR[.PATCH]); defaults to the latest release.",
)
@_backup_option
@pass_context
def update_package(
    ctx: SPMAuditContext,
    name: str,
    directory: Path,
    version: Optional[str],
    backup: bool,
) -> None:
    """Update the dependency NAME declared under DIRECTORY.

    Exits:
        0 on success, 1 if the package cannot be found, is declared in
        more than one file, is managed by Xcode, or the requested version
        does not exist.
    """
    try:
        report = asyncio.run(
            _update_package_async(ctx, directory, name, version, backup)
        )
    except SPMAuditError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in update package command")
        sys.exit(1)

    if report.downgrade:
        print_warning(
            f"{report.name} was downgraded from "
            f"{report.previous_version} to {report.new_version}"
        )
    if report.changed:
        print_success(
            f"Updated {report.name} from {report.previous_version} "
            f"to {report.new_version} in {report.source_file}"
        )
        if report.backup_path:
            logger.info("Backup written to %s", report.backup_path)
    else:
        print_success(f"{report.name} is already at {report.new_version}")


# ---------------------------------------------------------------------------
# Async orchestration
# ---------------------------------------------------------------------------


async def _update_all_async(
    ctx: SPMAuditContext,
    directory: Path,
    backup: bool,
) -> List[UpdateReport]:
    config = ctx.get_config()
    async with HTTPClient(
        timeout=config.timeout,
        max_concurrency=config.max_concurrency,
    ) as http:
        updater = PackageUpdater(
            directory, ReleaseResolver(http), create_backup=backup
        )
        return await updater.update_all()


async def _update_package_async(
    ctx: SPMAuditContext,
    directory: Path,
    name: str,
    version: Optional[str],
    backup: bool,
) -> UpdateReport:
    config = ctx.get_config()
    async with HTTPClient(
        timeout=config.timeout,
        max_concurrency=config.max_concurrency,
    ) as http:
        updater = PackageUpdater(
            directory, ReleaseResolver(http), create_backup=backup
        )
        return await updater.update_package(name, version)


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _display_summary(reports: List[UpdateReport]) -> None:
    """Display update outcomes as a Rich-formatted table.

    Example output::

        ┏━━━━━━━━━━━━━┳━━━━━━━━━━┳━━━━━━━━━┳━━━━━━━━┳━━━━━━━━━━━━━━━━━━━━━━┓
        ┃ Package     ┃ Previous ┃ New     ┃ Change ┃ Result               ┃
        ┡━━━━━━━━━━━━━╇━━━━━━━━━━╇━━━━━━━━━╇━━━━━━━━╇━━━━━━━━━━━━━━━━━━━━━━┩
        │ swift-log   │ 1.0.0    │ 1.6.1   │ minor  │ ✓ updated            │
        │ swift-nio   │ 2.60.0   │ 2.60.0  │ -      │ up to date           │
        └─────────────┴──────────┴─────────┴────────┴──────────────────────┘
    """
    data = []
    for report in reports:
        change = "[dim]-[/dim]"
        if report.changed and report.previous_version and report.new_version:
            change = colorize_update_type(
                "downgrade"
                if report.downgrade
                else get_update_type(report.previous_version, report.new_version)
            )

        if report.error:
            result = f"[red]✗ {escape(report.error)}[/red]"
        elif report.changed:
            result = "[green]✓ updated[/green]"
        else:
            result = "[dim]up to date[/dim]"

        data.append(
            {
                "Package": report.name,
                "Previous": report.previous_version or "[dim]-[/dim]",
                "New": report.new_version or "[dim]-[/dim]",
                "Change": change,
                "Result": result,
            }
        )

    column_styles = {
        "Package": {"style": "bold cyan", "no_wrap": True},
        "Previous": {"justify": "center", "style": "dim"},
        "New": {"justify": "center", "style": "bold green"},
        "Change": {"justify": "center"},
        "Result": {"justify": "left"},
    }

    print_table(data, title="Update Summary", column_styles=column_styles)
