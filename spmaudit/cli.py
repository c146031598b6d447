"""
Command-line interface for spm-audit.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration. Running ``spm-audit``
without a subcommand audits the current directory.
"""

from __future__ import annotations

import sys
import logging
from pathlib import Path
from typing import Optional

import click

from spmaudit.config import load_config
from spmaudit.__version__ import __version__
from spmaudit.context import SPMAuditContext
from spmaudit.exceptions import ConfigError, SPMAuditError
from spmaudit.utils.console import print_error, print_warning, reconfigure_console
from spmaudit.utils.logger import get_logger, setup_logging, verbosity_to_level

logger = get_logger("cli")


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="SPM_AUDIT_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=None,
    help="Force colored output on or off (default: auto-detect).",
)
@click.version_option(
    version=__version__,
    prog_name="spm-audit",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: Optional[bool],
) -> None:
    """spm-audit: audit Swift Package Manager dependencies.

    \b
    Available commands:
      spm-audit audit              Check dependencies for newer releases
      spm-audit update all         Move every dependency to its latest release
      spm-audit update package     Change the version of one dependency

    \b
    Examples:
      spm-audit
      spm-audit audit ~/Projects/MyApp --all
      spm-audit update package swift-log --version 1.6.1

    Use ``spm-audit COMMAND --help`` for command-specific options.
    """
    _configure_logging(verbose)
    reconfigure_console(color=color)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    audit_ctx = SPMAuditContext()
    audit_ctx.config_path = config or loaded_config.source_path
    audit_ctx.color = color is not False
    audit_ctx.verbose = verbose
    audit_ctx.config = loaded_config
    ctx.obj = audit_ctx

    logger.debug("spm-audit v%s", __version__)
    logger.debug("Config path: %s", audit_ctx.config_path)
    logger.debug("Verbosity: %s | Color: %s", verbose, color)

    if ctx.invoked_subcommand is None:
        ctx.invoke(audit)


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    level = verbosity_to_level(verbose)
    setup_logging(level=level, verbose=verbose >= 2)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


# Register CLI subcommands
try:
    from spmaudit.commands.audit import audit
    from spmaudit.commands.update import update

    cli.add_command(audit)
    cli.add_command(update)

except ImportError as exc:
    sys.stderr.write(f"FATAL: Failed to import CLI commands: {exc}\n")
    sys.exit(1)


def main() -> int:
    """Main entry point for the spm-audit CLI.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.exceptions.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except SPMAuditError as exc:
        print_error(str(exc))
        logger.debug(
            "SPMAuditError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
