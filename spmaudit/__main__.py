"""
Executable module for spm-audit.

Running:
    python -m spmaudit

is equivalent to:
    spm-audit

This module simply forwards execution to the CLI entrypoint defined in
`spmaudit.cli`.
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Explain on stderr why the CLI could not be imported."""
    sys.stderr.write("spm-audit CLI could not be loaded.\n")
    sys.stderr.write(f"Python version : {sys.version}\n")
    try:
        from spmaudit.__version__ import __version__

        sys.stderr.write(f"spm-audit version: {__version__}\n")
    except ImportError:
        sys.stderr.write("spm-audit version: <unknown>\n")
    sys.stderr.write("\n")
    sys.stderr.write(f"ImportError: {exc}\n")


def main() -> int:
    """
    Main entrypoint when executing `python -m spmaudit`.

    Returns:
        Exit code returned by the CLI.
    """
    try:
        # Import lazily so dependencies are only loaded during CLI use
        from spmaudit.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
