"""CLI utility functions for linksindex.

Provides helper functions for:
- Config wiring: Extracting Typer CLI options and passing to load_config
- Error formatting: Consistent user-friendly error messages with exit codes
- Logging setup for --verbose
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, NoReturn

import typer

from linksindex.config import LinksIndexConfig, load_config

# Exit code conventions
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # User error (bad input, missing file, etc.)
EXIT_VALIDATION_FAILED = 2  # Check produced findings


# -----------------------------------------------------------------------------
# Error Formatting Helpers
# -----------------------------------------------------------------------------


def error(msg: str, *, exit_code: int = EXIT_USER_ERROR) -> NoReturn:
    """Print an error message and exit with the given exit code.

    Raises:
        typer.Exit: Always raises to exit the program.
    """
    styled_prefix = typer.style("Error:", fg=typer.colors.RED, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)
    raise typer.Exit(code=exit_code)


def warning(msg: str) -> None:
    """Print a warning message to stderr."""
    styled_prefix = typer.style("Warning:", fg=typer.colors.YELLOW, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)


def configure_logging(verbose: bool) -> None:
    """Send library log records to stderr when --verbose is given."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


# -----------------------------------------------------------------------------
# Config Wiring Helper
# -----------------------------------------------------------------------------


def wire_config(
    db_path: str | None = None,
    report_dir: str | None = None,
    report_name: str | None = None,
    start_dir: Path | None = None,
) -> LinksIndexConfig:
    """Wire CLI options to load_config with appropriate overrides.

    Raises:
        typer.Exit: If configuration is invalid.
    """
    cli_overrides: dict[str, Any] = {
        "db_path": db_path,
        "report_dir": report_dir,
        "report_name": report_name,
    }

    try:
        return load_config(cli_overrides=cli_overrides, start_dir=start_dir)
    except ValueError as e:
        error(f"Invalid configuration: {e}", exit_code=EXIT_USER_ERROR)


# -----------------------------------------------------------------------------
# Typer Option Factory Functions
# -----------------------------------------------------------------------------
# Typer consumes Option objects when decorating commands, so each command
# needs a fresh instance.


def db_option() -> Any:
    """Create a Typer Option for --db / -d."""
    return typer.Option(
        None,
        "--db",
        "-d",
        help="Path to the SQLite store (default: links.db).",
    )


def json_option() -> Any:
    """Create a Typer Option for --json."""
    return typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    )


def quiet_option() -> Any:
    """Create a Typer Option for --quiet / -q."""
    return typer.Option(
        False,
        "--quiet",
        "-q",
        help="Minimal output for CI.",
    )


def verbose_option() -> Any:
    """Create a Typer Option for --verbose."""
    return typer.Option(
        False,
        "--verbose",
        help="Log debug information to stderr.",
    )
