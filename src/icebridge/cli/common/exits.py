"""Exit handling utilities for the CLI."""

from typing import NoReturn

import typer

from icebridge.cli.common.output import out
from icebridge.core.responses import Err


def die(msg: str, code: int = 1) -> NoReturn:
    """Exit with an error message and optional exit code."""
    out.error(msg)
    raise typer.Exit(code)


def warn_exit(msg: str, code: int = 0) -> NoReturn:
    """Exit with a warning message and optional exit code."""
    out.warn(msg)
    raise typer.Exit(code)


def exit_from_err(err: Err, code: int = 1) -> NoReturn:
    """Print a failed boundary result and exit."""
    out.error(err.message)
    out.print(f"[meta]{err.kind}[/]")
    raise typer.Exit(code)


def exit_from_exc(exc: Exception, *, message: str, code: int = 2) -> NoReturn:
    """
    Print an error message and exit, chaining the original exception.

    Used for invalid user input, hence the usage-error exit code by default.
    """
    out.error(message)
    raise typer.Exit(code) from exc
