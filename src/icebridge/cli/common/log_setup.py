"""Logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from icebridge.cli.common.output import console


def setup_logging(verbose: bool) -> None:
    """Route icebridge logs through rich; DEBUG when verbose, WARNING otherwise."""
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=verbose)
    logger = logging.getLogger("icebridge")
    logger.handlers[:] = [handler]
    logger.setLevel(level)
    logger.propagate = False
