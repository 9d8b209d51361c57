"""Logging utilities for HierPower."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(quiet: bool = False, verbose: bool = False) -> None:
    """Configures the logging for the application.

    Log records go to stderr so that the report on stdout stays machine-readable.

    Args:
        quiet: If True, set log level to WARNING (show only warnings/errors).
        verbose: If True, set log level to DEBUG. Ignored when quiet is set.
    """
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    # Only configure if not already configured (prevents multiple calls)
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=level,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[
                RichHandler(console=Console(stderr=True), rich_tracebacks=True, markup=False)
            ],
        )
    else:
        # Update level if already configured
        logging.getLogger().setLevel(level)
