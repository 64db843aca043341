"""Logging configuration for branch-sweep."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False, debug: bool = False, console: Optional[Console] = None) -> None:
    """Setup logging configuration.

    Args:
        verbose: If True, show INFO level messages
        debug: If True, show DEBUG level messages, including GitPython's
        console: Console to log to, stderr by default
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console or Console(stderr=True), rich_tracebacks=True, show_path=debug)],
        force=True,
    )

    # GitPython logs every command it runs at DEBUG
    logging.getLogger("git").setLevel(logging.DEBUG if debug else logging.WARNING)
