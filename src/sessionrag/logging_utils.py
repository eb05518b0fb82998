"""
Logging setup for the sessionrag package.

Modules log through ``logging.getLogger(__name__)``; ``setup_logging`` attaches
a single rich handler to the package logger so CLI output and log lines share
the same console.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "sessionrag"


def setup_logging(level: str | int = "INFO", console: Console | None = None) -> logging.Logger:
    """
    Configure the package logger.

    Safe to call more than once: the previous rich handler is replaced
    instead of stacking duplicates.

    Args:
        level: Logging level name or number
        console: Console to render to (defaults to stderr)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False

    return logger
