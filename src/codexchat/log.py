"""Logging setup.

Hides how log records are rendered: rich's RichHandler on the terminal.
The TUI installs its own handler that writes into the log panel.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "codexchat"


def configure_logging(level: str = "INFO", console: Console | None = None) -> logging.Logger:
    """Route codexchat log records through RichHandler.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR)
        console: Console to render to (default: stderr)

    Returns:
        The package root logger
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    return attach_handler(handler, level)


def attach_handler(handler: logging.Handler, level: str = "INFO") -> logging.Logger:
    """Replace the package handlers with a single custom one."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger
