"""Logging setup shared by the command-line tools."""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"
DATE_FORMAT = "[%X]"


def setup_logger(
    name: str,
    level: Union[int, str] = logging.INFO,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure logging for a tool.

    The handler is attached to the top-level package logger so that every
    module logger obtained through get_logger() shares it.

    Args:
        name: Logger name (usually the calling module's __name__)
        level: Logging level, as a number or a name such as "DEBUG"
        console: Console to log to (stderr if not specified)

    Returns:
        Configured logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    root_name = name.split(".")[0]
    root = logging.getLogger(root_name)
    root.setLevel(level)

    # Avoid stacking handlers when a CLI is invoked repeatedly in one process
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        log_time_format=DATE_FORMAT,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.propagate = False

    return logging.getLogger(name)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""
    return logging.getLogger(name)
