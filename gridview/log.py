"""Logging utilities for gridview.

The renderer reports layout decisions and render-guard transitions at debug
level; nothing in this module raises.
"""

from __future__ import annotations

import logging
import sys


_DEFAULT_FORMAT = "%(name)s - %(levelname)s - %(message)s"


class _LoggerHolder:
    """Holder for the global logger instance."""

    instance: logging.Logger | None = None


def get_logger() -> logging.Logger:
    """Get the gridview logger instance.

    Returns
    -------
    logging.Logger
        The gridview logger configured with a stream handler.
    """
    if _LoggerHolder.instance is None:
        logger = logging.getLogger("gridview")
        logger.setLevel(logging.WARNING)

        # Only add handler if none exists
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
            logger.addHandler(handler)

        _LoggerHolder.instance = logger

    return _LoggerHolder.instance


def debug(msg: str) -> None:
    """Log a debug message."""
    get_logger().debug(msg)


def info(msg: str) -> None:
    """Log an info message."""
    get_logger().info(msg)


def warn(msg: str) -> None:
    """Log a warning message. Never raises exceptions.

    Parameters
    ----------
    msg : str
        The warning message to log.
    """
    get_logger().warning(msg)


def set_level(level: int | str) -> None:
    """Set the logging level.

    Parameters
    ----------
    level : int or str
        The logging level (e.g., logging.DEBUG, "DEBUG").
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    get_logger().setLevel(level)


def set_format(fmt: str) -> None:
    """Replace the formatter on every handler of the gridview logger."""
    for handler in get_logger().handlers:
        handler.setFormatter(logging.Formatter(fmt))


def enable_debug() -> None:
    """Enable debug mode for verbose rendering logs.

    This will show:
    - Layout decisions (filter row, folding, extra column)
    - Render guard transitions
    - Detached filter registration
    """
    set_level(logging.DEBUG)
