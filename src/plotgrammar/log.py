"""
Logging setup for the plotgrammar package.

Modules log through `logging.getLogger(__name__)`; nothing is printed unless an
application (or the workshop CLI) calls `configure_logging`.
"""

from __future__ import annotations

import logging

__all__ = ["LOG_FORMAT", "configure_logging"]

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_HANDLER_NAME = "plotgrammar"


def configure_logging(level: int | str = "INFO") -> logging.Logger:
    """
    Install a single stream handler on the `plotgrammar` logger.

    Calling this more than once only updates the level.

    Args:
        level (int | str): Logging level name or number.

    Returns:
        logging.Logger: The package logger.
    """
    root = logging.getLogger("plotgrammar")
    if isinstance(level, str):
        level = level.upper()
    root.setLevel(level)
    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    return root
