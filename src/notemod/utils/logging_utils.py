"""
Logging setup for the command-line entry point.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

_HANDLER_NAME = "notemod-console"


def configure_logging(verbose: bool = False, stream: Optional[TextIO] = None) -> logging.Handler:
    """
    Attach a console handler to the `notemod` logger.

    Calling this again replaces the previous handler instead of adding a
    second one.

    Args:
        verbose: Log DEBUG records as well as INFO and above.
        stream: Destination stream. Defaults to stderr.

    Returns:
        The installed handler.
    """
    logger = logging.getLogger("notemod")
    for existing in list(logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logger.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    level = logging.DEBUG if verbose else logging.INFO
    handler.setLevel(level)
    logger.setLevel(level)
    logger.addHandler(handler)
    return handler


def quiet_third_party() -> None:
    """Keep HTTP client chatter out of verbose output."""
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)
