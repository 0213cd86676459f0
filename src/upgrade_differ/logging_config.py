"""Logging configuration for the upgrade differ."""

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-32s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class DifferStreamHandler(logging.StreamHandler):
    """The stderr handler installed by setup_logging."""


def setup_logging(log_level: str | None = None) -> None:
    """Configure the package logger with a single stderr handler.

    Args:
        log_level: Level name; falls back to LOG_LEVEL, then WARNING.
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "WARNING")

    level = getattr(logging, log_level.upper(), logging.WARNING)

    logger = logging.getLogger("upgrade_differ")
    logger.setLevel(level)

    # Re-running setup (tests, repeated main() calls) must not stack handlers.
    for handler in list(logger.handlers):
        if isinstance(handler, DifferStreamHandler):
            logger.removeHandler(handler)

    handler = DifferStreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)
