"""Logging configuration"""

from __future__ import annotations

import logging
import sys


def setup_logger(
    name: str,
    level: int = logging.WARNING,
    format_string: str | None = None,
) -> logging.Logger:
    """Set up a logger writing to stderr.

    Records never go to stdout, which carries the report.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handler.setFormatter(logging.Formatter(format_string))
    logger.addHandler(handler)

    return logger
