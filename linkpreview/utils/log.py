"""Process logging: stderr only, stdout carries the feedback JSON."""

import logging
import sys

FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | int = "WARNING") -> logging.Logger:
    """Attach a single stderr handler to the ``linkpreview`` logger."""
    logger = logging.getLogger("linkpreview")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logger.setLevel(level)
    if logger.handlers:
        return logger

    sh = logging.StreamHandler(sys.stderr)
    sh.setFormatter(logging.Formatter(FORMAT))
    logger.addHandler(sh)
    return logger
