"""
Logging setup for imagebudget.

Library modules only create named loggers. Handlers are attached by the
application through configure_logging().
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "imagebudget"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_LEVEL_ENV = "IMAGEBUDGET_LOG_LEVEL"

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def _resolve_level(level: Optional[Union[int, str]]) -> int:
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def configure_logging(
    level: Optional[Union[int, str]] = None,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Attach a handler to the package logger.

    Args:
        level: Logging level name or number (default: $IMAGEBUDGET_LOG_LEVEL or INFO)
        log_file: Write to this file instead of stderr

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_resolve_level(level))

    # Replace handlers from an earlier call
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()

    if log_file is not None:
        handler = logging.FileHandler(Path(log_file), encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger inside the package namespace."""
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
