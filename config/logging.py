"""
Logging configuration for the Prospect Resolution Engine.

Every module logs through children of one project logger so that a bulk run
shows matcher, resolver and batch output in a single stream (and log file).
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from config.settings import settings

LOG_DIR = settings.project_root / "logs"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER_NAME = "prospect_resolution"


def setup_logging(
    name: str = ROOT_LOGGER_NAME,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Set up the project logger.

    Args:
        name: Logger name
        log_dir: Directory for the log file (defaults to <project>/logs).
            Ignored when LOG_TO_FILE is disabled.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if settings.LOG_TO_FILE:
        log_dir = log_dir or LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / f"{name}.log")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(component: str) -> logging.Logger:
    """Return a child of the project logger, e.g. ``prospect_resolution.batch``."""
    return logger.getChild(component)


# Default logger
logger = setup_logging()
