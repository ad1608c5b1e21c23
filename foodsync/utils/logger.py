"""
Logging configuration

Every module logs through get_logger(__name__); records go to stdout in
one format, at LOG_LEVEL (DEBUG whenever DEBUG is on).
"""
import logging
import sys
from foodsync.config import get_settings

settings = get_settings()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _level() -> int:
    if settings.DEBUG:
        return logging.DEBUG
    return getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance"""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        # Uvicorn configures the root logger; avoid printing twice
        logger.propagate = False

    logger.setLevel(_level())
    return logger
