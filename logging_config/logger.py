"""
Centralized logging configuration for the Jobly API.

Usage:
    from logging_config.logger import get_logger
    logger = get_logger(__name__)
    logger.info("Company created")
    logger.debug("Generated SQL ...")   # Only shows when VERBOSE=true or LOG_LEVEL=DEBUG
"""
import logging
import sys
from config.settings import LOG_LEVEL, VERBOSE

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def resolve_level(level_name: str = LOG_LEVEL, verbose: bool = VERBOSE) -> int:
    """
    Translate the configured level name into a logging level.

    VERBOSE wins over LOG_LEVEL; unknown names fall back to INFO.
    """
    if verbose:
        return logging.DEBUG
    return getattr(logging, level_name.upper(), logging.INFO)


def _build_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def get_logger(name: str) -> logging.Logger:
    """
    Get configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger writing to stdout at the configured level
    """
    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not logger.handlers:
        level = resolve_level()
        logger.setLevel(level)
        logger.addHandler(_build_handler(level))

        # Prevent propagation to root logger
        logger.propagate = False

    return logger
