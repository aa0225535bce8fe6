"""
ProfMatch - Logging
====================
Provides a pre-configured logger factory for consistent, readable
log output across all ProfMatch modules.

Verbosity comes from ``settings.LOG_LEVEL`` when it is set, otherwise
from ``settings.ENV``:
  • ``"dev"``  → DEBUG level  (maximum detail)
  • ``"prod"`` → WARNING level (errors & warnings only)

The line layout is ``settings.LOG_FORMAT``.

Usage:
    from profmatch.src.utils.logger import get_logger
    logger = get_logger(__name__)
    logger.info("Something happened")
"""

import logging
import sys

from profmatch.config.settings import settings

_ENV_LEVEL_MAP = {
    "dev": logging.DEBUG,
    "prod": logging.WARNING,
}
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(env: str, log_level: str | None = None) -> int:
    """Map an explicit level name, or failing that the environment mode, to a ``logging`` level."""
    if log_level:
        return logging.getLevelName(log_level.upper())
    return _ENV_LEVEL_MAP.get(env, logging.INFO)


_DEFAULT_LEVEL = resolve_level(settings.ENV, settings.LOG_LEVEL)


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Create and return a named logger writing to stdout.

    Args:
        name:  Typically ``__name__`` of the calling module.
        level: Explicit logging level override.
               If *None*, the configured default is used.

    Returns:
        A configured ``logging.Logger`` instance.
    """
    resolved_level = level if level is not None else _DEFAULT_LEVEL
    logger = logging.getLogger(name)

    # One handler per named logger
    if not logger.handlers:
        logger.setLevel(resolved_level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(resolved_level)
        console_handler.setFormatter(logging.Formatter(fmt=settings.LOG_FORMAT, datefmt=_DATE_FORMAT))
        logger.addHandler(console_handler)

        logger.propagate = False

    return logger
