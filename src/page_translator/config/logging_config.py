"""
Logging configuration for the page translation pipeline.

Every module logs through a named logger obtained from ``get_logger``. The
application (the command-line tool, a web worker embedding the pipeline)
calls ``setup_logging`` once at startup to decide where records go and how
much detail they carry.

Usage:
    from page_translator.config.logging_config import setup_logging, get_logger

    setup_logging("DEBUG", log_file="translator.log")
    logger = get_logger(__name__)
    logger.info("Pass started")

Author: Leonardo Pacciani-Mori
License: MIT
"""

import logging
import sys
from typing import List, Optional, Union

from .settings import LOG_LEVEL


# =============================================================================
# DEFAULT CONFIGURATION
# =============================================================================

# Timestamp, logger name, level, message.
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that log every connection or loop event at DEBUG/INFO.
NOISY_LOGGERS = [
    "aiohttp",
    "aiohttp.client",
    "urllib3",
    "urllib3.connectionpool",
    "requests",
    "asyncio",
]


# =============================================================================
# FUNCTION DEFINITIONS
# =============================================================================

def resolve_level(level: Union[int, str]) -> int:
    """
    Convert a level name such as "debug" into its numeric value.

    Raises:
        ValueError: If ``level`` is not a known level name.
    """
    if isinstance(level, int):
        return level

    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level {level!r}")
    return value


def setup_logging(
    level: Union[int, str] = LOG_LEVEL,
    log_file: Optional[str] = None,
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    suppress_third_party: bool = True
) -> None:
    """
    Configure the root logger for the whole application.

    Records go to standard error, and also to ``log_file`` when given.
    Calling it again replaces the previous configuration.

    Args:
        level: Level threshold, as a number or a name. Defaults to LOG_LEVEL.
        log_file: Optional path of a file receiving the same records.
        log_format: Format string for log records.
        date_format: strftime format for timestamps.
        suppress_third_party: Raise the HTTP client and event loop loggers
            to WARNING.

    Example:
        >>> setup_logging(logging.DEBUG)
        >>> get_logger(__name__).debug("Debug message will now be shown")
    """
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=resolve_level(level),
        format=log_format,
        datefmt=date_format,
        handlers=handlers,
        force=True
    )

    if suppress_third_party:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get the logger of a module.

    Args:
        name: Usually the module's ``__name__``. None returns the root logger.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Translated 12 nodes")
        2024-01-15 10:30:45 - page_translator.pipeline.orchestrator - INFO - Translated 12 nodes
    """
    return logging.getLogger(name)


def set_log_level(level: Union[int, str], logger_name: Optional[str] = None) -> None:
    """
    Change the level of one logger, or of the root logger.

    Example:
        >>> set_log_level("DEBUG", "page_translator.dom.watcher")
    """
    logging.getLogger(logger_name).setLevel(resolve_level(level))
