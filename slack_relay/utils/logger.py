"""Colored console logging for the relay."""
import logging
import sys
from typing import Optional, TextIO

import colorlog

LOGGER_NAMESPACE = "slack_relay"

LOG_FORMAT = "%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

# httpx logs every provider call and file download at INFO
CHATTY_LIBRARIES = ("httpx", "httpcore")


def _level_for(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def _console_handler(stream: TextIO) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        colorlog.ColoredFormatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S", log_colors=LOG_COLORS)
    )
    return handler


def setup_logger(
    name: str = LOGGER_NAMESPACE,
    log_level: str = "INFO",
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Configure the relay's namespace logger.

    Module loggers created with ``logging.getLogger(__name__)`` inside the
    package are its children and write through its single handler. Calling
    this again only changes the level, so the level read from configuration
    at startup replaces the import-time default.

    Args:
        name: Namespace logger to configure.
        log_level: Level name; unknown names fall back to INFO.
        stream: Output stream, stdout when omitted.

    Returns:
        The namespace logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel(_level_for(log_level))

    if not logger.handlers:
        logger.addHandler(_console_handler(stream or sys.stdout))
        logger.propagate = False

    for library in CHATTY_LIBRARIES:
        logging.getLogger(library).setLevel(max(logger.level, logging.WARNING))

    return logger


logger = setup_logger()
