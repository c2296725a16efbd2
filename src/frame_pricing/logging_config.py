"""
Centralized logging configuration for frame_pricing.

Every module logs through `logging.getLogger(__name__)`, which places it under
the "frame_pricing" namespace configured here. Thread names are included so
concurrent repricing in the order group service can be told apart.

Log Format:
    2026-10-19 10:15:30 [INFO    ] [MainThread] frame_pricing.services.order_group_service - Closed order group g-1

Usage:
    from frame_pricing.logging_config import setup_logging
    setup_logging(log_level="DEBUG")
"""
import logging
import sys
import threading
from typing import Union

APP_LOGGER = "frame_pricing"

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] [%(thread_name)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ThreadContextFilter(logging.Filter):
    """Adds thread_name to every record; never filters anything out."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.thread_name = threading.current_thread().name
        return True


def setup_logging(log_level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Configure console logging for the frame_pricing namespace.

    Safe to call more than once; existing handlers are replaced.

    Args:
        log_level: Level as int or name ("DEBUG", "INFO", ...)

    Returns:
        The configured namespace logger
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(log_level)
    logger.propagate = False
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(ThreadContextFilter())
    logger.addHandler(handler)

    logger.debug("Logging configured at level %s", logging.getLevelName(log_level))
    return logger
