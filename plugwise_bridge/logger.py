"""Centralized logging configuration for the Plugwise MQTT bridge.

Call configure_logging() once at application startup, then use
standard logging.getLogger(__name__) throughout the codebase.
"""

import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import AppConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty below WARNING
NOISY_LOGGERS = ("urllib3",)


def configure_logging(config: "AppConfig") -> None:
    """Configure application-wide logging from AppConfig.

    Args:
        config: Application configuration

    Example:
        >>> config = AppConfig.from_env()
        >>> configure_logging(config)
        >>> logging.getLogger(__name__).info("Bridge started")
    """
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Avoid duplicate output when called more than once
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
