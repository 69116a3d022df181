"""
Logging setup for the API service
"""
from pathlib import Path
import logging
import sys
from typing import Optional

from contactme.config.settings import LoggingConfig

LOGGER_NAME = "contactme"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """Configure the package logger

    Records go to stdout; when a log directory is configured, every record is
    also written to combined.log and errors to error.log.

    Args:
        config: Logging configuration (defaults when None)

    Returns:
        The configured "contactme" logger
    """
    config = config or LoggingConfig()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.level.upper())

    # drop handlers from a previous configuration
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if config.directory:
        log_dir = Path(config.directory)
        log_dir.mkdir(parents=True, exist_ok=True)

        combined_handler = logging.FileHandler(log_dir / "combined.log")
        combined_handler.setFormatter(formatter)
        logger.addHandler(combined_handler)

        error_handler = logging.FileHandler(log_dir / "error.log")
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        logger.addHandler(error_handler)

    logger.propagate = False
    return logger
