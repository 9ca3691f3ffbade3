"""Logging configuration for the vocabulary trainer."""
import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from hskvocab.config import settings


def setup_logging(first_message: str = "", level: Optional[Union[int, str]] = None) -> None:
    """Set up logging configuration.

    Args:
        first_message: Optional banner written once the handlers are installed.
        level: Optional logging level. If None, uses LOG_LEVEL from settings.
    """
    if level is None:
        level = settings.logging.level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    formatter = logging.Formatter(settings.logging.format)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler if a log directory is configured
    if settings.logging.dir:
        log_dir = Path(settings.logging.dir)
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / "hskvocab.log"
            file_handler = TimedRotatingFileHandler(
                log_file,
                when=settings.logging.rotation,
                interval=settings.logging.interval,
                backupCount=settings.logging.backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(f"Could not set up file logging in {log_dir}: {e}")

    # Set logging levels for third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("gtts").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("faker").setLevel(logging.WARNING)

    if first_message:
        root_logger.info(first_message)
    root_logger.debug(f"Logging configured with level: {logging.getLevelName(level)}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the specified name."""
    return logging.getLogger(name)
