"""Logging setup shared by every torrentrss module."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from torrentrss.config.env import ENABLE_LOGGING, LOG_FILE, LOG_LEVEL

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5


class CustomLogger(logging.Logger):
    """Logger that can attach a stack trace and process stats to errors."""

    def error_trace(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        """Log an error with the active exception's traceback."""
        self.log_resource_usage()
        kwargs.pop('exc_info', None)
        self.error(msg, *args, exc_info=True, **kwargs)

    def log_resource_usage(self) -> None:
        # Never raises; called while another error is being reported.
        try:
            import psutil

            process = psutil.Process()
            rss_mb = process.memory_info().rss / (1024 * 1024)
            available_mb = psutil.virtual_memory().available / (1024 * 1024)
            open_files = len(process.open_files())
            self.debug(
                f"Process memory: RSS={rss_mb:.2f} MB, available={available_mb:.2f} MB, "
                f"open files: {open_files}"
            )
        except Exception:
            return


def _below_error(record: logging.LogRecord) -> bool:
    return record.levelno < logging.ERROR


def setup_logger(name: str, log_file: Path = LOG_FILE) -> CustomLogger:
    """Create a logger writing INFO-and-up to stdout and errors to stderr.

    When ENABLE_LOGGING is set, records also go to a rotating file at log_file.
    """
    logger = CustomLogger(name)
    level = getattr(logging, LOG_LEVEL, logging.INFO)
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(level)
    stdout_handler.addFilter(_below_error)
    stdout_handler.setFormatter(formatter)
    logger.addHandler(stdout_handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)
    stderr_handler.setFormatter(formatter)
    logger.addHandler(stderr_handler)

    if ENABLE_LOGGING:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=LOG_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
            )
        except OSError as e:
            logger.error(f"Failed to create log file {log_file}: {e}")
        else:
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
