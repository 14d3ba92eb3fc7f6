"""
Logging utilities shared by every module of the image gallery service.

Key Features:
    - One log file per process run, grouped in date directories
    - Size-based rotation that survives rollover permission errors
    - Console output with a shorter format than the file output
    - Automatic cleanup of log directories older than a week
"""

import datetime
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
LOG_DIR.mkdir(parents=True, exist_ok=True)

LOG_FILE_BASENAME = "image_gallery"

LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

MAX_LOG_SIZE_MB = 5
MAX_LOG_SIZE_BYTES = MAX_LOG_SIZE_MB * 1024 * 1024
MAX_BACKUP_COUNT = 10
LOG_RETENTION_DAYS = 7


def _build_run_log_file() -> Path:
    now = datetime.datetime.now()
    date_dir = LOG_DIR / now.strftime("%Y-%m-%d")
    date_dir.mkdir(exist_ok=True)
    return date_dir / f"{LOG_FILE_BASENAME}_{now.strftime('%Y-%m-%d_%H-%M-%S')}.log"


# All loggers of one process share this file
_GLOBAL_LOG_FILE = _build_run_log_file()


class SafeRotatingFileHandler(RotatingFileHandler):
    """Rotating handler that keeps writing to the current file if rollover fails."""

    def doRollover(self):
        try:
            super().doRollover()
        except OSError as e:
            sys.stderr.write(
                f"Log rotation failed: {e}. Continuing with current log file.\n"
            )
            sys.stderr.flush()


def _get_log_level(level_str: str) -> int:
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(level_str.upper(), logging.INFO)


def setup_logger(name: str, level: str = None) -> logging.Logger:
    """Set up logger with both console and file handlers."""
    logger = logging.getLogger(name)

    log_level = _get_log_level(level or DEFAULT_LOG_LEVEL)
    logger.setLevel(log_level)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, DATE_FORMAT))

    file_handler = SafeRotatingFileHandler(
        _GLOBAL_LOG_FILE,
        maxBytes=MAX_LOG_SIZE_BYTES,
        backupCount=MAX_BACKUP_COUNT,
        encoding="utf-8",
        delay=True,
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    cleanup_old_logs(keep_days=LOG_RETENTION_DAYS)

    return logger


def cleanup_old_logs(keep_days: int = LOG_RETENTION_DAYS) -> int:
    """
    Delete date directories older than ``keep_days``.

    Files that cannot be removed (still open on Windows, already gone) are
    skipped. Returns the number of files deleted.
    """
    cutoff_time = datetime.datetime.now() - datetime.timedelta(days=keep_days)
    deleted_count = 0

    for date_dir in LOG_DIR.iterdir():
        if not date_dir.is_dir():
            continue
        try:
            dir_date = datetime.datetime.strptime(date_dir.name, "%Y-%m-%d")
        except ValueError:
            # Not one of ours
            continue
        if dir_date >= cutoff_time:
            continue

        for log_file in date_dir.iterdir():
            try:
                log_file.unlink()
                deleted_count += 1
            except (PermissionError, FileNotFoundError):
                continue
        try:
            date_dir.rmdir()
        except OSError:
            pass  # still holds files we could not delete

    return deleted_count
