"""
Logging configuration with file rotation and automatic cleanup.
Keeps logs for 10 days with daily rotation.
"""
import os
import logging
from logging.handlers import TimedRotatingFileHandler
from datetime import datetime, timedelta
from pathlib import Path

from config import Config


LOGS_DIR = Config.LOGS_DIR
LOG_FILE = os.path.join(LOGS_DIR, "app.log")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_RETENTION_DAYS = 10


def cleanup_old_logs(directory: str, retention_days: int = LOG_RETENTION_DAYS) -> int:
    """Remove rotated log files older than retention_days. Returns the number deleted."""
    now = datetime.now()
    cutoff = now - timedelta(days=retention_days)

    log_dir = Path(directory)
    if not log_dir.exists():
        return 0

    deleted_count = 0
    for log_file in log_dir.glob("app.log.*"):
        if not log_file.is_file():
            continue
        # Rotated files are named app.log.YYYY-MM-DD
        try:
            file_date = datetime.strptime(log_file.name.replace("app.log.", ""), "%Y-%m-%d")
        except ValueError:
            file_date = datetime.fromtimestamp(log_file.stat().st_mtime)

        if file_date < cutoff:
            try:
                log_file.unlink()
                deleted_count += 1
                logging.getLogger("app").info(
                    f"Deleted old log file: {log_file.name} (age: {(now - file_date).days} days)"
                )
            except OSError as e:
                logging.getLogger("app").error(f"Failed to delete log file {log_file.name}: {e}")

    return deleted_count


def setup_logger(name: str = "app", level: int = logging.INFO, log_to_file: bool = True) -> logging.Logger:
    """
    Set up logger with file rotation and console output.

    Args:
        name: Logger name
        level: Logging level (default: INFO)
        log_to_file: Attach the daily rotating file handler

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(message)s", "%H:%M:%S")
    )
    logger.addHandler(console_handler)

    if log_to_file:
        try:
            os.makedirs(LOGS_DIR, exist_ok=True)
            file_handler = TimedRotatingFileHandler(
                LOG_FILE,
                when="midnight",
                interval=1,
                backupCount=LOG_RETENTION_DAYS,
                encoding="utf-8",
                utc=True
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
            logger.addHandler(file_handler)
            cleanup_old_logs(LOGS_DIR, LOG_RETENTION_DAYS)
        except OSError as e:
            # Read-only filesystems (serverless runtimes) only get console output
            logger.warning(f"File logging disabled, cannot write to {LOGS_DIR}: {e}")

    return logger


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (if None, returns the root app logger)

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger("app")
    return logging.getLogger(f"app.{name}")


app_logger = setup_logger(
    "app",
    getattr(logging, Config.LOG_LEVEL, logging.INFO),
    log_to_file=Config.LOG_TO_FILE,
)
