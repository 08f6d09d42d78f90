"""
Logging configuration with daily file rotation and automatic cleanup.
"""
import os
import logging
from logging.handlers import TimedRotatingFileHandler
from datetime import datetime, timedelta
from pathlib import Path

from config import Config


LOGS_DIR = Config.LOG_DIR
LOG_FILE = os.path.join(LOGS_DIR, "fusion.log")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def cleanup_old_logs(directory: str, retention_days: int = Config.LOG_RETENTION_DAYS) -> int:
    """Remove rotated log files older than retention_days. Returns how many were deleted."""
    log_dir = Path(directory)
    if not log_dir.exists():
        return 0

    cutoff = datetime.now() - timedelta(days=retention_days)
    deleted_count = 0
    for log_file in log_dir.glob("fusion.log.*"):
        if not log_file.is_file():
            continue
        # Rotated files are named fusion.log.YYYY-MM-DD
        try:
            file_date = datetime.strptime(log_file.name.replace("fusion.log.", ""), "%Y-%m-%d")
        except ValueError:
            file_date = datetime.fromtimestamp(log_file.stat().st_mtime)
        if file_date >= cutoff:
            continue
        try:
            log_file.unlink()
            deleted_count += 1
        except OSError as e:
            logging.error(f"Failed to delete log file {log_file.name}: {e}")

    if deleted_count > 0:
        logging.info(f"Cleaned up {deleted_count} old log file(s)")
    return deleted_count


def setup_logger(name: str = "app", level: str = Config.LOG_LEVEL) -> logging.Logger:
    """
    Set up logger with file rotation and console output.

    Args:
        name: Logger name
        level: Logging level name (default from LOG_LEVEL)

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

    try:
        os.makedirs(LOGS_DIR, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            LOG_FILE,
            when="midnight",
            interval=1,
            backupCount=Config.LOG_RETENTION_DAYS,
            encoding="utf-8",
            utc=True
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        logger.addHandler(file_handler)
        cleanup_old_logs(LOGS_DIR, Config.LOG_RETENTION_DAYS)
    except OSError as e:
        logger.warning(f"File logging disabled, could not use {LOGS_DIR}: {e}")

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


app_logger = setup_logger("app")
app_logger.debug(f"Logging to {LOG_FILE} (retention: {Config.LOG_RETENTION_DAYS} days)")
