"""
Logging configuration for table exports.
"""
import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from table_export.core.config import LOG_LEVELS, settings

# Log format
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str = "table_export",
    level: Optional[str] = None,
    log_dir: Optional[str] = None,
) -> logging.Logger:
    """
    Set up a logger with a console handler and, optionally, a rotating file handler.

    Child loggers created with ``logging.getLogger(__name__)`` inside the
    package inherit these handlers.

    Args:
        name: Logger name (defaults to the package logger)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for rotating log files (defaults to settings.LOG_DIR)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    level_name = (level or settings.LOG_LEVEL).upper()
    if level_name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level: {level_name}")
    log_level = getattr(logging, level_name)
    logger.setLevel(log_level)

    # Avoid adding handlers multiple times
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(log_level)
        return logger

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(console_handler)

    log_dir = log_dir or settings.LOG_DIR
    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path / f"{name.replace('.', '_')}.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(file_handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger
