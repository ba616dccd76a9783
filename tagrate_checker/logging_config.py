"""Logging for the tag-rate checker: stderr console output plus an optional rotating DEBUG file."""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "tagrate_checker"


def setup_logging(
    level: int = logging.INFO,
    log_file: str | Path | None = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    """
    Configure package-wide logging.

    Args:
        level: Logging level for the console handler
        log_file: Optional path of a log file; it always records DEBUG and above
        max_bytes: Maximum size of the log file before rotation
        backup_count: Number of rotated log files to keep

    Returns:
        The package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Repeated runs in one process (tests, Streamlit reruns) reconfigure the same logger
    logger.handlers.clear()

    log_format = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)-45s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console goes to stderr so the printed report stays clean on stdout
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(log_format)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(log_format)
        logger.addHandler(file_handler)
        logger.debug(f"Log file: {log_path}")

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module; pass ``__name__`` so it nests under the package logger."""
    return logging.getLogger(name)
