"""Logging configuration for capollama."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from config.constants import LOG_BACKUP_COUNT, LOG_FILE_NAME, LOG_MAX_BYTES

# Track if logging has been set up to prevent duplicate handlers
_logging_configured = False


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    log_file: str = LOG_FILE_NAME,
    max_bytes: int = LOG_MAX_BYTES,
    backup_count: int = LOG_BACKUP_COUNT,
) -> logging.Logger:
    """
    Configure logging with console output and optional file rotation.

    Console output goes to stderr so that stdout only carries captions.

    Args:
        level: Logging level
        log_dir: Directory for the rotating log file (None = console only)
        log_file: Log file name
        max_bytes: Max file size before rotation
        backup_count: Number of backup files to keep

    Returns:
        Configured root logger
    """
    global _logging_configured

    root_logger = logging.getLogger()

    # Prevent adding duplicate handlers on repeated calls
    if _logging_configured:
        return root_logger

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    console_handler = logging.StreamHandler(stream=sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # UTF-8 so captions with non-ASCII characters survive
        file_handler = RotatingFileHandler(
            log_path / log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)

    # Keep HTTP client chatter out of INFO output
    for noisy in ("urllib3", "httpx", "openai"):
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))

    _logging_configured = True
    return root_logger
