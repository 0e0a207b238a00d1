"""Centralized logging utilities."""

import logging
import sys
from typing import Optional, Union
from pathlib import Path

PACKAGE_LOGGER = "vidyeet_bridge"

# Longest stdout/stderr excerpt written to a log record
LOG_TAIL_CHARS = 500


def setup_logger(
    name: str = PACKAGE_LOGGER,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Set up a logger with console and optional file output.

    Configuring the package logger (the default) covers every module logger
    below it.

    Args:
        name: Logger name
        level: Logging level (number or level name)
        log_file: Optional file to write logs to
        format_string: Custom format string

    Returns:
        Configured logger instance
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    if format_string is None:
        format_string = '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s'

    formatter = logging.Formatter(format_string, datefmt='%H:%M:%S')

    # stdout carries command output in the CLI front end
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger.

    Handlers live on the package logger, so module loggers only propagate.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def tail(data: Union[bytes, str, None], limit: int = LOG_TAIL_CHARS) -> str:
    """Return the last ``limit`` characters of process output as text."""
    if not data:
        return ""
    if isinstance(data, bytes):
        data = data.decode('utf-8', errors='replace')
    return data[-limit:]
