"""
Logging configuration for bidstools.

Library modules only create loggers through get_logger(). Nothing here runs
on import; applications and scripts call setup_logging() explicitly.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


def rotate_log_files(log_file: Path) -> None:
    """
    Move an existing log file aside before a new logging session.

    ``log.txt`` becomes ``log.old.txt``; a previous ``log.old.txt`` is
    removed first, so only the last two sessions are kept.

    Args:
        log_file: The log file about to be (re)created.
    """
    if not log_file.exists():
        return

    old_log_file = log_file.with_name(f"{log_file.stem}.old{log_file.suffix}")
    if old_log_file.exists():
        try:
            old_log_file.unlink()
        except OSError as e:
            print(f"Warning: Could not delete old log file: {e}", file=sys.stderr)

    try:
        log_file.rename(old_log_file)
    except OSError as e:
        print(f"Warning: Could not rotate log file: {e}", file=sys.stderr)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    log_to_file: bool = False
) -> None:
    """
    Configure root logging for an application using bidstools.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO).
        log_file: Optional path to a log file. If None and log_to_file=True,
            the log goes to the application data directory.
        format_string: Optional custom format string for log messages.
        log_to_file: Whether to also log to a file.
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(format_string))
    handlers.append(console_handler)

    if log_to_file or log_file is not None:
        if log_file is None:
            from .paths import get_log_file_path
            log_file = get_log_file_path()

        rotate_log_files(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8', mode='w')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(format_string))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        format=format_string,
        force=True
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        A logger instance.
    """
    return logging.getLogger(name)
