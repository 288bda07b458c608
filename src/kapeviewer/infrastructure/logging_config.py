"""
Logging configuration for the application.

Console output always goes to stdout; a session log file is kept in the
persistent data directory alongside the log of the previous session.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from .paths import get_log_file_path, get_old_log_file_path


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = ("PySide6", "concurrent.futures")


def rotate_log_files(log_file: Path, old_log_file: Path) -> None:
    """
    Move the previous session's log aside before a new session starts.
    
    log_file is renamed to old_log_file, replacing any older copy, so at
    most two sessions are kept on disk.
    
    Args:
        log_file: Log file of the session about to start.
        old_log_file: Where the previous session's log is kept.
    """
    if not log_file.exists():
        return
    
    try:
        log_file.replace(old_log_file)
    except OSError as e:
        print(f"Warning: Could not rotate log file: {e}", file=sys.stderr)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    log_to_file: bool = True,
    stream: Optional[TextIO] = None
) -> None:
    """
    Configure application-wide logging.
    
    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO).
        log_file: Optional path to a log file. If None and log_to_file=True, uses default location.
        format_string: Optional custom format string for log messages.
        log_to_file: Whether to log to a file. Default is True.
        stream: Console stream; defaults to stdout.
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    
    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [console_handler]
    
    if log_to_file:
        if log_file is None:
            log_file = get_log_file_path()
        
        rotate_log_files(log_file, get_old_log_file_path(log_file))
        
        log_file.parent.mkdir(parents=True, exist_ok=True)
        
        file_handler = logging.FileHandler(log_file, encoding='utf-8', mode='w')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    
    logging.basicConfig(
        level=level,
        handlers=handlers,
        force=True  # Override any existing configuration
    )
    
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.
    
    Args:
        name: Logger name (typically __name__).
        
    Returns:
        A configured logger instance.
    """
    return logging.getLogger(name)
