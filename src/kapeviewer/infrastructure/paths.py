"""
Path utilities and constants.

Helpers for locating application data on disk and for classifying files
found while walking a case folder.
"""

import platform
from pathlib import Path
from typing import Optional


APP_NAME = "kapeviewer"

CSV_EXTENSION = ".csv"


def is_csv_file(path: Path) -> bool:
    """
    Check whether a path names a CSV file (extension match is case-insensitive).
    
    Args:
        path: Path to check.
        
    Returns:
        True if the file extension is .csv in any letter case.
    """
    return path.suffix.lower() == CSV_EXTENSION


def get_relative_path(path: Path, base: Path) -> Optional[Path]:
    """
    Get the relative path from base to path.
    
    Args:
        path: The target path.
        base: The base path.
        
    Returns:
        Relative path from base to path, or None if path is not under base.
    """
    try:
        return path.relative_to(base)
    except ValueError:
        return None


def get_persistent_data_directory() -> Path:
    """
    Get the per-user data directory, creating it on first use.
    
    Returns:
        Path to the persistent data directory.
        
    Platform-specific locations:
        - Windows: %APPDATA%/LocalLow/kapeviewer
        - macOS: ~/Library/Application Support/kapeviewer
        - Linux: ~/.config/kapeviewer
    """
    system = platform.system()
    
    if system == "Windows":
        base = Path.home() / "AppData" / "LocalLow"
    elif system == "Darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path.home() / ".config"
    
    data_dir = base / APP_NAME
    data_dir.mkdir(parents=True, exist_ok=True)
    
    return data_dir


def get_settings_file_path() -> Path:
    """Path to settings.json in the data directory."""
    return get_persistent_data_directory() / "settings.json"


def get_log_file_path() -> Path:
    """Path to the current session's log file."""
    return get_persistent_data_directory() / "log.txt"


def get_old_log_file_path(log_file: Optional[Path] = None) -> Path:
    """
    Path to the previous session's log file.
    
    Args:
        log_file: Current log file; defaults to log.txt in the data directory.
        
    Returns:
        Sibling of log_file with ".old" inserted before the extension.
    """
    if log_file is None:
        log_file = get_log_file_path()
    return log_file.with_name(f"{log_file.stem}.old{log_file.suffix}")
