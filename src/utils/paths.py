"""
Path management for SisLog

Handles platform-specific user data directories following standard conventions:
- macOS: ~/Library/Application Support/SisLog/
- Linux: ~/.local/share/SisLog/
- Windows: %APPDATA%/SisLog/

SISLOG_DATA_DIR overrides the base location (used by tests and kiosk installs).
"""
import os
import sys
from pathlib import Path
from typing import Optional


APP_NAME = "SisLog"


def get_user_data_dir() -> Path:
    """
    Get platform-specific user data directory.

    Returns:
        Path to user data directory where settings, databases, and logs are stored.
    """
    override = os.getenv("SISLOG_DATA_DIR")
    if override:
        user_data_dir = Path(override)
    else:
        system = sys.platform
        if system == "darwin":
            base = Path.home() / "Library" / "Application Support"
        elif system == "win32":
            base = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
        else:
            base = Path.home() / ".local" / "share"
        user_data_dir = base / APP_NAME

    user_data_dir.mkdir(parents=True, exist_ok=True)
    return user_data_dir


def get_logs_dir() -> Path:
    """
    Get directory for application logs.

    Returns:
        Path to logs directory (stored in user data directory).
    """
    logs_dir = get_user_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def get_database_path(db_name: str = "sislog") -> Path:
    """
    Get path to SQLite database file.

    Args:
        db_name: Name of database file (without extension)

    Returns:
        Path to database file in user data directory.
    """
    return get_user_data_dir() / f"{db_name}.db"


def get_env_file_path() -> Path:
    """Path of the per-user .env file loaded after the project-root one."""
    return get_user_data_dir() / ".env"


def get_app_install_dir() -> Optional[Path]:
    """
    Get the application installation directory.

    Returns:
        Path to the project root when running from source, or the bundle
        directory when frozen.
    """
    if getattr(sys, 'frozen', False):
        bundle_dir = getattr(sys, '_MEIPASS', None)
        if bundle_dir:
            return Path(bundle_dir)
        return Path(sys.executable).parent

    # src/utils/paths.py -> project root
    return Path(__file__).resolve().parent.parent.parent
