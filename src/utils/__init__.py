"""
Utils module - Logging and path utilities.

Contents:
- message.py: Log class for application logging
- paths.py: Platform-specific path utilities
"""
from src.utils.message import Log
from src.utils.paths import (
    get_user_data_dir,
    get_logs_dir,
    get_database_path,
    get_env_file_path,
    get_app_install_dir,
)

__all__ = [
    'Log',
    'get_user_data_dir',
    'get_logs_dir',
    'get_database_path',
    'get_env_file_path',
    'get_app_install_dir',
]
