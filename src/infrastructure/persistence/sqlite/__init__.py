"""
SQLite persistence implementation
"""
from src.infrastructure.persistence.sqlite.database import Database
from src.infrastructure.persistence.sqlite.preferences_repository_impl import PreferencesRepository

__all__ = [
    'Database',
    'PreferencesRepository',
]
