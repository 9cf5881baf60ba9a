"""
SQLite implementation of PreferencesRepository

Handles persistence of user preferences that outlive a single session.
"""
from typing import Any, Dict
from datetime import datetime

from src.infrastructure.persistence.sqlite.database import Database
from src.utils.message import Log


class PreferencesRepository:
    """
    Repository for user preferences persistence.

    Values are stored JSON-encoded, so booleans, numbers and nested
    dicts come back with their original types.
    """

    def __init__(self, database: Database):
        """
        Initialize repository with database.

        Args:
            database: Database instance to use
        """
        self.db = database

    def set(self, key: str, value: Any) -> None:
        """
        Set a preference value.

        Args:
            key: Preference key
            value: JSON-serializable value to store
        """
        now = datetime.now().isoformat()
        with self.db.transaction() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO preferences (key, value, created_at, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
            """, (key, Database.json_encode(value), now, now))
        Log.debug(f"PreferencesRepository: stored '{key}'")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a preference value.

        Args:
            key: Preference key
            default: Default value if preference not found

        Returns:
            Preference value or default
        """
        cursor = self.db.get_connection().cursor()
        cursor.execute("SELECT value FROM preferences WHERE key = ?", (key,))
        row = cursor.fetchone()
        if row is None:
            return default
        return Database.json_decode(row[0], default)

    def get_all(self) -> Dict[str, Any]:
        cursor = self.db.get_connection().cursor()
        cursor.execute("SELECT key, value FROM preferences")
        return {row[0]: Database.json_decode(row[1]) for row in cursor.fetchall()}

    def delete(self, key: str) -> None:
        with self.db.transaction() as conn:
            conn.execute("DELETE FROM preferences WHERE key = ?", (key,))
        Log.debug(f"PreferencesRepository: deleted '{key}'")

    def clear(self) -> None:
        """Remove every stored preference."""
        with self.db.transaction() as conn:
            conn.execute("DELETE FROM preferences")
        Log.warning("PreferencesRepository: cleared all preferences")
