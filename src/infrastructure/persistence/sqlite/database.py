"""
Local SQLite database manager

Holds the small amount of durable client-side state SisLog keeps outside the
remote store: user preferences (dark mode, application settings).
"""
import sqlite3
import json
import threading
from pathlib import Path
from typing import Optional, Any

from src.utils.message import Log


IN_MEMORY = ":memory:"


class Database:
    """
    File-based SQLite database for per-machine preferences.

    The connection is shared across threads; writes are serialized by
    an internal lock held for the duration of a transaction.
    """

    CURRENT_SCHEMA_VERSION = 1

    def __init__(self, db_path: Optional[str] = None):
        if db_path is None:
            raise ValueError("Database path is required")

        if str(db_path) == IN_MEMORY:
            self.db_path = None
            target = IN_MEMORY
        else:
            self.db_path = Path(db_path)
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            target = str(self.db_path)

        self._lock = threading.RLock()
        self._connection = sqlite3.connect(target, check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._closed = False
        self._init_schema()

    def _init_schema(self):
        conn = self._connection
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS preferences (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("SELECT version FROM schema_version LIMIT 1")
        if cursor.fetchone() is None:
            cursor.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (self.CURRENT_SCHEMA_VERSION,)
            )

        conn.commit()

    @property
    def is_closed(self) -> bool:
        return self._closed

    def get_connection(self) -> sqlite3.Connection:
        if self._closed:
            raise sqlite3.ProgrammingError("Database is closed")
        return self._connection

    def transaction(self) -> "TransactionContext":
        return TransactionContext(self.get_connection(), self._lock)

    def get_schema_version(self) -> int:
        cursor = self.get_connection().cursor()
        cursor.execute("SELECT version FROM schema_version LIMIT 1")
        row = cursor.fetchone()
        return row[0] if row else 1

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if not self._closed:
                self._connection.close()
                self._closed = True
                Log.info(f"Database connection closed: {self.db_path or IN_MEMORY}")

    @staticmethod
    def json_encode(value: Any) -> str:
        return json.dumps(value)

    @staticmethod
    def json_decode(value: Optional[str], default: Any = None) -> Any:
        if value is None:
            return default
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return value


class TransactionContext:
    def __init__(self, conn: sqlite3.Connection, lock: threading.RLock):
        self.conn = conn
        self._lock = lock

    def __enter__(self) -> sqlite3.Connection:
        self._lock.acquire()
        return self.conn

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.conn.commit()
            else:
                self.conn.rollback()
                Log.error(f"Transaction rolled back: {exc_val}")
        finally:
            self._lock.release()
        return False
