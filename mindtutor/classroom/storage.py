"""
Key-value storage for learner state.

Progress and the generation cache are each stored as one string value under a
fixed key. Any object with get/set/delete on strings can back them:
- MemoryStore: in-process dict (tests, ephemeral sessions)
- SqliteStore: durable store in ~/.mindtutor/tutor.db, one namespace per learner
"""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol


DEFAULT_DATA_DIR = Path.home() / ".mindtutor"
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "tutor.db"


class StorageError(Exception):
    """Raised when the underlying store cannot be read or written."""


class StorageFullError(StorageError):
    """Raised when a write does not fit in the underlying store."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """
    Dict-backed store.

    max_value_bytes simulates a storage quota: larger writes raise StorageFullError.
    """

    def __init__(self, max_value_bytes: Optional[int] = None):
        self._data: dict[str, str] = {}
        self.max_value_bytes = max_value_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.max_value_bytes is not None and len(value.encode("utf-8")) > self.max_value_bytes:
            raise StorageFullError(f"Value for {key!r} exceeds {self.max_value_bytes} bytes")
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class SqliteStore:
    """
    Durable key-value store in SQLite.

    Rows are scoped by namespace (learner/device id) so several learners can
    share one database file. Each call opens its own connection.
    """

    def __init__(self, db_path: Optional[Path] = None, namespace: str = "default"):
        """
        Initialize store.

        Args:
            db_path: Path to the database (default: ~/.mindtutor/tutor.db)
            namespace: Learner/device identifier
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self.namespace = namespace
        self._ensure_database()

    def _ensure_database(self):
        """Create database and table if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    namespace TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (namespace, key)
                );
            """)
            conn.commit()
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def get(self, key: str) -> Optional[str]:
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """SELECT value FROM kv_store WHERE namespace = ? AND key = ?""",
                (self.namespace, key)
            )
            row = cursor.fetchone()
            return row["value"] if row else None
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        conn = self._get_connection()
        try:
            now = datetime.now().isoformat()
            conn.execute(
                """INSERT INTO kv_store (namespace, key, value, updated_at)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(namespace, key) DO UPDATE SET
                     value = excluded.value,
                     updated_at = excluded.updated_at""",
                (self.namespace, key, value, now)
            )
            conn.commit()
        except sqlite3.Error as e:
            if "full" in str(e).lower():
                raise StorageFullError(str(e)) from e
            raise StorageError(str(e)) from e
        finally:
            conn.close()

    def delete(self, key: str) -> None:
        conn = self._get_connection()
        try:
            conn.execute(
                """DELETE FROM kv_store WHERE namespace = ? AND key = ?""",
                (self.namespace, key)
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
        finally:
            conn.close()

    def keys(self) -> list[str]:
        """List keys stored for this namespace."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                """SELECT key FROM kv_store WHERE namespace = ? ORDER BY key""",
                (self.namespace,)
            )
            return [row["key"] for row in cursor.fetchall()]
        finally:
            conn.close()
