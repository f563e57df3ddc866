"""
Storage - Fallible key-value persistence for learner progress.

Progress is stored as JSON strings under string keys:
- topic-<topicId>: one topic's progress state
- trainer: the cross-topic trainer profile
- legacy keys declared per topic, read once for migration

Backends raise StorageError; the public get/set/remove methods absorb it and
report failure as None/False, so callers decide how to degrade.
"""

import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from learnpath.exceptions import StorageError


logger = logging.getLogger(__name__)

DEFAULT_STORAGE_DIR = Path.home() / ".learnpath"
DEFAULT_STORAGE_DB = DEFAULT_STORAGE_DIR / "progress.db"

TRAINER_KEY = "trainer"
PROBE_KEY = "__lp_test__"


def topic_key(topic_id: str) -> str:
    """Storage key holding a topic's progress state."""
    return f"topic-{topic_id}"


class Storage(ABC):
    """
    Key-value store with success/failure results.

    Subclasses implement _read/_write/_delete and raise StorageError when the
    backend refuses the operation.
    """

    @abstractmethod
    def _read(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def _write(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def _delete(self, key: str) -> None:
        ...

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if absent or unreadable."""
        try:
            return self._read(key)
        except StorageError as e:
            logger.warning(f"Storage read failed for {key!r}: {e}")
            return None

    def set(self, key: str, value: str) -> bool:
        """Store a value. Returns False if the backend refused it."""
        try:
            self._write(key, value)
            return True
        except StorageError as e:
            logger.warning(f"Storage write failed for {key!r}: {e}")
            return False

    def remove(self, key: str) -> bool:
        """Delete a key. Removing an absent key succeeds."""
        try:
            self._delete(key)
            return True
        except StorageError as e:
            logger.warning(f"Storage remove failed for {key!r}: {e}")
            return False


class MemoryStorage(Storage):
    """
    In-process store, used for tests and sessions without a database.

    Args:
        initial: Optional entries to start with
        quota: Max total characters of stored values (None for unlimited)
        disabled: Fail every operation, like a browser with storage turned off
    """

    def __init__(
        self,
        initial: Optional[dict[str, str]] = None,
        quota: Optional[int] = None,
        disabled: bool = False,
    ):
        self.data: dict[str, str] = dict(initial or {})
        self.quota = quota
        self.disabled = disabled

    def _check_enabled(self):
        if self.disabled:
            raise StorageError("storage is disabled")

    def _read(self, key: str) -> Optional[str]:
        self._check_enabled()
        return self.data.get(key)

    def _write(self, key: str, value: str):
        self._check_enabled()
        if self.quota is not None:
            used = sum(len(v) for k, v in self.data.items() if k != key)
            if used + len(value) > self.quota:
                raise StorageError(f"quota of {self.quota} characters exceeded")
        self.data[key] = value

    def _delete(self, key: str):
        self._check_enabled()
        self.data.pop(key, None)


class SQLiteStorage(Storage):
    """
    Key-value store in a SQLite database (~/.learnpath/progress.db).

    Each call opens its own connection, so the store can be shared by several
    topic pages of the same profile. The last writer wins.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize SQLite storage.

        Args:
            db_path: Path to the database file (default: ~/.learnpath/progress.db)
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_STORAGE_DB
        self._ensure_database()

    def _ensure_database(self):
        """Create database and table if they don't exist."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path))
        except (OSError, sqlite3.Error) as e:
            logger.warning(f"Cannot open progress database {self.db_path}: {e}")
            return

        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
            """)
            conn.commit()
        except sqlite3.Error as e:
            logger.warning(f"Cannot create progress table in {self.db_path}: {e}")
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
        conn.row_factory = sqlite3.Row
        return conn

    def _read(self, key: str) -> Optional[str]:
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            )
            row = cursor.fetchone()
            return row["value"] if row else None
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
        finally:
            conn.close()

    def _write(self, key: str, value: str):
        conn = self._get_connection()
        try:
            conn.execute(
                """INSERT INTO kv_store (key, value) VALUES (?, ?)
                   ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
                (key, value)
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
        finally:
            conn.close()

    def _delete(self, key: str):
        conn = self._get_connection()
        try:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
        finally:
            conn.close()


def probe_storage(storage: Storage) -> bool:
    """Check that the store accepts a throwaway write and remove."""
    if not storage.set(PROBE_KEY, "1"):
        return False
    return storage.remove(PROBE_KEY)
