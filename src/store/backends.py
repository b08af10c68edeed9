"""
Storage media for ScriptStore.

A medium holds exactly one serialized blob under one fixed key and is read
and rewritten wholesale.  Anything with ``get() -> Optional[str]`` and
``set(blob: str) -> None`` qualifies:

    MemoryStorage  — in-process fake, used by the unit tests
    SqliteStorage  — single-row key/value table in a local SQLite file
"""

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol

from src.exceptions import StoreError

__all__ = ["StorageBackend", "MemoryStorage", "SqliteStorage", "STORAGE_KEY", "DEFAULT_DB_PATH"]

logger = logging.getLogger(__name__)

STORAGE_KEY = "codeflow_scripts"
DEFAULT_DB_PATH = "~/.codeflow/scripts.db"

# Path to the SQL schema file bundled with this package
_SCHEMA_PATH = Path(__file__).parent / "migrations" / "schema.sql"


class StorageBackend(Protocol):
    def get(self) -> Optional[str]: ...

    def set(self, blob: str) -> None: ...


class MemoryStorage:
    """Keeps the blob in a plain attribute. ``None`` means never written."""

    def __init__(self, blob: Optional[str] = None) -> None:
        self.blob = blob
        self.writes = 0

    def get(self) -> Optional[str]:
        return self.blob

    def set(self, blob: str) -> None:
        self.blob = blob
        self.writes += 1


class SqliteStorage:
    """
    Key/value medium on top of a local SQLite database.

    The database file and schema are created automatically on first open.
    All operations use context-managed connections; no persistent connection
    is kept open between calls.
    """

    def __init__(self, db_path: str, key: str = STORAGE_KEY) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._key = key
        self._ensure_schema()

    # ── Internal helpers ──────────────────────────────────────────────────

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        """Create tables if they don't already exist."""
        sql = _SCHEMA_PATH.read_text(encoding="utf-8")
        try:
            with self._connect() as conn:
                conn.executescript(sql)
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open database {self._db_path}: {exc}") from exc

    # ── Public API ────────────────────────────────────────────────────────

    @property
    def db_path(self) -> Path:
        return self._db_path

    def get(self) -> Optional[str]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key=?", (self._key,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Read failed for key {self._key!r}: {exc}") from exc
        return row[0] if row else None

    def set(self, blob: str) -> None:
        now = datetime.now(tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
                    (self._key, blob, now),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Write failed for key {self._key!r}: {exc}") from exc
        logger.debug("Persisted %d bytes under %r", len(blob), self._key)
