"""
store — single-blob persistence for the user's Python scripts.

Public API
──────────
Script         — dataclass representing one editable script
ScriptStore    — CRUD interface (list_scripts, get, add, update_content, delete)
MemoryStorage  — in-memory storage medium
SqliteStorage  — SQLite-backed storage medium
"""

from src.store.backends import MemoryStorage, SqliteStorage
from src.store.db import ScriptStore
from src.store.models import Script

__all__ = ["Script", "ScriptStore", "MemoryStorage", "SqliteStorage"]
