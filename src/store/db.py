"""
ScriptStore — CRUD over the script collection kept in one serialized blob.

Usage::

    store = ScriptStore(SqliteStorage("~/.codeflow/scripts.db"))

    scripts = store.list_scripts()          # seeds defaults on first use
    script = store.add("scratch")           # stored as "scratch.py"
    store.update_content(script.id, 'print("hi")')
    store.delete(script.id)

Every mutation reads the whole collection, rewrites it and persists it back
(last writer wins).  Callers only ever receive fresh Script objects.
"""

import json
import logging
import uuid
from typing import Callable, Iterable, Optional

from src.exceptions import CorruptStoreError
from src.store.backends import StorageBackend
from src.store.defaults import DEFAULT_SCRIPT_CONTENT, DEFAULT_SCRIPTS, DefaultScript
from src.store.models import Script, normalize_name, now_ms

__all__ = ["ScriptStore"]

logger = logging.getLogger(__name__)


class ScriptStore:
    """
    Script collection on top of a single-key storage medium.

    With ``storage=None`` (no medium available) the store is inert:
    list_scripts() returns [] and mutations are not persisted.
    """

    def __init__(
        self,
        storage: Optional[StorageBackend] = None,
        defaults: Iterable[DefaultScript] = DEFAULT_SCRIPTS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._storage = storage
        self._defaults = tuple(defaults)
        self._clock = clock

    # ── Internal helpers ──────────────────────────────────────────────────

    def _read(self) -> Optional[list[Script]]:
        """Deserialize the blob; None when the medium holds nothing yet."""
        blob = self._storage.get() if self._storage is not None else None
        if not blob:
            return None
        try:
            data = json.loads(blob)
        except json.JSONDecodeError as exc:
            raise CorruptStoreError(f"Persisted scripts are not valid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise CorruptStoreError(
                f"Persisted scripts must be a JSON array, got {type(data).__name__}"
            )
        try:
            return [Script.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as exc:
            raise CorruptStoreError(f"Malformed script entry: {exc!r}") from exc

    def _write(self, scripts: list[Script]) -> None:
        if self._storage is None:
            return
        blob = json.dumps([s.to_dict() for s in scripts], ensure_ascii=False)
        self._storage.set(blob)

    def _new_id(self, taken: set[str]) -> str:
        while True:
            candidate = uuid.uuid4().hex[:9]
            if candidate not in taken:
                return candidate

    # ── Public API ────────────────────────────────────────────────────────

    @property
    def available(self) -> bool:
        """False when no persistence medium was supplied."""
        return self._storage is not None

    def list_scripts(self) -> list[Script]:
        """
        Return every script, seeding or backfilling the built-in defaults.

        Raises:
            CorruptStoreError: the persisted blob cannot be deserialized.
        """
        if self._storage is None:
            return []

        scripts = self._read()
        if scripts is None:
            now = self._clock()
            scripts = [d.to_script(now) for d in self._defaults]
            self._write(scripts)
            logger.info("Seeded empty store with %d default script(s)", len(scripts))
            return scripts

        ids = {s.id for s in scripts}
        names = {s.name for s in scripts}
        missing = [d for d in self._defaults if d.id not in ids and d.name not in names]
        if missing:
            now = self._clock()
            scripts.extend(d.to_script(now) for d in missing)
            self._write(scripts)
            logger.info("Backfilled default script(s): %s", ", ".join(d.name for d in missing))
        return scripts

    def get(self, script_id: str) -> Optional[Script]:
        """Return the script with *script_id*, or None."""
        return next((s for s in self.list_scripts() if s.id == script_id), None)

    def add(self, name: str, content: str = "") -> Script:
        """
        Create a script and prepend it to the collection.

        Args:
            name:    display name; ".py" is appended when missing.
            content: initial source; empty means the default template.

        Returns:
            The created Script.
        """
        scripts = self.list_scripts()
        script = Script(
            id=self._new_id({s.id for s in scripts}),
            name=normalize_name(name),
            content=content or DEFAULT_SCRIPT_CONTENT,
            updated_at=self._clock(),
        )
        self._write([script, *scripts])
        logger.debug("Added %s", script)
        return script

    def update_content(self, script_id: str, content: str) -> None:
        """Replace the content of *script_id*; unknown ids are ignored."""
        scripts = self.list_scripts()
        for script in scripts:
            if script.id == script_id:
                script.content = content
                script.updated_at = self._clock()
                break
        else:
            logger.debug("update_content: no script with id=%r", script_id)
            return
        self._write(scripts)

    def delete(self, script_id: str) -> None:
        """Remove *script_id* from the collection; unknown ids are ignored."""
        scripts = self.list_scripts()
        kept = [s for s in scripts if s.id != script_id]
        if len(kept) == len(scripts):
            logger.debug("delete: no script with id=%r", script_id)
            return
        self._write(kept)
