"""
Unit tests for src/store/

Coverage plan
─────────────
models.py    → Script fields, (de)serialization, .py normalization
db.py        → seeding, backfill, add / update_content / delete,
               no-medium mode, corruption, snapshot isolation
backends.py  → MemoryStorage, SqliteStorage round-trips
export.py    → export_script writes <dir>/<name>
"""

import itertools
import json

import pytest

from src.exceptions import CorruptStoreError, StoreError
from src.store.backends import MemoryStorage, SqliteStorage
from src.store.db import ScriptStore
from src.store.defaults import DEFAULT_SCRIPT_CONTENT, DEFAULT_SCRIPTS
from src.store.export import export_script
from src.store.models import Script, normalize_name

DEFAULT_IDS = [d.id for d in DEFAULT_SCRIPTS]


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    """ScriptStore over an in-memory medium with a monotonically increasing clock."""
    ticks = itertools.count(1_000)
    return ScriptStore(storage, clock=lambda: next(ticks))


def _user_blob(*scripts: Script) -> str:
    return json.dumps([s.to_dict() for s in scripts])


# ─────────────────────────────────────────────────────────────────────────────
# 1. Script model
# ─────────────────────────────────────────────────────────────────────────────

class TestScriptModel:

    def test_normalize_appends_suffix(self):
        assert normalize_name("scratch") == "scratch.py"

    def test_normalize_keeps_existing_suffix(self):
        assert normalize_name("x.py") == "x.py"

    def test_dict_uses_updated_at_camel_case_key(self):
        s = Script(id="a", name="a.py", content="", updated_at=5)
        assert s.to_dict() == {"id": "a", "name": "a.py", "content": "", "updatedAt": 5}

    def test_from_dict_reads_serialized_form(self):
        s = Script.from_dict({"id": "a", "name": "a.py", "content": "x", "updatedAt": 7})
        assert s == Script(id="a", name="a.py", content="x", updated_at=7)

    def test_from_dict_missing_field_raises_key_error(self):
        with pytest.raises(KeyError):
            Script.from_dict({"id": "a"})

    def test_from_dict_rejects_null_name(self):
        with pytest.raises(TypeError):
            Script.from_dict({"id": "a", "name": None, "content": "", "updatedAt": 1})

    def test_from_dict_accepts_whole_float_timestamp(self):
        s = Script.from_dict({"id": "a", "name": "a.py", "content": "", "updatedAt": 7.0})
        assert s.updated_at == 7


# ─────────────────────────────────────────────────────────────────────────────
# 2. Seeding and backfill
# ─────────────────────────────────────────────────────────────────────────────

class TestSeeding:

    def test_empty_store_returns_defaults(self, store):
        scripts = store.list_scripts()
        assert [s.id for s in scripts] == DEFAULT_IDS
        assert scripts[0].name == "main.py"

    def test_seed_is_persisted_immediately(self, store, storage):
        store.list_scripts()
        assert storage.blob is not None
        assert [d["id"] for d in json.loads(storage.blob)] == DEFAULT_IDS

    def test_seeding_is_idempotent(self, store, storage):
        first = store.list_scripts()
        blob = storage.blob
        second = store.list_scripts()
        assert first == second
        assert storage.blob == blob
        assert storage.writes == 1

    def test_no_medium_lists_nothing(self):
        assert ScriptStore(None).list_scripts() == []

    def test_no_medium_add_still_returns_script(self):
        s = ScriptStore(None).add("demo")
        assert s.name == "demo.py"


class TestBackfill:

    def test_missing_defaults_are_appended_after_user_script(self, storage):
        user = Script(id="u1", name="mine.py", content="print('x')", updated_at=1)
        storage.blob = _user_blob(user)
        scripts = ScriptStore(storage).list_scripts()
        assert [s.id for s in scripts] == ["u1", *DEFAULT_IDS]
        assert scripts[0] == user

    def test_backfill_is_persisted_once(self, storage):
        storage.blob = _user_blob(Script(id="u1", name="mine.py", content="", updated_at=1))
        store = ScriptStore(storage)
        store.list_scripts()
        store.list_scripts()
        assert storage.writes == 1
        assert len(json.loads(storage.blob)) == 1 + len(DEFAULT_SCRIPTS)

    def test_default_name_present_under_other_id_is_not_backfilled(self, storage):
        storage.blob = _user_blob(Script(id="other", name="main.py", content="", updated_at=1))
        ids = [s.id for s in ScriptStore(storage).list_scripts()]
        assert "default" not in ids
        assert ids.count("other") == 1

    def test_empty_array_is_backfilled(self, storage):
        storage.blob = "[]"
        assert [s.id for s in ScriptStore(storage).list_scripts()] == DEFAULT_IDS

    def test_deleted_default_returns_on_next_list(self, store, storage):
        store.list_scripts()
        store.delete("default")
        assert "default" not in [d["id"] for d in json.loads(storage.blob)]
        assert "default" in [s.id for s in store.list_scripts()]


# ─────────────────────────────────────────────────────────────────────────────
# 3. CRUD
# ─────────────────────────────────────────────────────────────────────────────

class TestAdd:

    def test_add_appends_py_suffix(self, store):
        assert store.add("scratch").name == "scratch.py"

    def test_add_does_not_double_suffix(self, store):
        assert store.add("x.py").name == "x.py"

    def test_add_prepends(self, store):
        s = store.add("new")
        assert store.list_scripts()[0].id == s.id

    def test_add_uses_template_for_empty_content(self, store):
        assert store.add("t").content == DEFAULT_SCRIPT_CONTENT

    def test_add_keeps_supplied_content(self, store):
        assert store.add("t", "print('hi')").content == "print('hi')"

    def test_ids_are_unique(self, store):
        ids = {store.add(f"s{i}").id for i in range(20)}
        assert len(ids) == 20

    def test_duplicate_names_are_permitted(self, store):
        a = store.add("dup")
        b = store.add("dup")
        names = [s.name for s in store.list_scripts()]
        assert names.count("dup.py") == 2
        assert store.get(a.id).id == a.id
        assert store.get(b.id).id == b.id

    def test_add_sets_updated_at_from_clock(self, store):
        store.list_scripts()
        s = store.add("t")
        assert s.updated_at > 1_000


class TestUpdateContent:

    def test_update_replaces_content_and_refreshes_timestamp(self, store):
        s = store.add("t", "old")
        store.update_content(s.id, "new")
        updated = store.get(s.id)
        assert updated.content == "new"
        assert updated.updated_at > s.updated_at

    def test_update_leaves_other_scripts_alone(self, store):
        s = store.add("t", "old")
        before = [x for x in store.list_scripts() if x.id != s.id]
        store.update_content(s.id, "new")
        after = [x for x in store.list_scripts() if x.id != s.id]
        assert before == after

    def test_update_unknown_id_leaves_blob_unchanged(self, store, storage):
        store.add("t", "x")
        blob = storage.blob
        store.update_content("does-not-exist", "boom")
        assert storage.blob == blob


class TestDelete:

    def test_delete_removes_entry(self, store):
        s = store.add("t")
        store.delete(s.id)
        assert store.get(s.id) is None

    def test_delete_unknown_id_is_noop(self, store, storage):
        store.add("t")
        blob = storage.blob
        store.delete("nope")
        assert storage.blob == blob


class TestForeignBlob:
    """A blob written by another writer is left alone when nothing matches."""

    @pytest.fixture
    def compact(self):
        entries = [d.to_script(1_700_000_000_000).to_dict() for d in DEFAULT_SCRIPTS]
        entries.insert(0, {"id": "u1", "name": "caf\u00e9.py", "content": "x", "updatedAt": 5})
        return MemoryStorage(json.dumps(entries, separators=(",", ":")))

    def test_update_unknown_id_does_not_rewrite(self, compact):
        blob = compact.blob
        ScriptStore(compact).update_content("ghost", "x")
        assert compact.writes == 0
        assert compact.blob == blob

    def test_delete_unknown_id_does_not_rewrite(self, compact):
        blob = compact.blob
        ScriptStore(compact).delete("ghost")
        assert compact.writes == 0
        assert compact.blob == blob

    def test_matching_update_still_persists(self, compact):
        ScriptStore(compact).update_content("u1", "y")
        assert compact.writes == 1
        assert ScriptStore(compact).get("u1").content == "y"


class TestReplay:
    """The persisted collection always equals a replay of the operations."""

    def test_operation_sequence_matches_model(self, store, storage):
        expected = [d.id for d in DEFAULT_SCRIPTS]
        store.list_scripts()

        a = store.add("a", "print('a')")
        expected.insert(0, a.id)
        b = store.add("b")
        expected.insert(0, b.id)
        store.update_content(a.id, "print('a2')")
        store.delete(b.id)
        expected.remove(b.id)
        c = store.add("c.py", "pass")
        expected.insert(0, c.id)
        store.update_content("ghost", "x")
        store.delete("ghost")

        persisted = json.loads(storage.blob)
        assert [d["id"] for d in persisted] == expected
        assert next(d for d in persisted if d["id"] == a.id)["content"] == "print('a2')"


class TestSnapshots:

    def test_mutating_returned_script_does_not_touch_store(self, store):
        s = store.add("t", "orig")
        s.content = "changed locally"
        assert store.get(s.id).content == "orig"

    def test_get_unknown_returns_none(self, store):
        assert store.get("missing") is None


# ─────────────────────────────────────────────────────────────────────────────
# 4. Corruption
# ─────────────────────────────────────────────────────────────────────────────

class TestCorruption:

    @pytest.mark.parametrize("blob", [
        "{not json",
        '{"id": "a"}',
        '[{"id": "a"}]',
        '[{"id": "a", "name": "a.py", "content": "", "updatedAt": "soon"}]',
        '[{"id": "a", "name": null, "content": "", "updatedAt": 1}]',
        '[{"id": 7, "name": "a.py", "content": "", "updatedAt": 1}]',
        '[{"id": "a", "name": "a.py", "content": null, "updatedAt": 1}]',
        '[{"id": "a", "name": "a.py", "content": "", "updatedAt": true}]',
        '[{"id": "a", "name": "a.py", "content": "", "updatedAt": 1.5}]',
        '["not an object"]',
    ])
    def test_malformed_blob_raises(self, blob):
        with pytest.raises(CorruptStoreError):
            ScriptStore(MemoryStorage(blob)).list_scripts()

    def test_corrupt_error_is_store_error(self):
        assert issubclass(CorruptStoreError, StoreError)

    def test_mutation_on_corrupt_blob_propagates(self):
        with pytest.raises(CorruptStoreError):
            ScriptStore(MemoryStorage("nope")).add("x")


# ─────────────────────────────────────────────────────────────────────────────
# 5. SQLite medium
# ─────────────────────────────────────────────────────────────────────────────

class TestSqliteStorage:

    def test_schema_auto_created_and_empty(self, tmp_path):
        medium = SqliteStorage(str(tmp_path / "fresh.db"))
        assert medium.get() is None

    def test_set_then_get_round_trip(self, tmp_path):
        medium = SqliteStorage(str(tmp_path / "kv.db"))
        medium.set("[1, 2]")
        medium.set("[3]")
        assert medium.get() == "[3]"

    def test_store_persists_across_instances(self, tmp_path):
        path = str(tmp_path / "scripts.db")
        s = ScriptStore(SqliteStorage(path)).add("persist", "print('ok')")
        again = ScriptStore(SqliteStorage(path)).get(s.id)
        assert again is not None
        assert again.content == "print('ok')"

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "s.db"
        SqliteStorage(str(path))
        assert path.exists()


# ─────────────────────────────────────────────────────────────────────────────
# 6. Export
# ─────────────────────────────────────────────────────────────────────────────

class TestExport:

    def test_export_writes_content_under_script_name(self, tmp_path):
        s = Script(id="a", name="job.py", content="print('x')\n", updated_at=1)
        path = export_script(s, str(tmp_path))
        assert path == tmp_path / "job.py"
        assert path.read_text(encoding="utf-8") == "print('x')\n"
