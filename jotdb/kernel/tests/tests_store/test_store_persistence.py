"""
JotDB Store -- Persistence and Hydration Tests

State is hydrated lazily from storage once, written back on every mutation,
and a write that storage refuses leaves memory exactly as it was.
"""

import pytest

from jotdb.kernel.errors import ValidationError
from jotdb.kernel.storage import MemoryStorage
from jotdb.kernel.store import AUDIT_KEY, DATA_KEY, SCHEMA_KEY, JotStore


class FlakyStorage(MemoryStorage):
    """MemoryStorage that can be told to refuse writes."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False
        self.gets = 0

    async def get(self, key):
        self.gets += 1
        return await super().get(key)

    async def put(self, key, value):
        if self.fail_writes:
            raise RuntimeError("storage unavailable")
        await super().put(key, value)

    async def put_many(self, entries):
        if self.fail_writes:
            raise RuntimeError("storage unavailable")
        await super().put_many(entries)


class TestHydration:
    """Loading state from storage."""

    @pytest.mark.asyncio
    async def test_reopened_store_sees_everything(self, store, storage):
        """Test document, schema, options and audit survive a restart."""
        await store.set_all({"name": "Ann", "age": 31})
        await store.set_options(auto_strip=True)

        reopened = JotStore(storage, name="test")
        assert await reopened.get_all() == {"name": "Ann", "age": 31}
        assert await reopened.get_schema() == await store.get_schema()
        assert (await reopened.get_options()).auto_strip is True
        assert len(await reopened.get_audit_log()) == 1

    @pytest.mark.asyncio
    async def test_reopened_store_enforces_schema(self, store, storage):
        """Test a hydrated schema still validates writes."""
        await store.set_all({"age": 31})
        reopened = JotStore(storage, name="test")
        with pytest.raises(ValidationError):
            await reopened.set("age", "old")

    @pytest.mark.asyncio
    async def test_hydrates_once(self):
        """Test storage is read only on the first call."""
        storage = FlakyStorage()
        store = JotStore(storage)
        await store.get_all()
        reads_after_first = storage.gets
        await store.get_all()
        await store.keys()
        await store.set("a", 1)
        assert storage.gets == reads_after_first == 4

    @pytest.mark.asyncio
    async def test_array_document_survives_restart(self, store, storage):
        """Test an array document is hydrated in array mode."""
        await store.push({"n": 1})
        reopened = JotStore(storage, name="test")
        await reopened.push({"n": 2})
        assert await reopened.get_all() == [{"n": 1}, {"n": 2}]


class TestWriteBack:
    """Writing state to storage."""

    @pytest.mark.asyncio
    async def test_document_audit_and_inferred_schema_written_together(self, store, storage):
        """Test the first write persists document, schema and audit."""
        await store.set("a", 1)
        assert storage.data[DATA_KEY] == {"a": 1}
        assert storage.data[SCHEMA_KEY] == {"kind": "object", "fields": {"a": "number"}}
        assert storage.data[AUDIT_KEY][0]["action"] == "set"

    @pytest.mark.asyncio
    async def test_storage_failure_leaves_memory_unchanged(self):
        """Test a refused write keeps the previous state."""
        storage = FlakyStorage()
        store = JotStore(storage)
        await store.set("a", 1)

        storage.fail_writes = True
        with pytest.raises(RuntimeError):
            await store.set("a", 2)

        assert await store.get("a") == 1
        assert len(await store.get_audit_log()) == 1

    @pytest.mark.asyncio
    async def test_storage_failure_on_first_write_installs_no_schema(self):
        """Test a refused first write leaves no inferred schema behind."""
        storage = FlakyStorage()
        storage.fail_writes = True
        store = JotStore(storage)

        with pytest.raises(RuntimeError):
            await store.set("a", 1)

        assert await store.get_schema() is None
        assert await store.get_all() == {}

    @pytest.mark.asyncio
    async def test_storage_failure_on_kind_switch_keeps_document(self):
        """Test a refused schema switch keeps the old schema and document."""
        storage = FlakyStorage()
        store = JotStore(storage)
        await store.set_all({"a": 1})

        storage.fail_writes = True
        with pytest.raises(RuntimeError):
            await store.set_schema(["number"])

        assert (await store.get_schema()).kind == "object"
        assert await store.get("a") == 1

    @pytest.mark.asyncio
    async def test_caller_mutation_does_not_reach_store(self, store):
        """Test the store keeps its own copy of written values."""
        doc = {"tags": ["a"]}
        await store.set_all(doc)
        doc["tags"].append("b")
        assert await store.get_all() == {"tags": ["a"]}
