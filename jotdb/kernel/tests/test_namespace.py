"""
Tests for JotNamespace and open_namespace.
"""

import pytest

from jotdb.config import Settings
from jotdb.kernel.namespace import JotNamespace, open_namespace
from jotdb.kernel.storage import MemoryStorage


class TestJotNamespace:
    """Name to store lookup."""

    def test_same_name_same_store(self, storage):
        """Test a name always returns the same store."""
        ns = JotNamespace(storage)
        assert ns.get("notes") is ns.get("notes")

    def test_names(self, storage):
        """Test names() lists stores created so far."""
        ns = JotNamespace(storage)
        ns.get("b")
        ns.get("a")
        assert ns.names() == ["a", "b"]

    @pytest.mark.asyncio
    async def test_stores_are_isolated(self, storage):
        """Test stores under different names share nothing."""
        ns = JotNamespace(storage)
        await ns.get("a").set("x", 1)
        assert await ns.get("b").get("x") is None
        assert "a:data" in storage.data

    @pytest.mark.asyncio
    async def test_new_namespace_rehydrates(self, storage):
        """Test a new namespace over the same backend sees old data."""
        await JotNamespace(storage).get("a").set_all({"x": 1})
        assert await JotNamespace(storage).get("a").get_all() == {"x": 1}

    @pytest.mark.asyncio
    async def test_audit_limit_passed_through(self, storage):
        """Test the audit limit reaches each store."""
        store = JotNamespace(storage, audit_limit=2).get("a")
        for i in range(3):
            await store.set("n", i)
        assert len(await store.get_audit_log()) == 2


class TestOpenNamespace:
    """Building a namespace from settings."""

    @pytest.mark.asyncio
    async def test_memory_backend(self):
        """Test the memory backend needs no database."""
        config = Settings()
        config.STORAGE = "memory"
        ns = await open_namespace(config)
        assert isinstance(ns.storage, MemoryStorage)

    @pytest.mark.asyncio
    async def test_unknown_backend_rejected(self):
        """Test an unknown backend raises RuntimeError."""
        config = Settings()
        config.STORAGE = "redis"
        with pytest.raises(RuntimeError, match="JOTDB_STORAGE"):
            await open_namespace(config)

    @pytest.mark.asyncio
    async def test_postgres_needs_database_url(self):
        """Test postgres without DATABASE_URL raises RuntimeError."""
        config = Settings()
        config.STORAGE = "postgres"
        config.DATABASE_URL = ""
        with pytest.raises(RuntimeError, match="DATABASE_URL"):
            await open_namespace(config)

    @pytest.mark.asyncio
    async def test_bad_audit_limit_rejected(self):
        """Test a bad audit limit raises RuntimeError."""
        config = Settings()
        config.STORAGE = "memory"
        config.AUDIT_LOG_LIMIT = 0
        with pytest.raises(RuntimeError, match="AUDIT_LOG_LIMIT"):
            await open_namespace(config)
