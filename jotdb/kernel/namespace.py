"""
JotDB Kernel — Namespace

Hosts many named stores on one storage backend. A store is created the first
time its name is requested and lives as long as the namespace; each one sees
only its own keys through a ScopedStorage.
"""

from __future__ import annotations

import logging

import asyncpg

from jotdb.config import Settings, settings
from jotdb.kernel.postgres_storage import PostgresStorage
from jotdb.kernel.storage import MemoryStorage, ScopedStorage, StoreStorage
from jotdb.kernel.store import JotStore
from jotdb.kernel.types import DEFAULT_AUDIT_LOG_LIMIT

logger = logging.getLogger(__name__)


class JotNamespace:
    """Name → JotStore registry over a shared backend."""

    def __init__(self, storage: StoreStorage, *, audit_limit: int = DEFAULT_AUDIT_LOG_LIMIT):
        self._storage = storage
        self._audit_limit = audit_limit
        self._stores: dict[str, JotStore] = {}

    def get(self, name: str) -> JotStore:
        """Return the store for `name`, creating it on first access."""
        store = self._stores.get(name)
        if store is None:
            store = JotStore(
                ScopedStorage(self._storage, name),
                name=name,
                audit_limit=self._audit_limit,
            )
            self._stores[name] = store
            logger.info("jot_namespace: opened store %s", name)
        return store

    def names(self) -> list[str]:
        return sorted(self._stores)

    @property
    def storage(self) -> StoreStorage:
        return self._storage


async def open_namespace(config: Settings | None = None) -> JotNamespace:
    """
    Build a namespace from configuration.
    Raises RuntimeError when the configuration is unusable.
    """
    config = config or settings
    issues = config.validate()
    if issues:
        raise RuntimeError("; ".join(issues))

    if config.STORAGE == "postgres":
        pool = await asyncpg.create_pool(
            dsn=config.DATABASE_URL,
            min_size=config.DB_POOL_MIN_SIZE,
            max_size=config.DB_POOL_MAX_SIZE,
        )
        storage: StoreStorage = PostgresStorage(pool)
    else:
        storage = MemoryStorage()

    logger.info("jot_namespace: using %s storage", config.STORAGE)
    return JotNamespace(storage, audit_limit=config.AUDIT_LOG_LIMIT)
