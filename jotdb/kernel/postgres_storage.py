"""
PostgresStorage adapter for the JotDB kernel.

Implements the StoreStorage protocol on top of an asyncpg pool.
All keys live in one jot_kv table; ScopedStorage supplies the per-instance
key prefix. put_many runs inside a single transaction.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import asyncpg

from jotdb.kernel.storage import StoreStorage

logger = logging.getLogger(__name__)

_UPSERT = """
    INSERT INTO jot_kv (key, value, updated_at)
    VALUES ($1, $2::jsonb, now())
    ON CONFLICT (key)
    DO UPDATE SET value = EXCLUDED.value, updated_at = now()
"""


class PostgresStorage(StoreStorage):
    """Postgres-based storage for store documents, schemas, options and audit logs."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def get(self, key: str) -> Any | None:
        """Fetch a value. Returns None if not found."""
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT value FROM jot_kv WHERE key = $1",
                key,
            )
            return json.loads(row["value"]) if row else None

    async def put(self, key: str, value: Any) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(_UPSERT, key, json.dumps(value))

    async def put_many(self, entries: dict[str, Any]) -> None:
        """Write every entry or none of them."""
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                for key, value in entries.items():
                    await conn.execute(_UPSERT, key, json.dumps(value))
        logger.debug("postgres_storage: wrote %d keys in one transaction", len(entries))

    async def close(self) -> None:
        """Close the connection pool."""
        await self.pool.close()
