"""
JotDB Kernel — Storage

Durable key-value collaborator used by the store. The kernel only needs
get/put by string key; put_many lets a backend persist several keys in one
atomic write (document + audit log per mutation).

Values are JSON-serializable Python objects. Backends must not hand out
references to their internal state: a caller mutating a returned value must
not change what is stored.
"""

from __future__ import annotations

import copy
from typing import Any


# ---------------------------------------------------------------------------
# Storage protocol
# ---------------------------------------------------------------------------

class StoreStorage:
    """
    Abstract storage interface.
    Implement with Postgres for production, or in-memory for tests.
    """

    async def get(self, key: str) -> Any | None:
        """Fetch the value stored under key. Returns None if not found."""
        raise NotImplementedError

    async def put(self, key: str, value: Any) -> None:
        """Write value under key, replacing any previous value."""
        raise NotImplementedError

    async def put_many(self, entries: dict[str, Any]) -> None:
        """
        Write several keys. Backends that can do this atomically override it;
        the default writes one key at a time.
        """
        for key, value in entries.items():
            await self.put(key, value)


class MemoryStorage(StoreStorage):
    """In-memory storage for testing. Copies on the way in and out."""

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}

    async def get(self, key: str) -> Any | None:
        return copy.deepcopy(self.data.get(key))

    async def put(self, key: str, value: Any) -> None:
        self.data[key] = copy.deepcopy(value)

    async def put_many(self, entries: dict[str, Any]) -> None:
        staged = {key: copy.deepcopy(value) for key, value in entries.items()}
        self.data.update(staged)


class ScopedStorage(StoreStorage):
    """
    One store instance's private view of a shared backend.
    Every key is prefixed with "<namespace>:".
    """

    def __init__(self, backend: StoreStorage, namespace: str):
        if not namespace:
            raise ValueError("namespace must be a non-empty string")
        self.backend = backend
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Any | None:
        return await self.backend.get(self._key(key))

    async def put(self, key: str, value: Any) -> None:
        await self.backend.put(self._key(key), value)

    async def put_many(self, entries: dict[str, Any]) -> None:
        await self.backend.put_many({self._key(k): v for k, v in entries.items()})
