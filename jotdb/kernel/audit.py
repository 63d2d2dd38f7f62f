"""
JotDB Kernel — Audit Trail

Append-only, size-bounded log of mutations for one store.
Newest entry first. Once the limit is exceeded the oldest entries fall off.

Order is insertion order, not timestamp order: a clock that steps backwards
still produces a newest-first trail.
"""

from __future__ import annotations

from typing import Any

from jotdb.kernel.types import AUDIT_ACTIONS, DEFAULT_AUDIT_LOG_LIMIT, AuditEntry, now_ms


class AuditTrail:
    """In-memory mirror of the persisted audit log."""

    def __init__(self, entries: list[AuditEntry] | None = None, limit: int = DEFAULT_AUDIT_LOG_LIMIT):
        if limit < 1:
            raise ValueError("audit log limit must be >= 1")
        self.limit = limit
        self._entries: list[AuditEntry] = list(entries or [])[:limit]

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[AuditEntry]:
        return list(self._entries)

    def with_entry(self, action: str, keys: list[str], timestamp: int | None = None) -> AuditTrail:
        """
        Return a new trail with one entry prepended and the tail truncated.
        The receiver is untouched, so a failed persist leaves it as it was.
        """
        if action not in AUDIT_ACTIONS:
            raise ValueError(f"Unknown audit action: {action}")

        entry = AuditEntry(
            timestamp=now_ms() if timestamp is None else timestamp,
            action=action,
            keys=list(keys),
        )
        return AuditTrail([entry, *self._entries], limit=self.limit)

    def cleared(self) -> AuditTrail:
        return AuditTrail([], limit=self.limit)

    def to_list(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]

    @classmethod
    def from_list(cls, data: list[dict[str, Any]] | None, limit: int = DEFAULT_AUDIT_LOG_LIMIT) -> AuditTrail:
        return cls([AuditEntry.from_dict(d) for d in data or []], limit=limit)
