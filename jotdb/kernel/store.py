"""
JotDB Kernel — Document Store

Owns one JSON document (object or array) and the evolving schema over it.
Sits between the caller and durable storage:

  hydrate → policy gate → ensure descriptor (infer if absent)
          → validate / strip → persist document + audit entry → commit

Every public method runs under the instance's lock, so one invocation at a
time touches the in-memory state. Storage get/put are the only suspension
points.

A write computes the candidate state first and only assigns it to memory
after storage has accepted it. A rejected or failed write changes nothing.
"""

from __future__ import annotations

import asyncio
import copy
import dataclasses
import functools
import logging
from typing import Any

from jotdb.kernel.audit import AuditTrail
from jotdb.kernel.errors import ModeError, ReadOnlyError, ValidationError
from jotdb.kernel.inference import diff_descriptors, infer_descriptor
from jotdb.kernel.storage import StoreStorage
from jotdb.kernel.types import (
    DEFAULT_AUDIT_LOG_LIMIT,
    AuditEntry,
    Descriptor,
    SchemaDiff,
    StoreOptions,
    descriptor_from_dict,
)
from jotdb.kernel.validator import CompiledValidator, ValidationMode, compile_validator

logger = logging.getLogger(__name__)

DATA_KEY = "data"
SCHEMA_KEY = "schema"
OPTIONS_KEY = "options"
AUDIT_KEY = "audit_log"


def _serialized(method):
    """Run a public operation under the instance lock, after hydration."""

    @functools.wraps(method)
    async def wrapper(self: JotStore, *args: Any, **kwargs: Any) -> Any:
        async with self._lock:
            await self._hydrate()
            return await method(self, *args, **kwargs)

    return wrapper


class JotStore:
    """
    Single-document store with schema inference, validation, policy and audit.

    Object mode: the document is a dict; set/delete/get/keys/has apply.
    Array mode: the document is a list; push/set_all apply.
    An installed descriptor fixes the mode. Without one, the document's own
    shape does; an empty object is undecided.
    """

    def __init__(
        self,
        storage: StoreStorage,
        *,
        name: str = "default",
        audit_limit: int = DEFAULT_AUDIT_LOG_LIMIT,
    ):
        self.name = name
        self._storage = storage
        self._lock = asyncio.Lock()
        self._hydrated = False

        self._data: dict[str, Any] | list[Any] = {}
        self._descriptor: Descriptor | None = None
        self._validator: CompiledValidator | None = None
        self._options = StoreOptions()
        self._audit = AuditTrail(limit=audit_limit)

    # -- reads --

    @_serialized
    async def get(self, key: str) -> Any | None:
        if not self._object_reads():
            return None
        return copy.deepcopy(self._data.get(key))

    @_serialized
    async def get_all(self) -> dict[str, Any] | list[Any]:
        return copy.deepcopy(self._data)

    @_serialized
    async def keys(self) -> list[str]:
        if not self._object_reads():
            return []
        return list(self._data)

    @_serialized
    async def has(self, key: str) -> bool:
        return self._object_reads() and key in self._data

    # -- writes --

    @_serialized
    async def set(self, key: str, value: Any) -> None:
        """Set one field. The whole resulting document must pass validation."""
        self._require_writable("set")
        if self._mode() == "array":
            raise ModeError("set() needs an object-mode store; use push() or set_all()")

        descriptor, validator = self._ensure_validator({key: value})
        base = self._data if isinstance(self._data, dict) else {}
        document = self._check("set", validator, {**base, key: value})

        await self._commit(document, "set", [key], descriptor, validator)

    @_serialized
    async def set_all(self, value: dict[str, Any] | list[Any]) -> None:
        """
        Bulk write. A mapping is merged into the current object document;
        a list replaces the whole array document.
        """
        self._require_writable("setAll")
        if isinstance(value, dict):
            shape = "object"
        elif isinstance(value, list):
            shape = "array"
        else:
            raise ModeError(f"set_all() takes a mapping or a list, got {type(value).__name__}")

        mode = self._mode()
        if mode is not None and mode != shape:
            raise ModeError(f"Store '{self.name}' is in {mode} mode; cannot write {shape} data")

        descriptor, validator = self._ensure_validator(value)
        if shape == "object":
            base = self._data if isinstance(self._data, dict) else {}
            document = self._check("setAll", validator, {**base, **value})
            keys = list(value)
        else:
            document = self._check("setAll", validator, list(value))
            keys = []

        await self._commit(document, "setAll", keys, descriptor, validator)

    @_serialized
    async def push(self, item: Any) -> None:
        """Append one element to an array document."""
        self._require_writable("push")
        if self._mode() == "object":
            raise ModeError("push() needs an array-mode store")

        descriptor, validator = self._ensure_validator([item])
        base = self._data if isinstance(self._data, list) else []
        try:
            accepted = validator.check_element(item, self._validation_mode("array"), index=len(base))
        except ValidationError as e:
            logger.warning("jot_store: push rejected on %s (%d issues)", self.name, len(e.issues))
            raise

        await self._commit([*base, accepted], "push", [], descriptor, validator)

    @_serialized
    async def delete(self, key: str) -> None:
        """Remove a field. A missing key is not an error."""
        self._require_writable("delete")
        if self._mode() == "array":
            raise ModeError("delete() needs an object-mode store")

        document = dict(self._data) if isinstance(self._data, dict) else {}
        document.pop(key, None)
        await self._commit(document, "delete", [key])

    @_serialized
    async def clear(self) -> None:
        """Empty the document. Schema, options and audit log are kept."""
        self._require_writable("clear")
        empty: dict[str, Any] | list[Any] = [] if self._mode() == "array" else {}
        await self._commit(empty, "clear", [])

    # -- schema --

    @_serialized
    async def get_schema(self) -> Descriptor | None:
        if self._descriptor is None:
            return None
        return descriptor_from_dict(self._descriptor.to_dict())

    @_serialized
    async def set_schema(self, descriptor: Descriptor | dict[str, Any] | list[Any]) -> SchemaDiff:
        """
        Replace the schema wholesale. Returns the drift against the previous
        descriptor; drift is reported, never refused.
        """
        new = descriptor_from_dict(descriptor)
        validator = compile_validator(new)
        previous = self._descriptor

        # a document of the other shape is emptied along with the switch
        entries: dict[str, Any] = {SCHEMA_KEY: new.to_dict()}
        if isinstance(self._data, list) != (new.kind == "array"):
            entries[DATA_KEY] = [] if new.kind == "array" else {}

        await self._storage.put_many(entries)
        if DATA_KEY in entries:
            self._data = entries[DATA_KEY]
        self._install(new, validator)

        diff = diff_descriptors(previous, new) if previous is not None else SchemaDiff()
        if DATA_KEY in entries:
            logger.warning("jot_store: %s switched to %s mode; document reset", self.name, new.kind)
        if diff.has_changes:
            logger.warning("jot_store: schema drift on %s: %s", self.name, diff.to_dict())
        else:
            logger.info("jot_store: schema set on %s (%s)", self.name, new.kind)
        return diff

    # -- options --

    @_serialized
    async def get_options(self) -> StoreOptions:
        return dataclasses.replace(self._options)

    @_serialized
    async def set_options(self, **changes: bool) -> StoreOptions:
        """Merge the given option fields (auto_strip, read_only) and persist."""
        for option, value in changes.items():
            if not isinstance(value, bool):
                raise TypeError(f"Option '{option}' must be a bool, got {type(value).__name__}")
        merged = dataclasses.replace(self._options, **changes)
        await self._storage.put(OPTIONS_KEY, merged.to_dict())
        self._options = merged
        logger.info("jot_store: options on %s now %s", self.name, merged.to_dict())
        return dataclasses.replace(merged)

    # -- audit --

    @_serialized
    async def get_audit_log(self) -> list[AuditEntry]:
        return [AuditEntry.from_dict(d) for d in self._audit.to_list()]

    @_serialized
    async def clear_audit_log(self) -> None:
        cleared = self._audit.cleared()
        await self._storage.put(AUDIT_KEY, cleared.to_list())
        self._audit = cleared

    # -- internals --

    async def _hydrate(self) -> None:
        """Load all four keys once per process lifetime."""
        if self._hydrated:
            return

        data = await self._storage.get(DATA_KEY)
        schema = await self._storage.get(SCHEMA_KEY)
        options = await self._storage.get(OPTIONS_KEY)
        audit = await self._storage.get(AUDIT_KEY)

        self._data = data if isinstance(data, (dict, list)) else {}
        if schema is not None:
            self._install(descriptor_from_dict(schema))
        if options is not None:
            self._options = StoreOptions.from_dict(options)
        self._audit = AuditTrail.from_list(audit, limit=self._audit.limit)

        self._hydrated = True
        logger.info(
            "jot_store: hydrated %s (schema=%s, audit entries=%d)",
            self.name,
            self._descriptor.kind if self._descriptor else None,
            len(self._audit),
        )

    def _mode(self) -> str | None:
        if self._descriptor is not None:
            return self._descriptor.kind
        if isinstance(self._data, list):
            return "array"
        if self._data:
            return "object"
        return None

    def _object_reads(self) -> bool:
        return self._mode() != "array" and isinstance(self._data, dict)

    def _require_writable(self, action: str) -> None:
        if self._options.read_only:
            raise ReadOnlyError(f"Store '{self.name}' is read-only; {action} refused")

    def _validation_mode(self, shape: str) -> ValidationMode:
        # auto-strip applies to object documents only; array elements keep unknown fields
        if shape == "object" and self._options.auto_strip:
            return ValidationMode.STRIP
        return ValidationMode.PASSTHROUGH

    def _ensure_validator(self, example: Any) -> tuple[Descriptor | None, CompiledValidator]:
        """
        Return (descriptor to install, validator). The descriptor is None when
        one is already installed; otherwise it is inferred from `example` and
        installed by _commit once the write is persisted.
        """
        if self._validator is not None:
            return None, self._validator

        descriptor = infer_descriptor(example)
        logger.info("jot_store: inferred %s schema for %s: %s", descriptor.kind, self.name, descriptor.to_dict())
        return descriptor, compile_validator(descriptor)

    def _check(self, action: str, validator: CompiledValidator, candidate: Any) -> Any:
        shape = "array" if isinstance(candidate, list) else "object"
        try:
            return validator.check(candidate, self._validation_mode(shape))
        except ValidationError as e:
            logger.warning("jot_store: %s rejected on %s (%d issues)", action, self.name, len(e.issues))
            raise

    def _install(self, descriptor: Descriptor, validator: CompiledValidator | None = None) -> None:
        """The only place descriptor and validator are assigned: always together."""
        self._validator = validator or compile_validator(descriptor)
        self._descriptor = descriptor

    async def _commit(
        self,
        document: dict[str, Any] | list[Any],
        action: str,
        keys: list[str],
        descriptor: Descriptor | None = None,
        validator: CompiledValidator | None = None,
    ) -> None:
        audit = self._audit.with_entry(action, keys)
        entries: dict[str, Any] = {DATA_KEY: document, AUDIT_KEY: audit.to_list()}
        if descriptor is not None:
            entries[SCHEMA_KEY] = descriptor.to_dict()

        await self._storage.put_many(entries)
        logger.debug("jot_store: %s on %s persisted %s", action, self.name, sorted(entries))

        self._data = document
        self._audit = audit
        if descriptor is not None:
            self._install(descriptor, validator)
