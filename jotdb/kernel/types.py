"""
JotDB Kernel — Shared Types

Data classes used across inference, validator, audit, and store.
These are the contracts that bind the kernel together.

Descriptors are a tagged variant:
- ObjectDescriptor: field name → type tag (shallow, tags only)
- ArrayDescriptor: one element type, either a tag or a nested ObjectDescriptor

Descriptors are frozen. A schema change always builds a new descriptor and
recompiles the validator; nothing edits a descriptor in place.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Literal, Union

from jotdb.kernel.errors import DescriptorError

# ---------------------------------------------------------------------------
# Tag registry
# ---------------------------------------------------------------------------

FIELD_TAGS: set[str] = {
    "string",
    "number",
    "boolean",
    "email",
    "array",
    "object",
    "any",
}

AUDIT_ACTIONS: set[str] = {"set", "setAll", "push", "delete", "clear"}

AuditAction = Literal["set", "setAll", "push", "delete", "clear"]

DEFAULT_AUDIT_LOG_LIMIT = 100


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ObjectDescriptor:
    """Object document (or array element) shape: every declared field is required."""

    fields: dict[str, str] = field(default_factory=dict)

    kind: Literal["object"] = field(default="object", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "object", "fields": dict(self.fields)}


@dataclass(frozen=True)
class ArrayDescriptor:
    """Array document shape: every element matches `element`."""

    element: str | ObjectDescriptor = "any"

    kind: Literal["array"] = field(default="array", init=False)

    def to_dict(self) -> dict[str, Any]:
        element = self.element.to_dict() if isinstance(self.element, ObjectDescriptor) else self.element
        return {"kind": "array", "element": element}


Descriptor = Union[ObjectDescriptor, ArrayDescriptor]


def is_valid_tag(tag: Any) -> bool:
    return isinstance(tag, str) and tag in FIELD_TAGS


def _object_from_fields(fields: Any) -> ObjectDescriptor:
    if not isinstance(fields, dict):
        raise DescriptorError("object descriptor fields must be a mapping")
    for name, tag in fields.items():
        if not isinstance(name, str):
            raise DescriptorError(f"Field names must be strings, got {name!r}")
        if not is_valid_tag(tag):
            raise DescriptorError(f"Invalid type tag for '{name}': {tag!r}")
    return ObjectDescriptor(fields=dict(fields))


def _element_from_value(element: Any) -> str | ObjectDescriptor:
    if isinstance(element, ObjectDescriptor):
        return element
    if isinstance(element, str):
        if not is_valid_tag(element):
            raise DescriptorError(f"Invalid element type tag: {element!r}")
        return element
    if isinstance(element, dict):
        if element.get("kind") == "object" and set(element) == {"kind", "fields"}:
            return _object_from_fields(element["fields"])
        return _object_from_fields(element)
    raise DescriptorError(f"Invalid array element type: {element!r}")


def descriptor_from_dict(d: Any) -> Descriptor:
    """
    Build a Descriptor from its serialized or shorthand form.

    Accepted forms:
      {"kind": "object", "fields": {"name": "string"}}   → ObjectDescriptor
      {"kind": "array", "element": "number"}              → ArrayDescriptor
      {"name": "string", "age": "number"}                 → ObjectDescriptor (shorthand)
      ["number"] / [{"name": "string"}]                   → ArrayDescriptor (shorthand)

    Descriptor instances pass through unchanged.
    Raises DescriptorError for anything else.
    """
    if isinstance(d, (ObjectDescriptor, ArrayDescriptor)):
        return d

    if isinstance(d, list):
        if len(d) != 1:
            raise DescriptorError("array shorthand must hold exactly one element type")
        return ArrayDescriptor(element=_element_from_value(d[0]))

    if not isinstance(d, dict):
        raise DescriptorError(f"Descriptor must be a mapping or a list, got {type(d).__name__}")

    kind = d.get("kind")
    if kind == "object" and set(d) == {"kind", "fields"}:
        return _object_from_fields(d["fields"])
    if kind == "array" and set(d) == {"kind", "element"}:
        return ArrayDescriptor(element=_element_from_value(d["element"]))

    return _object_from_fields(d)


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


@dataclass
class StoreOptions:
    """Operating-mode policy for one store. Persisted; survives restarts."""

    auto_strip: bool = False
    read_only: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"autoStrip": self.auto_strip, "readOnly": self.read_only}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> StoreOptions:
        return cls(
            auto_strip=bool(d.get("autoStrip", False)),
            read_only=bool(d.get("readOnly", False)),
        )


# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------


@dataclass
class AuditEntry:
    """One recorded mutation: what happened, to which keys, and when."""

    timestamp: int  # ms since epoch
    action: str
    keys: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp, "action": self.action, "keys": list(self.keys)}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> AuditEntry:
        return cls(
            timestamp=d["timestamp"],
            action=d["action"],
            keys=list(d.get("keys", [])),
        )


# ---------------------------------------------------------------------------
# Schema drift
# ---------------------------------------------------------------------------


@dataclass
class FieldChange:
    """A field whose type tag differs between two descriptors."""

    field: str
    before: str
    after: str


@dataclass
class SchemaDiff:
    """
    Advisory comparison of a replaced descriptor against its successor.
    Returned by set_schema; never raised.
    """

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    changed: list[FieldChange] = field(default_factory=list)
    kind_changed: bool = False

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.changed or self.kind_changed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "added": list(self.added),
            "removed": list(self.removed),
            "changed": [
                {"field": c.field, "before": c.before, "after": c.after} for c in self.changed
            ],
            "kind_changed": self.kind_changed,
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)
