"""
JotDB Kernel — Schema Inference

Derives a Descriptor from the first value written to a store that has none,
and compares descriptors when one is replaced.

Two inference paths, deliberately asymmetric:
  - object example → shallow: nested containers are tagged "array"/"object"
  - array example  → recursive on the first element: an object element
    becomes a nested ObjectDescriptor

Pure functions. No IO.
"""

from __future__ import annotations

from typing import Any

from jotdb.kernel.types import (
    ArrayDescriptor,
    Descriptor,
    FieldChange,
    ObjectDescriptor,
    SchemaDiff,
)

# Pseudo-field used when diffing array descriptors with a primitive element.
ELEMENT_FIELD = "[]"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def infer_descriptor(example: Any) -> Descriptor:
    """
    Infer a descriptor from an example document.

    A list gives an ArrayDescriptor; anything else is read as an object
    example. Non-mapping scalars are rejected by the caller before this runs.
    """
    if isinstance(example, list):
        return infer_array_descriptor(example)
    return infer_object_descriptor(example)


def infer_object_descriptor(example: dict[str, Any]) -> ObjectDescriptor:
    """Tag each top-level field. Never walks into nested values."""
    fields: dict[str, str] = {}
    for name, value in example.items():
        if isinstance(value, list):
            fields[name] = "array"
        elif isinstance(value, dict):
            fields[name] = "object"
        else:
            fields[name] = primitive_tag(value)
    return ObjectDescriptor(fields=fields)


def infer_array_descriptor(example: list[Any]) -> ArrayDescriptor:
    """Infer the element type from the first element only."""
    if not example:
        return ArrayDescriptor(element="any")

    first = example[0]
    if isinstance(first, dict):
        return ArrayDescriptor(element=infer_object_descriptor(first))
    return ArrayDescriptor(element=primitive_tag(first))


def primitive_tag(value: Any) -> str:
    """
    Tag a scalar value.

    Strings containing "@" are emails. bool is checked before number since
    bool is an int subclass.
    """
    if isinstance(value, str):
        return "email" if "@" in value else "string"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    return "any"


def diff_descriptors(old: Descriptor, new: Descriptor) -> SchemaDiff:
    """
    Compare two descriptors field by field.
    Advisory only: the result never blocks a schema replacement.
    """
    before = _comparable_fields(old)
    after = _comparable_fields(new)

    added = [name for name in after if name not in before]
    removed = [name for name in before if name not in after]
    changed = [
        FieldChange(field=name, before=before[name], after=after[name])
        for name in after
        if name in before and before[name] != after[name]
    ]

    return SchemaDiff(
        added=added,
        removed=removed,
        changed=changed,
        kind_changed=old.kind != new.kind,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _comparable_fields(descriptor: Descriptor) -> dict[str, str]:
    if isinstance(descriptor, ObjectDescriptor):
        return dict(descriptor.fields)

    element = descriptor.element
    if isinstance(element, ObjectDescriptor):
        return dict(element.fields)
    return {ELEMENT_FIELD: element}
