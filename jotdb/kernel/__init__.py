"""
JotDB Kernel — the single-document store engine.

Components:
  inference  — example value → Descriptor, descriptor drift diff
  validator  — Descriptor → pydantic-backed checker (strict / strip / passthrough)
  audit      — bounded newest-first mutation log
  store      — JotStore: hydrate, gate, validate, persist, audit
  namespace  — name → JotStore over one storage backend
"""

from jotdb.kernel.errors import (
    DescriptorError,
    JotError,
    ModeError,
    ReadOnlyError,
    ValidationError,
    ValidationIssue,
)
from jotdb.kernel.inference import diff_descriptors, infer_descriptor
from jotdb.kernel.namespace import JotNamespace, open_namespace
from jotdb.kernel.storage import MemoryStorage, ScopedStorage, StoreStorage
from jotdb.kernel.store import JotStore
from jotdb.kernel.types import (
    ArrayDescriptor,
    AuditEntry,
    ObjectDescriptor,
    SchemaDiff,
    StoreOptions,
    descriptor_from_dict,
)
from jotdb.kernel.validator import ValidationMode, compile_validator

__all__ = [
    "JotStore",
    "JotNamespace",
    "open_namespace",
    "StoreStorage",
    "MemoryStorage",
    "ScopedStorage",
    "ObjectDescriptor",
    "ArrayDescriptor",
    "descriptor_from_dict",
    "StoreOptions",
    "AuditEntry",
    "SchemaDiff",
    "infer_descriptor",
    "diff_descriptors",
    "compile_validator",
    "ValidationMode",
    "JotError",
    "ReadOnlyError",
    "ModeError",
    "ValidationError",
    "ValidationIssue",
    "DescriptorError",
]
