"""
JotDB Kernel — Validator Builder

Compiles a Descriptor into a checker backed by pydantic models.

One compiled validator serves three invocation modes, chosen per check:
  STRICT       — undeclared fields are rejected
  STRIP        — undeclared fields are dropped and the cleaned value returned
  PASSTHROUGH  — declared fields are checked, undeclared fields kept as-is

All tag checks are strict (no coercion): "1" is not a number, 1 is not a bool.
Field names are aliased internally so any string key works, including names
that collide with pydantic's own attributes.
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainValidator,
    Strict,
    StringConstraints,
    TypeAdapter,
    create_model,
)
from pydantic import ValidationError as PydanticValidationError

from jotdb.kernel.errors import ValidationError, ValidationIssue
from jotdb.kernel.types import ArrayDescriptor, Descriptor, ObjectDescriptor

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class ValidationMode(str, Enum):
    STRICT = "strict"
    STRIP = "strip"
    PASSTHROUGH = "passthrough"


_EXTRA_BY_MODE = {
    ValidationMode.STRICT: "forbid",
    ValidationMode.STRIP: "ignore",
    ValidationMode.PASSTHROUGH: "allow",
}


def _check_number(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("Input should be a number")
    return value


Number = Annotated[Any, PlainValidator(_check_number)]
Email = Annotated[str, StringConstraints(strict=True, pattern=EMAIL_PATTERN)]

_TAG_TYPES: dict[str, Any] = {
    "string": Annotated[str, Strict()],
    "number": Number,
    "boolean": Annotated[bool, Strict()],
    "email": Email,
    "array": Annotated[list[Any], Strict()],
    "object": Annotated[dict[str, Any], Strict()],
    "any": Any,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class CompiledValidator:
    """
    Checker compiled from one Descriptor.
    Never reused across descriptors: a new descriptor means a new instance.
    """

    def __init__(self, descriptor: Descriptor):
        self.descriptor = descriptor
        self._adapters: dict[ValidationMode, TypeAdapter] = {
            mode: TypeAdapter(_root_type(descriptor, mode)) for mode in ValidationMode
        }
        self._element_adapters: dict[ValidationMode, TypeAdapter] = {}
        if isinstance(descriptor, ArrayDescriptor):
            self._element_adapters = {
                mode: TypeAdapter(_element_type(descriptor.element, mode)) for mode in ValidationMode
            }

    def check(self, value: Any, mode: ValidationMode = ValidationMode.STRICT) -> Any:
        """
        Validate `value` and return the accepted value.

        STRIP returns a cleaned copy; STRICT and PASSTHROUGH return a deep copy
        of the input unchanged. Raises ValidationError listing every violation.
        """
        mode = ValidationMode(mode)
        adapter = self._adapters[mode]
        try:
            validated = adapter.validate_python(value)
        except PydanticValidationError as e:
            issues = issues_from_pydantic(e)
            raise ValidationError(_summarize(issues), issues) from e

        if mode is ValidationMode.STRIP:
            return adapter.dump_python(validated, by_alias=True)
        return copy.deepcopy(value)

    def check_element(
        self,
        item: Any,
        mode: ValidationMode = ValidationMode.STRICT,
        index: int | None = None,
    ) -> Any:
        """
        Validate one element of an array document. `index`, when given, is
        prefixed to every issue path so errors point at the element's slot.
        """
        if not self._element_adapters:
            raise TypeError("check_element() needs an array descriptor")

        mode = ValidationMode(mode)
        adapter = self._element_adapters[mode]
        try:
            validated = adapter.validate_python(item)
        except PydanticValidationError as e:
            issues = issues_from_pydantic(e)
            if index is not None:
                for issue in issues:
                    issue.path = f"{index}.{issue.path}" if issue.path else str(index)
            raise ValidationError(_summarize(issues), issues) from e

        if mode is ValidationMode.STRIP:
            return adapter.dump_python(validated, by_alias=True)
        return copy.deepcopy(item)

    def is_valid(self, value: Any, mode: ValidationMode = ValidationMode.STRICT) -> bool:
        try:
            self.check(value, mode)
        except ValidationError:
            return False
        return True


def compile_validator(descriptor: Descriptor) -> CompiledValidator:
    return CompiledValidator(descriptor)


def issues_from_pydantic(error: PydanticValidationError) -> list[ValidationIssue]:
    """One ValidationIssue per pydantic error, with a dotted path."""
    return [
        ValidationIssue(
            path=".".join(str(part) for part in err["loc"]),
            message=err["msg"],
            type=err["type"],
        )
        for err in error.errors()
    ]


# ---------------------------------------------------------------------------
# Model construction
# ---------------------------------------------------------------------------


def _root_type(descriptor: Descriptor, mode: ValidationMode) -> Any:
    if isinstance(descriptor, ArrayDescriptor):
        return list[_element_type(descriptor.element, mode)]  # type: ignore[misc]
    return _object_model(descriptor, mode, "Document")


def _element_type(element: str | ObjectDescriptor, mode: ValidationMode) -> Any:
    if isinstance(element, ObjectDescriptor):
        return _object_model(element, mode, "Element")
    return _TAG_TYPES[element]


def _object_model(descriptor: ObjectDescriptor, mode: ValidationMode, name: str) -> type[BaseModel]:
    definitions: dict[str, Any] = {}
    for i, (field_name, tag) in enumerate(descriptor.fields.items()):
        definitions[f"f_{i}"] = (_TAG_TYPES[tag], Field(..., alias=field_name))

    config = ConfigDict(extra=_EXTRA_BY_MODE[mode])
    return create_model(f"{name}_{mode.value}", __config__=config, **definitions)


def _summarize(issues: list[ValidationIssue]) -> str:
    parts = [f"{issue.path or '<root>'}: {issue.message}" for issue in issues]
    return f"Validation failed with {len(issues)} issue(s): " + "; ".join(parts)
