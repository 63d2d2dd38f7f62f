"""
JotDB Schema -- Inference Tests

Deterministic tagging rules: shallow for object examples, recursive on the
first element for array examples.
"""

import pytest

from jotdb.kernel.inference import (
    infer_array_descriptor,
    infer_descriptor,
    infer_object_descriptor,
    primitive_tag,
)
from jotdb.kernel.types import ArrayDescriptor, ObjectDescriptor


class TestPrimitiveTag:
    """Tagging of single values."""

    @pytest.mark.parametrize(
        "value,tag",
        [
            ("plain", "string"),
            ("", "string"),
            ("ann@example.com", "email"),
            ("@handle", "email"),
            (0, "number"),
            (3.5, "number"),
            (-2, "number"),
            (True, "boolean"),
            (False, "boolean"),
            (None, "any"),
        ],
    )
    def test_tags(self, value, tag):
        """Test each value maps to its tag."""
        assert primitive_tag(value) == tag


class TestObjectInference:
    """Shallow inference from a mapping."""

    def test_every_field_tagged(self):
        """Test one tag per field."""
        descriptor = infer_object_descriptor({
            "name": "Ann",
            "email": "ann@example.com",
            "age": 31,
            "active": True,
            "tags": ["a", "b"],
            "address": {"city": "Oslo"},
            "nickname": None,
        })
        assert descriptor == ObjectDescriptor(fields={
            "name": "string",
            "email": "email",
            "age": "number",
            "active": "boolean",
            "tags": "array",
            "address": "object",
            "nickname": "any",
        })

    def test_nested_containers_not_walked(self):
        """Test nested values are tagged as containers only."""
        descriptor = infer_object_descriptor({"rows": [{"id": 1}], "meta": {"deep": {"x": 1}}})
        assert descriptor.fields == {"rows": "array", "meta": "object"}

    def test_empty_object(self):
        """Test an empty mapping gives no fields."""
        assert infer_object_descriptor({}) == ObjectDescriptor(fields={})


class TestArrayInference:
    """Inference from the first element of a list."""

    def test_empty_array_is_any(self):
        """Test an empty list gives an any element."""
        assert infer_array_descriptor([]) == ArrayDescriptor(element="any")

    def test_primitive_first_element(self):
        """Test only the first element is looked at."""
        assert infer_array_descriptor([1, "two"]) == ArrayDescriptor(element="number")

    def test_object_first_element_recurses(self):
        """Test an object element gets its own field tags."""
        descriptor = infer_array_descriptor([{"id": 1, "owner": "a@b.co", "tags": []}])
        assert descriptor == ArrayDescriptor(
            element=ObjectDescriptor(fields={"id": "number", "owner": "email", "tags": "array"})
        )

    def test_nested_array_element_is_any(self):
        """Test a list element gives an any element."""
        # a list element is neither an object nor a scalar tag
        assert infer_array_descriptor([[1, 2]]) == ArrayDescriptor(element="any")


class TestInferDescriptor:
    """Top-level dispatch."""

    def test_dispatches_on_shape(self):
        """Test mappings and lists pick their descriptor kind."""
        assert isinstance(infer_descriptor({"a": 1}), ObjectDescriptor)
        assert isinstance(infer_descriptor([1]), ArrayDescriptor)
