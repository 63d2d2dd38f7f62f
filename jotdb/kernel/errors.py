"""
JotDB Kernel — Errors

Every failure a store operation can raise. All are synchronous failures of
the triggering call; nothing is retried inside the kernel.

A missing key is never an error: get/has/delete treat absence as normal.
"""

from __future__ import annotations

from dataclasses import dataclass


class JotError(Exception):
    """Base class for all kernel errors."""
    pass


class ReadOnlyError(JotError):
    """The store's read_only option is on and the operation mutates the document."""
    pass


class ModeError(JotError):
    """The operation does not apply to the store's current object/array mode."""
    pass


class DescriptorError(JotError, ValueError):
    """A schema descriptor is malformed (unknown tag, wrong shape)."""
    pass


@dataclass
class ValidationIssue:
    """One violated field or element, as reported by the compiled validator."""

    path: str  # dotted, "" for the root value
    message: str
    type: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message, "type": self.type}


class ValidationError(JotError):
    """A value failed the compiled validator. Carries every violation found."""

    def __init__(self, message: str, issues: list[ValidationIssue]):
        super().__init__(message)
        self.issues = issues

    @property
    def paths(self) -> list[str]:
        return [issue.path for issue in self.issues]
