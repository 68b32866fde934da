"""Errors raised while compiling an XIDL schema."""

from __future__ import annotations


class SchemaError(Exception):
    """Raised when the schema structure makes compilation impossible."""

    pass


class UnknownParentError(SchemaError):
    """Raised when an interface extends an interface that was not declared before it."""

    pass


class InvalidDirectionError(SchemaError):
    """Raised when a method parameter has a `dir` other than in, out or return."""

    pass


class StructInheritanceError(SchemaError):
    """Raised when a struct-shaped interface declares a parent interface."""

    pass


class EmptyOutputError(SchemaError):
    """Raised when a declaration group that must not be empty ends up empty after parsing."""

    pass
