"""Helper functionality that is used in other modules of this package."""

from __future__ import annotations

import json
import re
from collections.abc import Sequence

INDENT = "    "

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def accessor_suffix(name: str) -> str:
    """Build the suffix of the accessor methods of an attribute.

    Args:
        name (str): The attribute name.

    Returns:
        str: The name with its first letter in upper case.

    Examples:
        >>> accessor_suffix("area")
        'Area'
        >>> accessor_suffix("VRDEServer")
        'VRDEServer'
    """
    return name[:1].upper() + name[1:]


def string_literal(value: str) -> str:
    """Quote a value as a TypeScript string literal."""
    return json.dumps(value)


def property_name(name: str) -> str:
    """Use a name as an object key or enum member, quoting it when it is not an identifier.

    Examples:
        >>> property_name("Red")
        'Red'
        >>> property_name("3D")
        '"3D"'
    """
    if _IDENTIFIER_PATTERN.match(name):
        return name
    return string_literal(name)


def argument_name(name: str) -> str:
    """The name of a generated method argument.

    The `$` prefix keeps schema names clear of reserved words.
    """
    return f"${name}"


def indent(lines: Sequence[str], level: int = 1) -> list[str]:
    """Indent non-empty lines by the given number of levels."""
    prefix = INDENT * level
    return [f"{prefix}{line}" if line else line for line in lines]


def new_object_literal(entries: Sequence[tuple[str, str]]) -> str:
    """Build a single-line object literal with quoted keys.

    Args:
        entries (Sequence[tuple[str, str]]): Pairs of key and value expression.

    Returns:
        str: The object literal.
    """
    if not entries:
        return "{}"
    return "{ " + ", ".join(f"{string_literal(key)}: {value}" for key, value in entries) + " }"


def new_object_type(entries: Sequence[tuple[str, str]]) -> str:
    """Build a single-line object type from pairs of field name and type."""
    return "{ " + "; ".join(f"{property_name(key)}: {value}" for key, value in entries) + " }"
