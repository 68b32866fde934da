"""Pytest configuration and fixtures for xidl stub generator tests."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from xidl_stub_generator.model import InterfaceModel
from xidl_stub_generator.parser import parse_schema
from xidl_stub_generator.run import generate_client

# Test directory structure
TESTS_DIR = Path(__file__).parent
SCHEMAS_DIR = TESTS_DIR / "schemas"

SHAPES_SCHEMA = SCHEMAS_DIR / "shapes.xidl"
VBOX_SCHEMA = SCHEMAS_DIR / "vbox_subset.xidl"

MINIMAL_ENUM = '<enum name="Flag"><const name="On" value="1"/></enum>'


def parse_text(schema: str, target: str = "wsdl") -> InterfaceModel:
    """Parse a schema given as text.

    Args:
        schema: The XIDL document.
        target: The transport whose `<if target=...>` sections are kept.

    Returns:
        The parsed interface model.
    """
    return parse_schema(io.BytesIO(schema.encode("utf-8")), target=target)


def library_schema(body: str) -> str:
    """Wrap declarations in the `idl` and `library` tags."""
    return f'<?xml version="1.0" ?><idl><library name="Test">{body}</library></idl>'


@pytest.fixture(scope="session")
def vbox_model() -> InterfaceModel:
    """The model of the reduced VirtualBox schema."""
    with open(VBOX_SCHEMA, "rb") as schema_file:
        return parse_schema(schema_file)


@pytest.fixture(scope="session")
def vbox_output() -> str:
    """The client generated for the reduced VirtualBox schema."""
    return generate_client(str(VBOX_SCHEMA))


@pytest.fixture(scope="session")
def shapes_output() -> str:
    """The client generated for the shapes schema."""
    return generate_client(str(SHAPES_SCHEMA))
