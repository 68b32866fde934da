"""Resolution of interface and type references against the interface model."""

from __future__ import annotations

import logging

from xidl_stub_generator import xidl_types
from xidl_stub_generator.errors import UnknownParentError
from xidl_stub_generator.model import Attribute, Interface, InterfaceModel, Param
from xidl_stub_generator.xidl_types import XidlTypeKind

logger = logging.getLogger(__name__)


def resolve_parent(model: InterfaceModel, interface_name: str, parent_name: str) -> Interface | None:
    """Look up the parent of an interface in the model built so far.

    Interfaces must textually follow their parent, so the lookup only sees
    declarations that precede the interface.

    Args:
        model (InterfaceModel): The model built so far.
        interface_name (str): The name of the interface being declared, for error messages.
        parent_name (str): The value of its `extends` attribute.

    Raises:
        UnknownParentError: If the parent is neither declared nor a sentinel.

    Returns:
        Interface | None: The parent interface, or None for an empty or sentinel parent.
    """
    if not parent_name or parent_name in xidl_types.SENTINEL_PARENTS:
        return None

    parent = model.interfaces.get(parent_name)
    if parent is None:
        raise UnknownParentError(f"Unknown parent interface: {parent_name} for {interface_name}")
    return parent


class TypeResolver:
    """Classifies declared type names and builds the TypeScript expressions that depend on them."""

    def __init__(self, model: InterfaceModel):
        self._model = model

    def classify(self, type_name: str) -> str:
        """Classify a declared type name.

        Args:
            type_name (str): The `type` attribute of a parameter or attribute.

        Returns:
            str: One of the `XidlTypeKind` values.
        """
        if type_name in xidl_types.XIDL_TYPE_TO_TYPESCRIPT:
            return XidlTypeKind.PRIMITIVE

        interface = self._model.interfaces.get(type_name)
        if interface is not None:
            return XidlTypeKind.STRUCT if interface.is_struct else XidlTypeKind.CLASS

        if type_name in self._model.enums:
            return XidlTypeKind.ENUM

        return XidlTypeKind.UNKNOWN

    def is_class_reference(self, value: Param | Attribute) -> bool:
        """Whether values of this type are wrapped object handles."""
        return self.classify(value.type) == XidlTypeKind.CLASS

    def type_hint(self, value: Param | Attribute) -> str:
        """The TypeScript type of a parameter or attribute.

        Unknown names degrade to `any`, since schemas may reference types that are
        defined elsewhere or only on some platforms.
        """
        kind = self.classify(value.type)

        if kind == XidlTypeKind.PRIMITIVE:
            if value.is_array and value.type == "octet":
                return xidl_types.OCTET_ARRAY_TYPE
            base_type = xidl_types.XIDL_TYPE_TO_TYPESCRIPT[value.type]
        elif kind == XidlTypeKind.UNKNOWN:
            logger.debug(f"Type '{value.type}' of '{value.name}' is unknown, falling back to any.")
            base_type = xidl_types.UNKNOWN_TYPESCRIPT_TYPE
        else:
            base_type = value.type

        return f"{base_type}[]" if value.is_array else base_type

    def unwrap(self, param: Param, expression: str) -> str:
        """Build the expression that turns a typed argument into its transport value.

        Args:
            param (Param): The parameter being sent.
            expression (str): The expression holding the typed value.

        Returns:
            str: The expression to put in the argument bag.
        """
        if not self.is_class_reference(param):
            return expression

        if param.is_array:
            return f"{expression} ? {expression}.map((object) => object.__object) : null"
        return f"{expression} ? {expression}.__object : null"

    def wrap(self, param: Param, result_name: str, client_expression: str = "this.__client") -> str:
        """Build the expression that turns a field of a result bag into a typed value.

        Args:
            param (Param): The parameter being received.
            result_name (str): The name of the variable holding the result bag.
            client_expression (str): The expression holding the transport client.

        Returns:
            str: The expression producing the typed value.
        """
        value = f"{result_name}.{param.name}"

        if not self.is_class_reference(param):
            return value

        if param.is_array:
            return f"{value} ? {value}.map((object: string) => new {param.type}({client_expression}, object)) : []"
        return f"{value} ? new {param.type}({client_expression}, {value}) : null"
