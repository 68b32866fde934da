"""Types and constants that are common in XIDL schemas."""

from __future__ import annotations

XIDL_TYPE_TO_TYPESCRIPT = {
    "$unknown": "string",
    "wstring": "string",
    "uuid": "string",
    "boolean": "boolean",
    "octet": "number",
    "short": "number",
    "unsigned short": "number",
    "long": "number",
    "unsigned long": "number",
    "long long": "number",
    "unsigned long long": "number",
    "float": "number",
    "double": "number",
}

# Byte arrays travel as base64 text over SOAP.
OCTET_ARRAY_TYPE = "string"

UNKNOWN_TYPESCRIPT_TYPE = "any"

# Parent names that are accepted without being declared in the schema.
SENTINEL_PARENTS = frozenset({"$unknown", "$errorinfo"})

# Exists only to keep MIDL from rejecting empty interfaces.
EMPTY_INTERFACE_PLACEHOLDER = "midlDoesNotLikeEmptyInterfaces"

RETURN_SLOT_NAME = "returnval"
THIS_ARGUMENT_NAME = "_this"
ROOT_CLASS_NAME = "RootClass"

DEFAULT_TARGET = "wsdl"
DEFAULT_ENDPOINT = "http://localhost:18083"
DEFAULT_WSDL_PATH = "sdk-files/vboxwebService.wsdl"
SOAP_SERVICE_NAME = "vboxService"
SOAP_PORT_NAME = "vboxServicePort"

FLAG_YES = "yes"


class XidlTag:
    """Tag names of the XIDL vocabulary."""

    IDL = "idl"
    LIBRARY = "library"
    APPLICATION = "application"
    IF = "if"
    INTERFACE = "interface"
    METHOD = "method"
    PARAM = "param"
    ATTRIBUTE = "attribute"
    ENUM = "enum"
    CONST = "const"
    RESULT = "result"
    DESC = "desc"


class XidlDocTag:
    """Markup tags with a dedicated rendering inside documentation."""

    LINK = "link"
    LIST_ITEM = "li"
    SEE = "see"
    NOTE = "note"
    RESULT = "result"


class WsmapMode:
    """Values of the `wsmap` attribute of an interface."""

    SUPPRESS = "suppress"
    STRUCT = "struct"
    GLOBAL = "global"
    MANAGED = "managed"


class ParamDirection:
    """Values of the `dir` attribute of a method parameter."""

    IN = "in"
    OUT = "out"
    RETURN = "return"


class XidlTypeKind:
    """Kinds a declared type name resolves to."""

    PRIMITIVE = "primitive"
    CLASS = "class"
    STRUCT = "struct"
    ENUM = "enum"
    UNKNOWN = "unknown"
