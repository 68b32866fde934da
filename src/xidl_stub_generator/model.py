"""In-memory model of a parsed XIDL schema."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from xidl_stub_generator.xidl_types import RETURN_SLOT_NAME


@dataclass
class DocNode:
    """A markup tag found inside a `desc` block."""

    name: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: DocContent = field(default_factory=list)


# Documentation is kept as mixed content: plain text interleaved with markup nodes.
DocContent = list[str | DocNode]


@dataclass
class Param:
    """A method parameter, or the value slot of an attribute accessor."""

    name: str
    type: str
    is_array: bool = False
    desc: DocContent = field(default_factory=list)

    def as_return_slot(self) -> Param:
        """A copy of this parameter keyed by the slot name the transport uses for return values."""
        return replace(self, name=RETURN_SLOT_NAME)


@dataclass
class Method:
    """A remotely callable method.

    Attributes:
        name: The method name, unique within its interface.
        in_params: Parameters sent to the remote side, in declaration order.
        out_params: Parameters received from the remote side, in declaration order.
        returnval: The return parameter, if any.
        desc: The documentation of the method.
    """

    name: str
    in_params: list[Param] = field(default_factory=list)
    out_params: list[Param] = field(default_factory=list)
    returnval: Param | None = None
    desc: DocContent = field(default_factory=list)

    def result_shape(self) -> tuple[Param | None, list[Param]]:
        """Normalize the success values of this method.

        The return value always travels in the `returnval` slot. When the method also
        has out parameters it is folded into them, so that callers see a single value.

        Returns:
            A `(returnval, outs)` pair where at most one side is populated.
        """
        returnval = self.returnval.as_return_slot() if self.returnval else None
        if returnval and self.out_params:
            return None, [*self.out_params, returnval]
        return returnval, list(self.out_params)


@dataclass
class Attribute:
    """A declared attribute: a struct field, or the source of a getter/setter pair."""

    name: str
    type: str
    is_array: bool = False
    readonly: bool = False
    desc: DocContent = field(default_factory=list)


@dataclass
class Interface:
    """A class-shaped or struct-shaped interface.

    Attributes:
        name: The interface name, unique within the schema.
        parent_name: The name of the declared parent interface, or None when there is
            no parent or the parent is a sentinel.
        extends: The raw value of the `extends` attribute.
        is_global: Whether methods are invoked without a `_this` handle.
        is_struct: Whether this interface is a plain data shape.
        methods: Methods of a class-shaped interface.
        attributes: Fields of a struct-shaped interface.
        desc: The documentation of the interface.
    """

    name: str
    parent_name: str | None = None
    extends: str = ""
    is_global: bool = False
    is_struct: bool = False
    methods: list[Method] = field(default_factory=list)
    attributes: list[Attribute] = field(default_factory=list)
    desc: DocContent = field(default_factory=list)


@dataclass
class EnumConstant:
    """A named constant of an enumeration."""

    name: str
    value: str
    desc: DocContent = field(default_factory=list)


@dataclass
class Enumeration:
    """An enumeration with its constants in declaration order."""

    name: str
    constants: dict[str, EnumConstant] = field(default_factory=dict)
    desc: DocContent = field(default_factory=list)


@dataclass
class ResultCode:
    """A named result code declared at the top level of the library."""

    name: str
    value: str
    desc: DocContent = field(default_factory=list)


@dataclass
class InterfaceModel:
    """Everything the writer needs, keyed by declared name in document order.

    Attributes:
        interfaces: Class-shaped and struct-shaped interfaces.
        enums: Enumerations.
        results: Result codes.
        result_tags_seen: Number of `result` tags found directly under the library or
            application section. Nested `result` tags are dropped and not counted.
    """

    interfaces: dict[str, Interface] = field(default_factory=dict)
    enums: dict[str, Enumeration] = field(default_factory=dict)
    results: dict[str, ResultCode] = field(default_factory=dict)
    result_tags_seen: int = 0

    def class_interfaces(self) -> list[Interface]:
        """Interfaces that are emitted as classes."""
        return [interface for interface in self.interfaces.values() if not interface.is_struct]

    def global_interface(self) -> Interface | None:
        """The first global interface, which serves as the entry point of the client."""
        for interface in self.class_interfaces():
            if interface.is_global:
                return interface
        return None
