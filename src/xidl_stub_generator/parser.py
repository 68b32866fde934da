"""Streaming parser that builds an interface model out of XIDL tag events.

The schema arrives as a linear sequence of open-tag, text and close-tag events.
Every open tag pushes a frame on an explicit stack; a handler registered for the
tag name decides what the tag contributes to the model, or marks it skipped.
Skipping is inherited, so a skipped tag drops its whole subtree while the stack
discipline is kept intact.
"""

from __future__ import annotations

import logging
import xml.sax
import xml.sax.handler
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import IO, Any, override

from xidl_stub_generator import helper, xidl_types
from xidl_stub_generator.errors import InvalidDirectionError, SchemaError, StructInheritanceError
from xidl_stub_generator.model import (
    Attribute,
    DocContent,
    DocNode,
    EnumConstant,
    Enumeration,
    Interface,
    InterfaceModel,
    Method,
    Param,
    ResultCode,
)
from xidl_stub_generator.resolver import resolve_parent
from xidl_stub_generator.xidl_types import ParamDirection, WsmapMode, XidlTag

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass
class Frame:
    """One currently open tag.

    Attributes:
        name: The tag name.
        attributes: The tag attributes.
        skip: Whether this tag and its subtree contribute nothing to the model.
        object: The model entity this tag created, if any.
        content: The documentation list this tag accumulates into, if any.
    """

    name: str
    attributes: dict[str, str] = field(default_factory=dict)
    skip: bool = False
    object: Any = None
    content: DocContent | None = None


class XidlParser:
    """Builds an `InterfaceModel` from open/text/close tag events.

    A parser instance handles exactly one document.
    """

    def __init__(self, target: str = xidl_types.DEFAULT_TARGET):
        """Initialize the parser.

        Args:
            target (str): The transport whose `<if target=...>` sections are kept.
        """
        self.model = InterfaceModel()
        self.target = target
        self._stack: list[Frame] = []

    def open_tag(self, name: str, attributes: Mapping[str, str]) -> None:
        """Handle an open-tag event."""
        parent = self._stack[-1] if self._stack else None
        frame = Frame(name=name, attributes=dict(attributes))

        if parent is not None and parent.skip:
            frame.skip = True

        elif parent is not None and parent.content is not None:
            # Inside documentation, every tag is kept as markup.
            node = DocNode(name=name, attributes=frame.attributes)
            parent.content.append(node)
            frame.content = node.children

        else:
            handler = TAG_HANDLERS.get(name)
            if handler is None:
                logger.debug("Skipping unsupported tag <%s>.", name)
                frame.skip = True
            else:
                handler(self, frame, parent)

        self._stack.append(frame)

    def text(self, content: str) -> None:
        """Handle a text event."""
        if not self._stack:
            return

        frame = self._stack[-1]
        if frame.skip or frame.content is None:
            return

        # The tokenizer may split one run of text into several events.
        if frame.content and isinstance(frame.content[-1], str):
            frame.content[-1] += content
        else:
            frame.content.append(content)

    def close_tag(self, name: str) -> None:
        """Handle a close-tag event."""
        if not self._stack:
            raise SchemaError(f"Unexpected closing tag </{name}>.")

        frame = self._stack.pop()
        if frame.name != name:
            raise SchemaError(f"Closing tag </{name}> does not match <{frame.name}>.")

    def finish(self) -> InterfaceModel:
        """Finish the document.

        Raises:
            SchemaError: If some tags were never closed.

        Returns:
            InterfaceModel: The completed model.
        """
        if self._stack:
            open_tags = ", ".join(f"<{frame.name}>" for frame in self._stack)
            raise SchemaError(f"The schema ended with unclosed tags: {open_tags}.")

        logger.info(
            "Parsed %d enum(s), %d interface(s) and %d result code(s).",
            len(self.model.enums),
            len(self.model.interfaces),
            len(self.model.results),
        )
        return self.model

    def _find_ancestor(self, name: str) -> Frame | None:
        """Find the innermost open frame with the given tag name."""
        for frame in reversed(self._stack):
            if frame.name == name:
                return frame
        return None

    def _enclosing_object(self, name: str) -> Any:
        frame = self._find_ancestor(name)
        return frame.object if frame is not None else None

    # ===== Tag handlers =====

    def _handle_idl(self, frame: Frame, parent: Frame | None) -> None:
        pass

    def _handle_library(self, frame: Frame, parent: Frame | None) -> None:
        frame.skip = parent is None or parent.name != XidlTag.IDL

    def _handle_application(self, frame: Frame, parent: Frame | None) -> None:
        frame.skip = parent is None or parent.name != XidlTag.LIBRARY

    def _handle_if(self, frame: Frame, parent: Frame | None) -> None:
        frame.skip = frame.attributes.get("target") != self.target

    def _handle_interface(self, frame: Frame, parent: Frame | None) -> None:
        attributes = frame.attributes
        name = attributes.get("name", "")
        wsmap = attributes.get("wsmap", WsmapMode.MANAGED)
        extends = attributes.get("extends", "")

        if not name or wsmap == WsmapMode.SUPPRESS:
            logger.debug("Skipping suppressed interface '%s'.", name)
            frame.skip = True
            return

        if name in self.model.interfaces:
            logger.warning(f"Interface '{name}' is declared more than once, ignoring the later declaration.")
            frame.skip = True
            return

        is_struct = wsmap == WsmapMode.STRUCT
        if is_struct and extends:
            raise StructInheritanceError(f"Struct interface {name} cannot extend {extends}")

        parent_interface = resolve_parent(self.model, name, extends)
        if parent_interface is not None and parent_interface.is_struct:
            raise StructInheritanceError(f"Interface {name} cannot extend struct interface {parent_interface.name}")

        interface = Interface(
            name=name,
            parent_name=parent_interface.name if parent_interface else None,
            extends=extends,
            is_global=wsmap == WsmapMode.GLOBAL,
            is_struct=is_struct,
        )
        self.model.interfaces[name] = interface
        frame.object = interface

    def _handle_method(self, frame: Frame, parent: Frame | None) -> None:
        interface: Interface | None = self._enclosing_object(XidlTag.INTERFACE)
        if interface is None or interface.is_struct:
            frame.skip = True
            return

        method = Method(name=frame.attributes.get("name", ""))
        interface.methods.append(method)
        frame.object = method

    def _handle_param(self, frame: Frame, parent: Frame | None) -> None:
        method: Method | None = self._enclosing_object(XidlTag.METHOD)
        if method is None:
            frame.skip = True
            return

        attributes = frame.attributes
        param = Param(
            name=attributes.get("name", ""),
            type=attributes.get("type", ""),
            is_array=attributes.get("safearray") == xidl_types.FLAG_YES,
        )

        direction = attributes.get("dir")
        if direction == ParamDirection.IN:
            method.in_params.append(param)
        elif direction == ParamDirection.OUT:
            method.out_params.append(param)
        elif direction == ParamDirection.RETURN:
            method.returnval = param
        else:
            raise InvalidDirectionError(f"Invalid dir: {direction} for parameter {param.name} of {method.name}")

        frame.object = param

    def _handle_attribute(self, frame: Frame, parent: Frame | None) -> None:
        interface: Interface | None = self._enclosing_object(XidlTag.INTERFACE)
        attributes = frame.attributes
        name = attributes.get("name", "")

        if interface is None or not name or name == xidl_types.EMPTY_INTERFACE_PLACEHOLDER:
            frame.skip = True
            return

        attribute = Attribute(
            name=name,
            type=attributes.get("type", ""),
            is_array=attributes.get("safearray") == xidl_types.FLAG_YES,
            readonly=attributes.get("readonly") == xidl_types.FLAG_YES,
        )
        frame.object = attribute

        if interface.is_struct:
            interface.attributes.append(attribute)
            return

        # Accessors share the attribute documentation, which is captured later.
        suffix = helper.accessor_suffix(name)
        interface.methods.append(
            Method(
                name=f"get{suffix}",
                returnval=Param(name=name, type=attribute.type, is_array=attribute.is_array),
                desc=attribute.desc,
            )
        )
        if not attribute.readonly:
            interface.methods.append(
                Method(
                    name=f"set{suffix}",
                    in_params=[Param(name=name, type=attribute.type, is_array=attribute.is_array)],
                    desc=attribute.desc,
                )
            )

    def _handle_enum(self, frame: Frame, parent: Frame | None) -> None:
        name = frame.attributes.get("name", "")
        if not name:
            frame.skip = True
            return

        if name in self.model.enums:
            logger.warning(f"Enum '{name}' is declared more than once, ignoring the later declaration.")
            frame.skip = True
            return

        enum = Enumeration(name=name)
        self.model.enums[name] = enum
        frame.object = enum

    def _handle_const(self, frame: Frame, parent: Frame | None) -> None:
        enum: Enumeration | None = self._enclosing_object(XidlTag.ENUM)
        name = frame.attributes.get("name", "")
        if enum is None or not name:
            frame.skip = True
            return

        constant = EnumConstant(name=name, value=frame.attributes.get("value", ""))
        enum.constants[name] = constant
        frame.object = constant

    def _handle_result(self, frame: Frame, parent: Frame | None) -> None:
        # Result codes only count at the top level of the library.
        if parent is None or parent.name not in (XidlTag.LIBRARY, XidlTag.APPLICATION):
            frame.skip = True
            return

        self.model.result_tags_seen += 1

        name = frame.attributes.get("name", "")
        result = ResultCode(name=name, value=frame.attributes.get("value", ""))
        self.model.results[name] = result
        frame.object = result

    def _handle_desc(self, frame: Frame, parent: Frame | None) -> None:
        owner = parent.object if parent is not None else None
        if owner is None or not hasattr(owner, "desc"):
            frame.skip = True
            return

        frame.content = owner.desc


TagHandler = Callable[[XidlParser, Frame, Frame | None], None]

TAG_HANDLERS: dict[str, TagHandler] = {
    XidlTag.IDL: XidlParser._handle_idl,
    XidlTag.LIBRARY: XidlParser._handle_library,
    XidlTag.APPLICATION: XidlParser._handle_application,
    XidlTag.IF: XidlParser._handle_if,
    XidlTag.INTERFACE: XidlParser._handle_interface,
    XidlTag.METHOD: XidlParser._handle_method,
    XidlTag.PARAM: XidlParser._handle_param,
    XidlTag.ATTRIBUTE: XidlParser._handle_attribute,
    XidlTag.ENUM: XidlParser._handle_enum,
    XidlTag.CONST: XidlParser._handle_const,
    XidlTag.RESULT: XidlParser._handle_result,
    XidlTag.DESC: XidlParser._handle_desc,
}


class XidlContentHandler(xml.sax.handler.ContentHandler):
    """Forwards SAX events to an `XidlParser`."""

    def __init__(self, parser: XidlParser):
        super().__init__()
        self._parser = parser

    @override
    def startElement(self, name, attrs):
        self._parser.open_tag(name, dict(attrs.items()))

    @override
    def endElement(self, name):
        self._parser.close_tag(name)

    @override
    def characters(self, content):
        self._parser.text(content)


def parse_schema(
    stream: IO[bytes],
    target: str = xidl_types.DEFAULT_TARGET,
    chunk_size: int = CHUNK_SIZE,
) -> InterfaceModel:
    """Parse a schema, feeding the tokenizer chunk by chunk.

    Args:
        stream (IO[bytes]): The schema document.
        target (str): The transport whose `<if target=...>` sections are kept.
        chunk_size (int): The number of bytes read per chunk.

    Raises:
        SchemaError: If the schema structure cannot be compiled.
        xml.sax.SAXParseException: If the document is not well-formed XML.

    Returns:
        InterfaceModel: The completed model.
    """
    parser = XidlParser(target=target)

    reader = xml.sax.make_parser()
    reader.setFeature(xml.sax.handler.feature_namespaces, False)
    reader.setFeature(xml.sax.handler.feature_external_ges, False)
    reader.setContentHandler(XidlContentHandler(parser))

    while chunk := stream.read(chunk_size):
        reader.feed(chunk)
    reader.close()

    return parser.finish()
