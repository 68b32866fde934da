"""Generate a typed TypeScript client out of a parsed XIDL interface model."""

from __future__ import annotations

import logging
import posixpath

from xidl_stub_generator import helper, xidl_types
from xidl_stub_generator.docs import format_doc_comment, param_doc_line, render_doc
from xidl_stub_generator.errors import EmptyOutputError
from xidl_stub_generator.model import Enumeration, Interface, InterfaceModel, Method, ResultCode
from xidl_stub_generator.resolver import TypeResolver

logger = logging.getLogger(__name__)

RESULT_VARIABLE = "__result"
ERROR_CODE_PATTERN = "/rc=0x([0-9a-f]{8})/"


class Writer:
    """A class that handles writing the client source, based on a provided interface model.

    Declarations are accumulated per group and only joined in `dumps`, so the output
    order is always: preamble, enums, interfaces, result codes.
    """

    def __init__(
        self,
        model: InterfaceModel,
        schema_name: str = "VirtualBox.xidl",
        endpoint: str = xidl_types.DEFAULT_ENDPOINT,
        wsdl_path: str = xidl_types.DEFAULT_WSDL_PATH,
    ):
        """Initialize the writer with an interface model.

        Args:
            model (InterfaceModel): The completed model to write a client for.
            schema_name (str): The name of the schema file, mentioned in the generated header.
            endpoint (str): The default SOAP endpoint of the generated `connect` function.
            wsdl_path (str): The WSDL location, relative to the generated file unless absolute.
        """
        self._model = model
        self._resolver = TypeResolver(model)
        self._endpoint = endpoint
        self._wsdl_path = wsdl_path

        self._enum_lines: list[str] = []
        self._interface_lines: list[str] = []
        self._result_lines: list[str] = []

        self.header = f"/* This is an automatically generated client for `{schema_name}`. Do not edit. */"

    def generate_all(self) -> None:
        """Generate every declaration of the model.

        Raises:
            EmptyOutputError: If a declaration group that is expected to be populated is empty.
        """
        if not self._model.enums:
            raise EmptyOutputError("The schema produced no enums.")
        if not self._model.interfaces:
            raise EmptyOutputError("The schema produced no interfaces.")
        if self._model.result_tags_seen and not self._model.results:
            raise EmptyOutputError(
                f"The schema declares {self._model.result_tags_seen} result code(s), but none at the library level."
            )

        for enum in self._model.enums.values():
            self.gen_enum(enum)

        for interface in self._model.interfaces.values():
            if interface.is_struct:
                self.gen_struct(interface)
            else:
                self.gen_class(interface)

        for result in self._model.results.values():
            self.gen_result(result)

        logger.info(
            "Generated %d enum(s), %d interface(s) and %d result code(s).",
            len(self._model.enums),
            len(self._model.interfaces),
            len(self._model.results),
        )

    def gen_enum(self, enum: Enumeration) -> None:
        """Generate a string enum, since enum values travel by name over SOAP."""
        lines = format_doc_comment(render_doc(enum.desc))
        lines.append(f"export enum {enum.name} {{")

        for constant in enum.constants.values():
            member_lines = format_doc_comment(render_doc(constant.desc))
            member_lines.append(f"{helper.property_name(constant.name)} = {helper.string_literal(constant.name)},")
            lines.extend(helper.indent(member_lines))

        lines.append("}")
        self._add_block(self._enum_lines, lines)

    def gen_struct(self, interface: Interface) -> None:
        """Generate a struct-shaped interface as a field-only TypeScript interface."""
        lines = format_doc_comment(render_doc(interface.desc))
        lines.append(f"export interface {interface.name} {{")

        for attribute in interface.attributes:
            field_lines = format_doc_comment(render_doc(attribute.desc))
            field_lines.append(f"{helper.property_name(attribute.name)}: {self._resolver.type_hint(attribute)};")
            lines.extend(helper.indent(field_lines))

        lines.append("}")
        self._add_block(self._interface_lines, lines)

    def gen_class(self, interface: Interface) -> None:
        """Generate a class-shaped interface as a class extending its parent, or the root class."""
        parent_class = interface.parent_name or xidl_types.ROOT_CLASS_NAME

        lines = format_doc_comment(render_doc(interface.desc))
        lines.append(f"export class {interface.name} extends {parent_class} {{")

        for index, method in enumerate(interface.methods):
            if index:
                lines.append("")
            lines.extend(helper.indent(self.gen_method(interface, method)))

        lines.append("}")
        self._add_block(self._interface_lines, lines)

    def gen_method(self, interface: Interface, method: Method) -> list[str]:
        """Generate one method calling the transport.

        Args:
            interface (Interface): The interface owning the method.
            method (Method): The method to generate.

        Returns:
            list[str]: The lines of the method, without class indentation.
        """
        resolver = self._resolver

        arguments = [f"{helper.argument_name(param.name)}: {resolver.type_hint(param)}" for param in method.in_params]

        call_arguments = [
            (param.name, resolver.unwrap(param, helper.argument_name(param.name))) for param in method.in_params
        ]
        if not interface.is_global:
            call_arguments.append((xidl_types.THIS_ARGUMENT_NAME, "this.__object"))

        returnval, outs = method.result_shape()
        if returnval is not None:
            return_type = resolver.type_hint(returnval)
            return_expression = resolver.wrap(returnval, RESULT_VARIABLE)
        elif outs:
            return_type = helper.new_object_type([(param.name, resolver.type_hint(param)) for param in outs])
            return_expression = helper.new_object_literal(
                [(param.name, resolver.wrap(param, RESULT_VARIABLE)) for param in outs]
            )
        else:
            return_type = "null"
            return_expression = None

        param_lines = [
            line
            for line in (param_doc_line(helper.argument_name(param.name), param.desc) for param in method.in_params)
            if line
        ]
        lines = format_doc_comment(render_doc(method.desc), param_lines)

        call_name = helper.string_literal(f"{interface.name}_{method.name}")
        call = f"this.__invoke({call_name}, {helper.new_object_literal(call_arguments)})"

        lines.append(f"async {method.name}({', '.join(arguments)}): Promise<{return_type}> {{")
        if return_expression is None:
            lines.append(f"{helper.INDENT}await {call};")
            lines.append(f"{helper.INDENT}return null;")
        else:
            lines.append(f"{helper.INDENT}const {RESULT_VARIABLE} = await {call};")
            lines.append(f"{helper.INDENT}return {return_expression};")
        lines.append("}")

        return lines

    def gen_result(self, result: ResultCode) -> None:
        """Generate a named constant for a result code."""
        lines = format_doc_comment(render_doc(result.desc))
        lines.append(f"export const {result.name} = {result.value};")
        self._add_block(self._result_lines, lines)

    def _wsdl_expression(self) -> str:
        if posixpath.isabs(self._wsdl_path):
            return helper.string_literal(self._wsdl_path)
        parts = [helper.string_literal(part) for part in self._wsdl_path.split("/") if part]
        return f"path.join({', '.join(['__dirname', *parts])})"

    def preamble(self) -> list[str]:
        """The fixed runtime: the `connect` entry point and the root class with the call primitive.

        Returns:
            list[str]: The preamble lines.
        """
        entry = self._model.global_interface()
        entry_type = entry.name if entry else "any"
        port = f"client.{xidl_types.SOAP_SERVICE_NAME}.{xidl_types.SOAP_PORT_NAME}"
        entry_value = f'new {entry.name}({port}, "")' if entry else port

        return [
            self.header,
            'import * as path from "path";',
            'import * as soap from "soap";',
            "",
            "export const connect = async (",
            f"    endpoint: string = {helper.string_literal(self._endpoint)},",
            f"    wsdl: string = {self._wsdl_expression()},",
            f"): Promise<{entry_type}> => {{",
            "    const client: any = await soap.createClientAsync(wsdl, { endpoint });",
            f"    return {entry_value};",
            "};",
            "",
            f"const errorCodeRegExp = {ERROR_CODE_PATTERN};",
            "",
            f"export class {xidl_types.ROOT_CLASS_NAME} {{",
            "    constructor(",
            "        protected readonly __client: any,",
            "        readonly __object: string,",
            "    ) {}",
            "",
            "    protected __invoke(name: string, args: any): Promise<any> {",
            "        return new Promise((resolve, reject) => {",
            "            this.__client[name](args, (error: any, result: any) => {",
            "                if (error) {",
            "                    const faultString = error.root?.Envelope?.Body?.Fault?.faultstring;",
            "                    if (faultString) {",
            "                        error.message = faultString;",
            "                        const errorCodeMatch = errorCodeRegExp.exec(faultString);",
            "                        if (errorCodeMatch) {",
            "                            error.code = parseInt(errorCodeMatch[1], 16);",
            "                        }",
            "                    }",
            "                    reject(error);",
            "                } else {",
            "                    resolve(result);",
            "                }",
            "            });",
            "        });",
            "    }",
            "}",
        ]

    @staticmethod
    def _add_block(group: list[str], lines: list[str]) -> None:
        if group:
            group.append("")
        group.extend(lines)

    def dumps(self) -> str:
        """Generates the string output of the client source.

        Returns:
            str: The output string.
        """
        out: list[str] = []
        for group in (self.preamble(), self._enum_lines, self._interface_lines, self._result_lines):
            if group:
                out.append("")
                out.extend(group)

        return "\n".join(out[1:]) + "\n"
