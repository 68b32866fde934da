"""Tests for the streaming structural parser.

Tests cover:
- Pruning of unsupported tags and non-matching transport sections
- Interface shapes (suppress, struct, global) and parent resolution
- Parameter directions and attribute expansion
- Placement rules of result codes
- Documentation capture
"""

from __future__ import annotations

import xml.sax

import pytest
from conftest import MINIMAL_ENUM, VBOX_SCHEMA, library_schema, parse_text

from xidl_stub_generator.errors import InvalidDirectionError, SchemaError, StructInheritanceError, UnknownParentError
from xidl_stub_generator.model import DocNode
from xidl_stub_generator.parser import XidlParser, parse_schema


def test_events_build_model_without_tokenizer():
    """The parser can be driven by raw events."""
    parser = XidlParser()
    parser.open_tag("idl", {})
    parser.open_tag("library", {"name": "Test"})
    parser.open_tag("interface", {"name": "IFoo", "extends": "$unknown"})
    parser.open_tag("method", {"name": "bar"})
    parser.open_tag("param", {"name": "x", "type": "long", "dir": "in"})
    parser.close_tag("param")
    parser.close_tag("method")
    parser.close_tag("interface")
    parser.close_tag("library")
    parser.close_tag("idl")

    model = parser.finish()

    method = model.interfaces["IFoo"].methods[0]
    assert method.name == "bar"
    assert [param.name for param in method.in_params] == ["x"]


def test_unclosed_tags_fail():
    parser = XidlParser()
    parser.open_tag("idl", {})

    with pytest.raises(SchemaError, match="unclosed"):
        parser.finish()


def test_mismatched_close_tag_fails():
    parser = XidlParser()
    parser.open_tag("idl", {})

    with pytest.raises(SchemaError, match="does not match"):
        parser.close_tag("library")


def test_vbox_subset_declarations(vbox_model):
    """Declarations are collected in document order, without suppressed or foreign sections."""
    assert list(vbox_model.enums) == ["LockType", "MachineState"]
    assert list(vbox_model.interfaces) == [
        "IVirtualBoxErrorInfo",
        "IGuestOSType",
        "IMedium",
        "IProgress",
        "IMachine",
        "ISession",
        "IVirtualBox",
        "IWebsessionManager",
        "IEvent",
        "IMachineEvent",
    ]
    assert list(vbox_model.results) == ["VBOX_E_OBJECT_NOT_FOUND", "VBOX_E_INVALID_VM_STATE"]


def test_if_sections_follow_target(vbox_model):
    machine = vbox_model.interfaces["IMachine"]
    method_names = [method.name for method in machine.methods]

    assert "saveSettings" in method_names
    assert "xpcomOnly" not in method_names
    assert "IMidlOnly" not in vbox_model.interfaces


def test_if_sections_with_other_target():
    model = parse_text(
        library_schema(
            MINIMAL_ENUM
            + '<if target="xpidl"><interface name="IXpcom" extends="$unknown"/></if>'
            + '<if target="wsdl"><interface name="IWsdl" extends="$unknown"/></if>'
        ),
        target="xpidl",
    )

    assert list(model.interfaces) == ["IXpcom"]


def test_unknown_tags_prune_subtree(vbox_model):
    machine = vbox_model.interfaces["IMachine"]

    assert "hidden" not in [method.name for method in machine.methods]


def test_unknown_root_prunes_document():
    model = parse_text('<?xml version="1.0" ?><root><library><enum name="E"/></library></root>')

    assert model.enums == {}


def test_global_and_struct_interfaces(vbox_model):
    assert vbox_model.interfaces["IWebsessionManager"].is_global
    assert not vbox_model.interfaces["IMachine"].is_global

    struct = vbox_model.interfaces["IGuestOSType"]
    assert struct.is_struct
    assert [attribute.name for attribute in struct.attributes] == ["familyId", "is64Bit", "recommendedRAM"]
    assert struct.methods == []


def test_parent_resolution(vbox_model):
    assert vbox_model.interfaces["IMachineEvent"].parent_name == "IEvent"
    assert vbox_model.interfaces["IMachine"].parent_name is None
    assert vbox_model.interfaces["IVirtualBoxErrorInfo"].parent_name is None
    assert vbox_model.interfaces["IVirtualBoxErrorInfo"].extends == "$errorinfo"


def test_unknown_parent_fails():
    with pytest.raises(UnknownParentError, match="Unknown parent interface: IMissing for IChild"):
        parse_text(library_schema('<interface name="IChild" extends="IMissing"/>'))


def test_parent_must_precede_child():
    schema = library_schema('<interface name="IChild" extends="IParent"/><interface name="IParent" extends="$unknown"/>')

    with pytest.raises(UnknownParentError):
        parse_text(schema)


def test_suppressed_parent_is_unknown():
    schema = library_schema(
        '<interface name="IHidden" extends="$unknown" wsmap="suppress"/><interface name="IChild" extends="IHidden"/>'
    )

    with pytest.raises(UnknownParentError):
        parse_text(schema)


def test_struct_with_parent_fails():
    with pytest.raises(StructInheritanceError):
        parse_text(library_schema('<interface name="IData" extends="$unknown" wsmap="struct"/>'))


def test_class_extending_struct_fails():
    schema = library_schema(
        '<interface name="IData" wsmap="struct"><attribute name="id" type="uuid"/></interface>'
        '<interface name="IFoo" extends="IData"/>'
    )

    with pytest.raises(StructInheritanceError, match="IFoo cannot extend struct interface IData"):
        parse_text(schema)


def test_duplicate_interface_keeps_first_declaration(caplog):
    schema = library_schema(
        MINIMAL_ENUM
        + '<interface name="IFoo" extends="$unknown"><method name="first"/></interface>'
        + '<interface name="IFoo" extends="$unknown"><method name="second"/></interface>'
    )

    model = parse_text(schema)

    assert [method.name for method in model.interfaces["IFoo"].methods] == ["first"]
    assert "declared more than once" in caplog.text


def test_param_directions(vbox_model):
    methods = {method.name: method for method in vbox_model.interfaces["IMachine"].methods}

    info = methods["querySavedGuestScreenInfo"]
    assert [param.name for param in info.in_params] == ["screenId"]
    assert [param.name for param in info.out_params] == ["width", "height"]
    assert info.returnval is not None and info.returnval.name == "enabled"

    unregister = methods["unregister"]
    assert unregister.returnval is not None
    assert unregister.returnval.is_array
    assert unregister.returnval.type == "IMedium"


def test_invalid_direction_fails():
    schema = library_schema(
        '<interface name="IFoo" extends="$unknown"><method name="bar">'
        '<param name="x" type="long" dir="inout"/></method></interface>'
    )

    with pytest.raises(InvalidDirectionError, match="Invalid dir: inout"):
        parse_text(schema)


def test_readonly_attribute_expands_to_getter(vbox_model):
    names = [method.name for method in vbox_model.interfaces["IMedium"].methods]

    assert names == ["getId", "getDescription", "setDescription"]


def test_attribute_accessor_shapes(vbox_model):
    methods = {method.name: method for method in vbox_model.interfaces["IMedium"].methods}

    getter = methods["getDescription"]
    assert getter.in_params == []
    assert getter.returnval is not None and getter.returnval.name == "description"

    setter = methods["setDescription"]
    assert [param.name for param in setter.in_params] == ["description"]
    assert setter.returnval is None


def test_empty_interface_placeholder_is_dropped(vbox_model):
    names = [method.name for method in vbox_model.interfaces["IMachine"].methods]

    assert "getMidlDoesNotLikeEmptyInterfaces" not in names
    assert names[:3] == ["getName", "setName", "getState"]


def test_nested_results_are_discarded(vbox_model):
    assert "VBOX_E_NESTED_RESULT" not in vbox_model.results
    assert vbox_model.result_tags_seen == 2


def test_result_value_and_doc(vbox_model):
    result = vbox_model.results["VBOX_E_OBJECT_NOT_FOUND"]

    assert result.value == "0x80BB0001"
    assert "".join(item for item in result.desc if isinstance(item, str)).strip() == (
        "Object corresponding to the supplied arguments does not exist."
    )


def test_enum_constants(vbox_model):
    lock_type = vbox_model.enums["LockType"]

    assert list(lock_type.constants) == ["Null", "Shared", "Write"]
    assert lock_type.constants["Write"].value == "2"


def test_documentation_keeps_markup_order(vbox_model):
    desc = vbox_model.enums["LockType"].desc

    assert desc[0] == "Used in "
    assert isinstance(desc[1], DocNode)
    assert desc[1].name == "link"
    assert desc[1].attributes == {"to": "#IMachine::lockMachine"}
    assert desc[2] == " to specify the lock type."


def test_nested_markup_is_captured(vbox_model):
    desc = vbox_model.interfaces["IMachine"].desc
    nodes = [item for item in desc if isinstance(item, DocNode)]

    assert [node.name for node in nodes] == ["note", "see"]
    assert nodes[0].children == ["Implementation detail."]
    see_link = nodes[1].children[0]
    assert isinstance(see_link, DocNode) and see_link.name == "link"


def test_result_markup_in_documentation_is_not_a_result_code(vbox_model):
    lock_machine = vbox_model.interfaces["IMachine"].methods[3]

    assert lock_machine.name == "lockMachine"
    assert any(isinstance(item, DocNode) and item.name == "result" for item in lock_machine.desc)
    assert "Machine is not registered." not in vbox_model.results


def test_attribute_documentation_is_shared_by_accessors(vbox_model):
    methods = {method.name: method for method in vbox_model.interfaces["IMachine"].methods}

    assert methods["getName"].desc
    assert methods["getName"].desc is methods["setName"].desc


def test_param_documentation(vbox_model):
    methods = {method.name: method for method in vbox_model.interfaces["IMachine"].methods}
    session = methods["lockMachine"].in_params[0]

    assert session.desc == ["Session object for which the machine will be locked."]


def test_documentation_without_owner_is_skipped():
    parser = XidlParser()
    parser.open_tag("idl", {})
    parser.open_tag("desc", {})
    parser.text("Nothing to attach this to.")
    parser.open_tag("link", {"to": "#IFoo"})

    assert parser._stack[1].skip
    assert parser._stack[2].skip
    assert parser._stack[2].content is None


def test_malformed_xml_propagates():
    with pytest.raises(xml.sax.SAXParseException):
        parse_text("<idl><library></idl>")


def test_small_chunks_give_same_model(vbox_model):
    with open(VBOX_SCHEMA, "rb") as schema_file:
        model = parse_schema(schema_file, chunk_size=7)

    assert model == vbox_model
