"""Rendering of schema documentation into comment text."""

from __future__ import annotations

import re

from xidl_stub_generator import xidl_types
from xidl_stub_generator.model import DocContent, DocNode
from xidl_stub_generator.xidl_types import XidlDocTag

# Directives of the schema's own documentation tooling, e.g. "@a name" or "@c true".
AT_MENTION_PATTERN = re.compile(r"\s*@\w+\s*")


def render_doc(content: DocContent) -> str:
    """Flatten documentation content into plain text.

    Markup is stripped and text is kept, except for the few tags that carry
    meaning on their own (links, list items, notes, cross-references).

    Args:
        content (DocContent): Text interleaved with markup nodes.

    Returns:
        str: The flat text.
    """
    return AT_MENTION_PATTERN.sub(" ", _render_content(content))


def _render_content(content: DocContent) -> str:
    return "".join(item if isinstance(item, str) else _render_node(item) for item in content)


def _render_node(node: DocNode) -> str:
    if node.name == XidlDocTag.LINK:
        return node.attributes.get("to", "").lstrip("#")

    if node.name == XidlDocTag.LIST_ITEM:
        return "- " + _render_content(node.children).lstrip()

    if node.name == XidlDocTag.SEE:
        return "See: " + _render_content(node.children)

    if node.name == XidlDocTag.NOTE:
        if node.attributes.get("internal") == xidl_types.FLAG_YES:
            return ""
        return "Note: " + _render_content(node.children)

    if node.name == XidlDocTag.RESULT:
        return f"Error {node.attributes.get('name', '')}: " + _render_content(node.children)

    return _render_content(node.children)


def doc_lines(text: str) -> list[str]:
    """Split flat text into trimmed lines.

    Leading and trailing blank lines are dropped and runs of blank lines collapse into one.
    """
    lines: list[str] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line and (not lines or not lines[-1]):
            continue
        lines.append(line)

    while lines and not lines[-1]:
        lines.pop()

    return lines


def format_doc_comment(text: str, extra_lines: list[str] | None = None) -> list[str]:
    """Build a `/** ... */` comment block.

    Args:
        text (str): The flat documentation text.
        extra_lines (list[str] | None): Tag lines appended after the text, such as `@param` lines.

    Returns:
        list[str]: The comment lines, or an empty list when there is nothing to document.
    """
    lines = doc_lines(text)
    if extra_lines:
        if lines:
            lines.append("")
        lines.extend(extra_lines)

    if not lines:
        return []

    escaped = [line.replace("*/", "*\\/") for line in lines]
    return ["/**", *(f" * {line}" if line else " *" for line in escaped), " */"]


def param_doc_line(name: str, content: DocContent) -> str | None:
    """Build a `@param` line for a documented parameter, or None when it has no documentation."""
    text = " ".join(line for line in doc_lines(render_doc(content)) if line)
    if not text:
        return None
    return f"@param {name} {text}"
