"""Serialize jsonbind nodes back to HTML text.

Output is deterministic: attributes keep insertion order and every value
is double-quoted, so two structurally identical trees serialize to the
same string.
"""

from __future__ import annotations

from html import escape

from jsonbind.dom.nodes import Comment, Element, Node, ParentNode, TemplateElement, Text
from jsonbind.dom.parser import VOID_ELEMENTS

RAW_TEXT_ELEMENTS: frozenset[str] = frozenset({"script", "style"})


def _serialize(node: Node, out: list[str]) -> None:
    if isinstance(node, Text):
        parent = node.parent
        if isinstance(parent, Element) and parent.tag in RAW_TEXT_ELEMENTS:
            out.append(node.data)
        else:
            out.append(escape(node.data, quote=False))
    elif isinstance(node, Comment):
        out.append(f"<!--{node.data}-->")
    elif isinstance(node, Element):
        out.append(f"<{node.tag}")
        for name, value in node.attributes.items():
            out.append(f' {name}="{escape(value, quote=True)}"')
        out.append(">")
        if node.tag in VOID_ELEMENTS:
            return
        if isinstance(node, TemplateElement):
            for child in node.content.children:
                _serialize(child, out)
        for child in node.children:
            _serialize(child, out)
        out.append(f"</{node.tag}>")
    elif isinstance(node, ParentNode):
        for child in node.children:
            _serialize(child, out)


def to_html(node: Node) -> str:
    """Serialize ``node`` including its own tag."""
    out: list[str] = []
    _serialize(node, out)
    return "".join(out)


def inner_html(node: ParentNode) -> str:
    """Serialize the children (or template content) of ``node``."""
    out: list[str] = []
    children = node.content.children if isinstance(node, TemplateElement) else node.children
    for child in children:
        _serialize(child, out)
    return "".join(out)
