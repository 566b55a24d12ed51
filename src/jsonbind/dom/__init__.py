"""Minimal observable document tree consumed by the binding engine."""

from jsonbind.dom.document import MAX_FLUSH_ROUNDS, Document, MutationObserver
from jsonbind.dom.nodes import (
    Comment,
    DocumentFragment,
    Element,
    MutationRecord,
    Node,
    ParentNode,
    TemplateElement,
    Text,
)
from jsonbind.dom.parser import VOID_ELEMENTS, parse_html
from jsonbind.dom.serializer import inner_html, to_html
from jsonbind.dom.visitor import NodeVisitor

__all__ = [
    "MAX_FLUSH_ROUNDS",
    "VOID_ELEMENTS",
    "Comment",
    "Document",
    "DocumentFragment",
    "Element",
    "MutationObserver",
    "MutationRecord",
    "Node",
    "NodeVisitor",
    "ParentNode",
    "TemplateElement",
    "Text",
    "inner_html",
    "parse_html",
    "to_html",
]
