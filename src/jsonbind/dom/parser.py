"""HTML fragment parser built on :class:`html.parser.HTMLParser`.

Produces jsonbind nodes. ``<template>`` children are collected into the
template's inert ``content`` fragment, void elements never take children,
and character references in text and attribute values are decoded.
Raw-text elements (``<script>``, ``<style>``) keep their body verbatim.

The parser is lenient in the way authored fragments need: unmatched end
tags are ignored and unclosed elements are closed at end of input.
"""

from __future__ import annotations

from html.parser import HTMLParser

from jsonbind.dom.nodes import (
    Comment,
    DocumentFragment,
    Element,
    ParentNode,
    TemplateElement,
    Text,
)

VOID_ELEMENTS: frozenset[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)


class _TreeBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.root = DocumentFragment()
        # (tag, node receiving children); a template receives into .content
        self._stack: list[tuple[str, ParentNode]] = [("", self.root)]

    @property
    def _current(self) -> ParentNode:
        return self._stack[-1][1]

    def _append(self, node: Text | Comment | Element) -> None:
        self._current.append_child(node)

    def _make_element(self, tag: str, attrs: list[tuple[str, str | None]]) -> Element:
        attributes = {name: value if value is not None else "" for name, value in attrs}
        if tag == "template":
            return TemplateElement(attributes)
        return Element(tag, attributes)

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        element = self._make_element(tag, attrs)
        self._append(element)
        if tag in VOID_ELEMENTS:
            return
        target = element.content if isinstance(element, TemplateElement) else element
        self._stack.append((tag, target))

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._append(self._make_element(tag, attrs))

    def handle_endtag(self, tag: str) -> None:
        for depth in range(len(self._stack) - 1, 0, -1):
            if self._stack[depth][0] == tag:
                del self._stack[depth:]
                return

    def handle_data(self, data: str) -> None:
        current = self._current
        if current.children and isinstance(current.children[-1], Text):
            last = current.children[-1]
            last.data = last.data + data
        else:
            self._append(Text(data))

    def handle_comment(self, data: str) -> None:
        self._append(Comment(data))


def parse_html(source: str) -> DocumentFragment:
    """Parse an HTML fragment into a detached DocumentFragment."""
    builder = _TreeBuilder()
    builder.feed(source)
    builder.close()
    return builder.root
