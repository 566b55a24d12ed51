"""Pytest configuration and fixtures for jsonbind tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from jsonbind import Document, Element, JsonTemplate, TemplateElement, to_html


def build_page(
    data: Any,
    template: str,
    *,
    source_id: str = "data",
    container_id: str = "out",
    container_attrs: str = "",
    raw: str | None = None,
) -> Document:
    """Build a document with one JSON source and one bound container.

    Args:
        data: Value serialized into the source element
        template: Markup placed inside the authoring ``<template>``
        source_id: Id of the ``<script>`` source element
        container_id: Id of the container ``<div>``
        container_attrs: Extra attribute text for the container
        raw: Source text used verbatim instead of ``json.dumps(data)``
    """
    text = raw if raw is not None else json.dumps(data)
    return Document.from_html(
        f'<script type="application/json" id="{source_id}">{text}</script>'
        f'<div id="{container_id}" json-template-for="{source_id}"{container_attrs}>'
        f"<template>{template}</template></div>"
    )


def rendered(container: Element, template: TemplateElement | None = None) -> str:
    """Serialize every child of ``container`` except the authoring template.

    Output is always inserted before the authoring template, so without an
    explicit ``template`` the last direct-child template is the one left out.
    Rendered copies of top-level array markers are kept.
    """
    if template is None:
        templates = [c for c in container.children if isinstance(c, TemplateElement)]
        template = templates[-1] if templates else None
    return "".join(to_html(node) for node in container.children if node is not template)


def set_source(document: Document, data: Any, source_id: str = "data") -> int:
    """Replace the source text and deliver the resulting mutations."""
    source = document.get_element_by_id(source_id)
    assert source is not None
    source.text_content = data if isinstance(data, str) else json.dumps(data)
    return document.flush_mutations()


@pytest.fixture
def bind() -> Iterator[Callable[..., tuple[Document, JsonTemplate]]]:
    """Factory: build a page, connect its container, return both."""
    bindings: list[JsonTemplate] = []

    def _bind(data: Any, template: str, **kwargs: Any) -> tuple[Document, JsonTemplate]:
        document = build_page(data, template, **kwargs)
        container = document.get_element_by_id(kwargs.get("container_id", "out"))
        assert container is not None
        binding = JsonTemplate(container)
        binding.connect()
        bindings.append(binding)
        return document, binding

    yield _bind
    for binding in bindings:
        binding.disconnect()


@pytest.fixture
def render() -> Callable[..., str]:
    """Factory: render ``template`` against ``data`` once and return the output."""

    def _render(data: Any, template: str, **kwargs: Any) -> str:
        document = build_page(data, template, **kwargs)
        container = document.get_element_by_id(kwargs.get("container_id", "out"))
        assert container is not None
        with JsonTemplate(container):
            return rendered(container)

    return _render
