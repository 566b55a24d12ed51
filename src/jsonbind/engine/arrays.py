"""Array rendering: one clone of an item fragment per list element.

A fragment is array-bound in two ways:

1. Root-array mode: the container's data is itself a list, so the whole
   authoring template is the item fragment.
2. Nested marker: ``<template data-array="path">`` inside a clone names a
   list relative to the current context.

Inside each item clone the context is replaced by that element; nothing
from the enclosing context is visible. An empty (or sliced-to-empty) list
renders the item fragment once against ``{}`` so that fallbacks such as
``{name || "Nobody yet"}`` can show a placeholder.

Slices follow Python slice semantics and accept ``start:end``,
``start:``, ``:end`` or a bare ``start``:

    "1:3"  → items 1 and 2
    "-2:"  → last two items
    "-1"   → last item
    "10:20" on a short list → nothing (then the ``{}`` placeholder)

"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from jsonbind.dom.nodes import DocumentFragment, TemplateElement
from jsonbind.engine.interpolate import Interpolator
from jsonbind.engine.paths import resolve_path
from jsonbind.engine.values import UNDEFINED
from jsonbind.environment.config import DEFAULT_CONFIG, BindingConfig
from jsonbind.environment.exceptions import (
    ArrayDepthError,
    ArrayMarkerTypeError,
    SliceSyntaxError,
    report,
)
from jsonbind.render_context import get_render_context

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SliceSpec:
    """Optional ``[start:end]`` bounds; negative values count from the end."""

    start: int | None = None
    end: int | None = None

    def apply(self, items: Sequence[Any]) -> list[Any]:
        return list(items[self.start : self.end])


def _parse_bound(text: str, original: str) -> int | None:
    text = text.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        raise SliceSyntaxError(original) from None


def parse_slice(text: str | None) -> SliceSpec | None:
    """Parse slice attribute text.

    Returns:
        A SliceSpec, or None when ``text`` is missing or blank.

    Raises:
        SliceSyntaxError: If a bound is not an integer.
    """
    if text is None or not text.strip():
        return None
    if ":" not in text:
        return SliceSpec(start=_parse_bound(text, text))
    start, _, end = text.partition(":")
    if ":" in end:
        raise SliceSyntaxError(text)
    return SliceSpec(_parse_bound(start, text), _parse_bound(end, text))


class ArrayRenderer:
    """Expands array-bound fragments.

    Stateless apart from its configuration; one instance serves a whole
    render pass, including every nested marker.
    """

    def __init__(self, config: BindingConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def is_marker(self, node: TemplateElement) -> bool:
        return node.has_attribute(self.config.array_attr)

    def read_slice(self, text: str | None) -> SliceSpec | None:
        """Parse slice text, reporting (and ignoring) invalid input."""
        try:
            return parse_slice(text)
        except SliceSyntaxError as exc:
            report(logger, exc, level=logging.WARNING, prefix=self.config.log_prefix)
            return None

    def render_items(
        self,
        fragment: DocumentFragment,
        items: Sequence[Any],
        slice_spec: SliceSpec | None = None,
    ) -> DocumentFragment:
        """Clone ``fragment`` once per (sliced) item into a new fragment."""
        selected = slice_spec.apply(items) if slice_spec else list(items)
        contexts: list[Any] = selected if selected else [{}]

        ctx = get_render_context()
        output = DocumentFragment()
        for item in contexts:
            clone = fragment.clone(deep=True)
            Interpolator(item, self).visit(clone)
            output.append_child(clone)
            if ctx is not None:
                ctx.items_rendered += 1
        return output

    def render_marker(self, marker: TemplateElement, context: Any) -> None:
        """Render a nested marker's items just before the marker itself.

        The marker stays in place. A path resolving to something other than
        a list is reported and renders nothing; a missing path renders like
        an empty list.
        """
        path = marker.get_attribute(self.config.array_attr) or ""
        value = resolve_path(context, path)
        if value is UNDEFINED:
            value = []
        elif not isinstance(value, list):
            report(logger, ArrayMarkerTypeError(path, value), prefix=self.config.log_prefix)
            return

        parent = marker.parent
        if parent is None:
            return

        slice_spec = self.read_slice(marker.get_attribute(self.config.array_slice_attr))
        ctx = get_render_context()
        if ctx is None:
            rendered = self.render_items(marker.content, value, slice_spec)
        else:
            try:
                with ctx.enter_marker(path):
                    rendered = self.render_items(marker.content, value, slice_spec)
            except ArrayDepthError as exc:
                report(logger, exc, prefix=self.config.log_prefix)
                return
        parent.insert_before(rendered, marker)
