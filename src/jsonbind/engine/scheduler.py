"""Render passes and the atomic swap of rendered output.

A pass is all-or-nothing: the new output is built off-tree in a
DocumentFragment, and only when it is complete is it inserted before the
authoring template and the previous pass's nodes removed.
The authoring template itself is never cloned away, moved or edited.
"""

from __future__ import annotations

import logging
from typing import Any

from jsonbind.dom.nodes import DocumentFragment, Element, Node, TemplateElement
from jsonbind.engine.arrays import ArrayRenderer, SliceSpec
from jsonbind.engine.interpolate import Interpolator
from jsonbind.environment.config import DEFAULT_CONFIG, BindingConfig
from jsonbind.environment.exceptions import (
    BindingError,
    ErrorCode,
    TemplateNotFoundError,
    report,
)
from jsonbind.render_context import render_context

logger = logging.getLogger(__name__)


def render_fragment(
    template: TemplateElement,
    data: Any,
    *,
    slice_spec: SliceSpec | None = None,
    config: BindingConfig = DEFAULT_CONFIG,
) -> DocumentFragment:
    """Render ``template`` against ``data`` into a new, detached fragment.

    A list ``data`` renders the template once per element (root-array mode,
    ``slice_spec`` applies); anything else renders it once with ``data`` as
    the context.
    """
    arrays = ArrayRenderer(config)
    if isinstance(data, list):
        return arrays.render_items(template.content, data, slice_spec)
    clone = template.content.clone(deep=True)
    Interpolator(data, arrays).visit(clone)
    return clone


def describe_element(element: Element) -> str:
    if element.id:
        return f'<{element.tag} id="{element.id}">'
    return f"<{element.tag}>"


class RenderScheduler:
    """Owns a container's authoring template and its rendered siblings.

    Attributes:
        container: Element whose direct-child template is rendered
        config: Attribute names and limits
        render_count: Completed passes
    """

    def __init__(self, container: Element, *, config: BindingConfig = DEFAULT_CONFIG) -> None:
        self.container = container
        self.config = config
        self.render_count = 0
        self._template: TemplateElement | None = None
        self._rendered: list[Node] = []
        self._rendering = False

    @property
    def template(self) -> TemplateElement | None:
        return self._template

    @property
    def rendered(self) -> tuple[Node, ...]:
        """Nodes inserted by the most recent pass."""
        return tuple(self._rendered)

    def locate_template(self) -> TemplateElement | None:
        """Find and cache the direct-child authoring template.

        A cached template still in the container is kept. Marker copies left
        by the previous pass are not candidates. A missing template is
        reported; when several exist the first one is used and a warning is
        logged.
        """
        if self._template is not None and self._template.parent is self.container:
            return self._template
        own = {id(node) for node in self._rendered}
        templates = [
            c
            for c in self.container.children
            if isinstance(c, TemplateElement) and id(c) not in own
        ]
        if not templates:
            report(
                logger,
                TemplateNotFoundError(describe_element(self.container)),
                prefix=self.config.log_prefix,
            )
            self._template = None
            return None
        if len(templates) > 1:
            warning = BindingError(
                f"{len(templates)} <template> children in {describe_element(self.container)}; "
                "using the first",
                code=ErrorCode.MULTIPLE_TEMPLATES,
            )
            report(logger, warning, level=logging.WARNING, prefix=self.config.log_prefix)
        self._template = templates[0]
        return self._template

    def render(self, data: Any, *, source_id: str | None = None) -> bool:
        """Run one full pass for ``data``.

        Returns:
            True if new output was swapped in. False when the template is
            missing or a pass is already running.
        """
        if self._rendering:
            logger.debug("%s render requested during a pass; ignored", self.config.log_prefix)
            return False

        template = self._template
        if template is None or template.parent is not self.container:
            report(
                logger,
                TemplateNotFoundError(describe_element(self.container)),
                prefix=self.config.log_prefix,
            )
            return False

        self._rendering = True
        try:
            with render_context(
                container_id=self.container.id,
                source_id=source_id,
                max_depth=self.config.max_array_depth,
            ) as ctx:
                arrays = ArrayRenderer(self.config)
                slice_spec = arrays.read_slice(self.container.get_attribute(self.config.slice_attr))
                fragment = render_fragment(
                    template, data, slice_spec=slice_spec, config=self.config
                )
            self._swap(template, fragment)
        finally:
            self._rendering = False

        self.render_count += 1
        logger.debug(
            "%s rendered %s (%d item fragments, pass %d)",
            self.config.log_prefix,
            ctx.describe(),
            ctx.items_rendered,
            self.render_count,
        )
        return True

    def _swap(self, template: TemplateElement, fragment: DocumentFragment) -> None:
        new_nodes = list(fragment.children)
        previous = self._rendered
        self.container.insert_before(fragment, template)
        for node in previous:
            if node.parent is self.container:
                self.container.remove_child(node)
        self._rendered = new_nodes

    def clear(self) -> None:
        """Remove the most recent pass's output, keeping the template."""
        for node in self._rendered:
            if node.parent is self.container:
                self.container.remove_child(node)
        self._rendered = []
