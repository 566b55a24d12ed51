"""JsonTemplate: one bound container.

Wires a :class:`DataSource` to a :class:`RenderScheduler` for a container
element and exposes the lifecycle pair::

    doc = Document.from_html(page)
    binding = JsonTemplate(doc.get_element_by_id("people"))
    binding.connect()          # initial render + subscription
    source.text_content = ...  # edit the data
    doc.flush_mutations()      # re-render
    binding.disconnect()

Setup problems (no ``json-template-for``, unknown source id, no direct-child
``<template>``) are logged and leave the container permanently inert: later
calls to ``connect()`` return False without looking again. Nothing raised
while rendering escapes a public method.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

from jsonbind.dom.document import Document
from jsonbind.dom.nodes import Element
from jsonbind.engine.scheduler import RenderScheduler, describe_element
from jsonbind.engine.source import DataSource
from jsonbind.environment.config import DEFAULT_CONFIG, BindingConfig
from jsonbind.environment.exceptions import (
    BindingError,
    ConfigurationError,
    ErrorCode,
    report,
)

logger = logging.getLogger(__name__)


class JsonTemplate:
    """Reactive JSON-to-template binding for one container element.

    Attributes:
        container: Element holding the authoring ``<template>``
        document: Document used to look up the data source
        config: Attribute names and limits
        scheduler: Render scheduler owning the template and its output
    """

    def __init__(
        self,
        container: Element,
        document: Document | None = None,
        *,
        config: BindingConfig = DEFAULT_CONFIG,
    ) -> None:
        self.container = container
        self.document = document
        self.config = config
        self.scheduler = RenderScheduler(container, config=config)
        self._source: DataSource | None = None
        self._inert = False

    @property
    def source(self) -> DataSource | None:
        return self._source

    @property
    def connected(self) -> bool:
        return self._source is not None and self._source.subscribed

    @property
    def inert(self) -> bool:
        """Whether setup failed. An inert binding never connects."""
        return self._inert

    def connect(self) -> bool:
        """Validate the container, render once and start watching the source.

        Returns:
            True if the binding is live. Calling it again while connected is
            a no-op that returns True; after a setup failure it returns False.
        """
        if self.connected:
            return True
        if self._inert:
            logger.debug(
                "%s %s is inert; not connecting",
                self.config.log_prefix,
                describe_element(self.container),
            )
            return False

        source_id = self.container.get_attribute(self.config.source_attr)
        if not source_id:
            report(
                logger,
                ConfigurationError(
                    f"{self.config.source_attr} attribute is required",
                    suggestion=f'Add {self.config.source_attr}="<source id>" to '
                    f"{describe_element(self.container)}",
                ),
                prefix=self.config.log_prefix,
            )
            self._inert = True
            return False

        document = self.document or self.container.owner_document
        if document is None:
            report(
                logger,
                ConfigurationError(
                    f"{describe_element(self.container)} is not attached to a document",
                    code=ErrorCode.DETACHED_CONTAINER,
                ),
                prefix=self.config.log_prefix,
            )
            return False
        self.document = document

        source = self._source
        if source is None or source.source_id != source_id:
            source = DataSource(document, source_id, self._on_data, config=self.config)
            self._source = source
        if not source.resolve() or self.scheduler.locate_template() is None:
            self._inert = True
            return False

        source.refresh()
        source.subscribe()
        logger.debug(
            "%s connected %s to source %r",
            self.config.log_prefix,
            describe_element(self.container),
            source_id,
        )
        return True

    def disconnect(self) -> None:
        """Stop reacting to source changes. Rendered output stays in place."""
        if self._source is not None:
            self._source.unsubscribe()

    def render(self) -> bool:
        """Force a pass with the source's current text.

        Returns:
            True if new output was swapped in.
        """
        if self._inert or self._source is None or self.scheduler.template is None:
            return False
        before = self.scheduler.render_count
        self._source.refresh()
        return self.scheduler.render_count > before

    def _on_data(self, data: Any) -> None:
        try:
            self.scheduler.render(data, source_id=self._source.source_id if self._source else None)
        except BindingError as exc:
            report(logger, exc, prefix=self.config.log_prefix)
        except Exception:
            logger.exception(
                "%s %s: render pass failed for %s",
                self.config.log_prefix,
                ErrorCode.RENDER_FAILED.value,
                describe_element(self.container),
                extra={"error_code": ErrorCode.RENDER_FAILED.value},
            )

    def __enter__(self) -> JsonTemplate:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        state = "connected" if self.connected else "inert" if self._inert else "idle"
        return f"JsonTemplate({describe_element(self.container)}, {state})"


def is_bound(element: Element, config: BindingConfig = DEFAULT_CONFIG) -> bool:
    """Whether ``element`` asks to be bound.

    True for elements carrying the source attribute, or whose
    space-separated ``behavior`` attribute names ``json-template``.
    """
    if element.has_attribute(config.source_attr):
        return True
    behaviors = (element.get_attribute(config.behavior_attr) or "").split()
    return config.behavior_name in behaviors


def bind_document(
    document: Document,
    *,
    config: BindingConfig = DEFAULT_CONFIG,
    container_id: str | None = None,
) -> list[JsonTemplate]:
    """Create and connect a JsonTemplate for every bound container.

    Args:
        document: Document to scan
        config: Binding configuration shared by every container
        container_id: Only bind the element with this id

    Returns:
        Every JsonTemplate created, connected or not.
    """
    if container_id is not None:
        element = document.get_element_by_id(container_id)
        candidates = [element] if element is not None else []
    else:
        candidates = [e for e in document.iter_elements() if is_bound(e, config)]

    bindings = []
    for element in candidates:
        binding = JsonTemplate(element, document, config=config)
        binding.connect()
        bindings.append(binding)
    return bindings
