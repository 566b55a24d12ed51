"""Data Source Adapter: JSON text in, parsed data out, on every change.

The adapter is bound once to a data-bearing element (typically
``<script type="application/json" id="...">``). It observes only that
element's own subtree, never the container it renders into, so a render
pass cannot trigger another.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, NoReturn

from jsonbind.dom.document import Document, MutationObserver
from jsonbind.dom.nodes import Element, MutationRecord
from jsonbind.environment.config import DEFAULT_CONFIG, BindingConfig
from jsonbind.environment.exceptions import InvalidJSONError, SourceNotFoundError, report

logger = logging.getLogger(__name__)

DataCallback = Callable[[Any], Any]


def _reject_constant(name: str) -> NoReturn:
    raise ValueError(f"{name} is not valid JSON")


def parse_json(text: str, source_id: str | None = None) -> Any:
    """Parse strict JSON (``NaN`` / ``Infinity`` rejected).

    Raises:
        InvalidJSONError: If ``text`` is not valid JSON.
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        # JSONDecodeError is a ValueError
        raise InvalidJSONError(source_id, str(exc)) from exc


class DataSource:
    """Reads, parses and watches one data-bearing element.

    Attributes:
        document: Document used for the one-time id lookup
        source_id: Id of the data-bearing element
        on_data: Called with each successfully parsed value
        config: Supplies the diagnostic prefix
    """

    def __init__(
        self,
        document: Document,
        source_id: str,
        on_data: DataCallback,
        *,
        config: BindingConfig = DEFAULT_CONFIG,
    ) -> None:
        self.document = document
        self.source_id = source_id
        self.on_data = on_data
        self.config = config
        self._element: Element | None = None
        self._observer: MutationObserver | None = None
        self._missing = False

    @property
    def element(self) -> Element | None:
        return self._element

    @property
    def subscribed(self) -> bool:
        return self._observer is not None

    @property
    def missing(self) -> bool:
        """Whether the lookup failed. It is never retried."""
        return self._missing

    def resolve(self) -> bool:
        """Look up the data-bearing element once.

        A missing element is reported and is permanent: later lookups are
        not attempted.
        """
        if self._missing:
            return False
        if self._element is None:
            self._element = self.document.get_element_by_id(self.source_id)
            if self._element is None:
                self._missing = True
                report(logger, SourceNotFoundError(self.source_id), prefix=self.config.log_prefix)
                return False
        return True

    def read(self) -> Any:
        """Parse the element's current text.

        Raises:
            InvalidJSONError: If the text is not valid JSON.
        """
        if self._element is None:
            raise SourceNotFoundError(self.source_id)
        return parse_json(self._element.text_content, self.source_id)

    def refresh(self) -> bool:
        """Read the source and hand the data on.

        Invalid JSON is reported and the cycle aborted, so whatever was last
        rendered stays in place.
        """
        try:
            data = self.read()
        except InvalidJSONError as exc:
            report(logger, exc, prefix=self.config.log_prefix)
            return False
        self.on_data(data)
        return True

    def subscribe(self) -> bool:
        """Observe the element's content. Already subscribed is a no-op."""
        if self._observer is not None:
            return True
        if self._element is None:
            return False
        observer = MutationObserver(self._on_mutations)
        observer.observe(self._element, character_data=True, child_list=True, subtree=True)
        self._observer = observer
        return True

    def unsubscribe(self) -> None:
        """Stop observing. Safe to call any number of times."""
        if self._observer is not None:
            self._observer.disconnect()
            self._observer = None

    def _on_mutations(self, records: list[MutationRecord], observer: MutationObserver) -> None:
        logger.debug(
            "%s source %r changed (%d records)",
            self.config.log_prefix,
            self.source_id,
            len(records),
        )
        self.refresh()
