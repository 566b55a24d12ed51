"""Document root and mutation observation.

Mutations are queued on the owning Document and delivered only when the
host calls :meth:`Document.flush_mutations`. All records collected for one
observer since the previous flush arrive in a single callback, so a burst
of writes to a data source produces one notification.

Example:
    >>> doc = Document.from_html('<script id="data">{"n": 1}</script>')
    >>> seen = []
    >>> observer = MutationObserver(lambda records, obs: seen.append(len(records)))
    >>> observer.observe(doc.get_element_by_id("data"), child_list=True, subtree=True)
    >>> doc.get_element_by_id("data").text_content = '{"n": 2}'
    >>> doc.flush_mutations()
    1
    >>> seen
    [1]

"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from jsonbind.dom.nodes import (
    Comment,
    Element,
    MutationRecord,
    Node,
    ParentNode,
    TemplateElement,
    Text,
)

MutationCallback = Callable[[list[MutationRecord], "MutationObserver"], None]

# Callbacks that keep mutating observed nodes would otherwise flush forever.
MAX_FLUSH_ROUNDS = 100


@dataclass(frozen=True, slots=True)
class _Registration:
    observer: MutationObserver
    target: Node
    character_data: bool
    child_list: bool
    attributes: bool
    subtree: bool

    def matches(self, record: MutationRecord) -> bool:
        wanted = {
            "characterData": self.character_data,
            "childList": self.child_list,
            "attributes": self.attributes,
        }[record.type]
        if not wanted:
            return False
        if record.target is self.target:
            return True
        return self.subtree and record.target.is_descendant_of(self.target)


class Document(ParentNode):
    """Root of an observable node tree."""

    __slots__ = ("_registrations",)

    def __init__(self) -> None:
        super().__init__()
        self._registrations: list[_Registration] = []

    @classmethod
    def from_html(cls, source: str) -> Document:
        """Parse ``source`` and adopt the resulting nodes."""
        from jsonbind.dom.parser import parse_html

        document = cls()
        document.append_child(parse_html(source))
        return document

    def create_element(self, tag: str, attributes: dict[str, str] | None = None) -> Element:
        if tag.lower() == "template":
            return TemplateElement(attributes)
        return Element(tag, attributes)

    def create_text(self, data: str) -> Text:
        return Text(data)

    def create_comment(self, data: str) -> Comment:
        return Comment(data)

    def get_element_by_id(self, element_id: str) -> Element | None:
        """First element in document order whose ``id`` matches."""
        for element in self.iter_elements():
            if element.id == element_id:
                return element
        return None

    def clone(self, deep: bool = True) -> Document:
        copy = Document()
        if deep:
            self._clone_children_into(copy)
        return copy

    # -- observation -------------------------------------------------------

    def queue_mutation(self, record: MutationRecord) -> None:
        for registration in self._registrations:
            if registration.matches(record):
                registration.observer._pending.append(record)

    def _register(self, registration: _Registration) -> None:
        self._registrations.append(registration)

    def _unregister(self, observer: MutationObserver) -> None:
        self._registrations = [r for r in self._registrations if r.observer is not observer]

    def _observers(self) -> list[MutationObserver]:
        seen: list[MutationObserver] = []
        for registration in self._registrations:
            if registration.observer not in seen:
                seen.append(registration.observer)
        return seen

    def flush_mutations(self) -> int:
        """Deliver queued records to their observers.

        Callbacks may mutate observed nodes again; delivery repeats until
        no records remain or MAX_FLUSH_ROUNDS is reached.

        Returns:
            Number of callbacks invoked.
        """
        delivered = 0
        for _ in range(MAX_FLUSH_ROUNDS):
            batch = [(obs, obs.take_records()) for obs in self._observers() if obs._pending]
            if not batch:
                break
            for observer, records in batch:
                observer._callback(records, observer)
                delivered += 1
        return delivered

    def __repr__(self) -> str:
        return f"Document({len(self.children)} children)"


class MutationObserver:
    """Collects mutation records for the nodes it observes.

    Attributes:
        _callback: Called as ``callback(records, observer)`` on flush
        _pending: Records queued since the last delivery
        _document: Document holding this observer's registrations
    """

    __slots__ = ("_callback", "_document", "_pending")

    def __init__(self, callback: MutationCallback) -> None:
        self._callback = callback
        self._pending: list[MutationRecord] = []
        self._document: Document | None = None

    def observe(
        self,
        target: Node,
        *,
        character_data: bool = False,
        child_list: bool = False,
        attributes: bool = False,
        subtree: bool = False,
    ) -> None:
        """Start observing ``target``.

        Raises:
            ValueError: If no mutation kind is requested, or the target is
                not attached to a document.
        """
        if not (character_data or child_list or attributes):
            raise ValueError("observe() requires at least one mutation kind")
        document = target if isinstance(target, Document) else target.owner_document
        if document is None:
            raise ValueError("cannot observe a node that is not attached to a document")
        if self._document is not None and self._document is not document:
            self.disconnect()
        self._document = document
        document._register(
            _Registration(self, target, character_data, child_list, attributes, subtree)
        )

    def disconnect(self) -> None:
        """Stop observing and drop pending records. Safe to call repeatedly."""
        if self._document is not None:
            self._document._unregister(self)
            self._document = None
        self._pending.clear()

    def take_records(self) -> list[MutationRecord]:
        records = self._pending
        self._pending = []
        return records

    @property
    def observing(self) -> bool:
        return self._document is not None
