"""Node classes for the jsonbind host tree.

A deliberately small, mutable document model: enough structure for the
binding engine to query, clone and splice fragments, and enough mutation
reporting for a data source to be observed.

Node Kinds:
    Node
    ├── Text                # Character data
    ├── Comment             # Preserved verbatim, never interpolated
    └── ParentNode          # Owns an ordered ``children`` list
        ├── DocumentFragment
        ├── Element
        │   └── TemplateElement   # Inert ``content`` fragment, no children
        └── Document              # (jsonbind.dom.document)

Mutation Reporting:
Every structural or character-data change reports a MutationRecord to the
owning Document (if any). Nodes outside a document, including everything
inside a ``<template>`` content fragment, report nothing.

"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from jsonbind.dom.document import Document

MutationType = Literal["characterData", "childList", "attributes"]


@dataclass(frozen=True, slots=True)
class MutationRecord:
    """One observed change to the tree.

    Attributes:
        type: Kind of change
        target: Node whose data, children or attributes changed
        added: Nodes inserted into ``target`` (childList only)
        removed: Nodes removed from ``target`` (childList only)
        attribute_name: Changed attribute (attributes only)
        old_value: Previous text or attribute value, when applicable
    """

    type: MutationType
    target: Node
    added: tuple[Node, ...] = ()
    removed: tuple[Node, ...] = ()
    attribute_name: str | None = None
    old_value: str | None = None


class Node:
    """Base class for all tree nodes."""

    __slots__ = ("parent",)

    def __init__(self) -> None:
        self.parent: ParentNode | None = None

    @property
    def root(self) -> Node:
        """Topmost ancestor (self when detached)."""
        node: Node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def owner_document(self) -> Document | None:
        """Document this node is attached to, or None."""
        from jsonbind.dom.document import Document

        root = self.root
        return root if isinstance(root, Document) else None

    @property
    def text_content(self) -> str:
        return ""

    def is_descendant_of(self, other: Node) -> bool:
        """True if ``other`` is a strict ancestor of this node."""
        node = self.parent
        while node is not None:
            if node is other:
                return True
            node = node.parent
        return False

    def clone(self, deep: bool = True) -> Node:
        raise NotImplementedError

    def remove(self) -> None:
        """Detach from the parent (no-op when already detached)."""
        if self.parent is not None:
            self.parent.remove_child(self)

    def _report(self, record: MutationRecord) -> None:
        document = self.owner_document
        if document is not None:
            document.queue_mutation(record)


class Text(Node):
    """Character data node."""

    __slots__ = ("_data",)

    def __init__(self, data: str = "") -> None:
        super().__init__()
        self._data = data

    @property
    def data(self) -> str:
        return self._data

    @data.setter
    def data(self, value: str) -> None:
        old = self._data
        self._data = value
        if old != value:
            self._report(MutationRecord("characterData", self, old_value=old))

    @property
    def text_content(self) -> str:
        return self._data

    def clone(self, deep: bool = True) -> Text:
        return Text(self._data)

    def __repr__(self) -> str:
        return f"Text({self._data!r})"


class Comment(Node):
    """Comment node. Carried through clones, never interpolated."""

    __slots__ = ("data",)

    def __init__(self, data: str = "") -> None:
        super().__init__()
        self.data = data

    def clone(self, deep: bool = True) -> Comment:
        return Comment(self.data)

    def __repr__(self) -> str:
        return f"Comment({self.data!r})"


class ParentNode(Node):
    """Node with an ordered list of children."""

    __slots__ = ("children",)

    def __init__(self) -> None:
        super().__init__()
        self.children: list[Node] = []

    # -- structure ---------------------------------------------------------

    def append_child(self, node: Node) -> Node:
        """Append ``node`` (a fragment contributes its children)."""
        return self.insert_before(node, None)

    def insert_before(self, node: Node, reference: Node | None) -> Node:
        """Insert ``node`` before ``reference`` (append when None).

        Inserting a DocumentFragment moves all of its children, leaving the
        fragment empty, in a single childList record.

        Raises:
            ValueError: If ``reference`` is not a child of this node, or if
                the insertion would create a cycle.
        """
        if reference is not None and reference.parent is not self:
            raise ValueError("reference node is not a child of this node")
        if node is self or (isinstance(node, ParentNode) and self.is_descendant_of(node)):
            raise ValueError("cannot insert a node into its own subtree")

        if isinstance(node, DocumentFragment):
            moved = list(node.children)
            node.children.clear()
        else:
            node.remove()
            moved = [node]

        index = len(self.children) if reference is None else self.children.index(reference)
        for offset, child in enumerate(moved):
            child.parent = self
            self.children.insert(index + offset, child)

        if moved:
            self._report(MutationRecord("childList", self, added=tuple(moved)))
        return node

    def remove_child(self, node: Node) -> Node:
        """Remove and return ``node``.

        Raises:
            ValueError: If ``node`` is not a child of this node.
        """
        if node.parent is not self:
            raise ValueError("node is not a child of this node")
        self.children.remove(node)
        node.parent = None
        self._report(MutationRecord("childList", self, removed=(node,)))
        return node

    def replace_children(self, *nodes: Node) -> None:
        """Remove every child, then append ``nodes`` in order."""
        removed = tuple(self.children)
        for child in removed:
            child.parent = None
        self.children = []
        added: list[Node] = []
        for node in nodes:
            if isinstance(node, DocumentFragment):
                moved = list(node.children)
                node.children.clear()
            else:
                node.remove()
                moved = [node]
            for child in moved:
                child.parent = self
                self.children.append(child)
            added.extend(moved)
        if removed or added:
            self._report(MutationRecord("childList", self, added=tuple(added), removed=removed))

    def _clone_children_into(self, target: ParentNode) -> None:
        for child in self.children:
            copy = child.clone(deep=True)
            copy.parent = target
            target.children.append(copy)

    # -- content -----------------------------------------------------------

    @property
    def text_content(self) -> str:
        return "".join(node.data for node in self.iter_descendants() if isinstance(node, Text))

    @text_content.setter
    def text_content(self, value: str) -> None:
        if value:
            self.replace_children(Text(value))
        else:
            self.replace_children()

    # -- traversal ---------------------------------------------------------

    def iter_descendants(self) -> Iterator[Node]:
        """Depth-first, document-order walk (template content excluded)."""
        for child in self.children:
            yield child
            if isinstance(child, ParentNode):
                yield from child.iter_descendants()

    def iter_elements(self) -> Iterator[Element]:
        for node in self.iter_descendants():
            if isinstance(node, Element):
                yield node

    def query_all(
        self,
        tag: str | None = None,
        *,
        class_name: str | None = None,
        attrs: Mapping[str, str | None] | None = None,
    ) -> list[Element]:
        """Return descendant elements matching every given criterion.

        Args:
            tag: Tag name (case-insensitive)
            class_name: A single class that must appear in ``class``
            attrs: Attribute constraints; a None value only requires presence
        """
        wanted_tag = tag.lower() if tag else None
        matches: list[Element] = []
        for element in self.iter_elements():
            if wanted_tag and element.tag != wanted_tag:
                continue
            if class_name and class_name not in element.class_list:
                continue
            if attrs and not all(
                element.has_attribute(name)
                and (value is None or element.get_attribute(name) == value)
                for name, value in attrs.items()
            ):
                continue
            matches.append(element)
        return matches

    def query(
        self,
        tag: str | None = None,
        *,
        class_name: str | None = None,
        attrs: Mapping[str, str | None] | None = None,
    ) -> Element | None:
        """First match of :meth:`query_all`, or None."""
        found = self.query_all(tag, class_name=class_name, attrs=attrs)
        return found[0] if found else None


class DocumentFragment(ParentNode):
    """Parentless container of nodes; inserting it moves its children."""

    __slots__ = ()

    def clone(self, deep: bool = True) -> DocumentFragment:
        copy = DocumentFragment()
        if deep:
            self._clone_children_into(copy)
        return copy

    def __repr__(self) -> str:
        return f"DocumentFragment({len(self.children)} children)"


class Element(ParentNode):
    """Element with a lower-case tag name and ordered attributes."""

    __slots__ = ("attributes", "tag")

    def __init__(self, tag: str, attributes: Mapping[str, str] | None = None) -> None:
        super().__init__()
        self.tag = tag.lower()
        self.attributes: dict[str, str] = dict(attributes or {})

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def set_attribute(self, name: str, value: str) -> None:
        old = self.attributes.get(name)
        self.attributes[name] = value
        if old != value:
            self._report(MutationRecord("attributes", self, attribute_name=name, old_value=old))

    def remove_attribute(self, name: str) -> None:
        if name in self.attributes:
            old = self.attributes.pop(name)
            self._report(MutationRecord("attributes", self, attribute_name=name, old_value=old))

    @property
    def id(self) -> str | None:
        return self.attributes.get("id")

    @property
    def class_list(self) -> list[str]:
        return self.attributes.get("class", "").split()

    def clone(self, deep: bool = True) -> Element:
        copy = Element(self.tag, self.attributes)
        if deep:
            self._clone_children_into(copy)
        return copy

    def __repr__(self) -> str:
        return f"<{self.tag} {self.attributes!r}>" if self.attributes else f"<{self.tag}>"


class TemplateElement(Element):
    """``<template>`` element.

    Its authored children live in the inert ``content`` fragment, which is
    neither part of the document tree nor reported to observers. Cloning a
    template deep-copies its content.
    """

    __slots__ = ("content",)

    def __init__(self, attributes: Mapping[str, str] | None = None) -> None:
        super().__init__("template", attributes)
        self.content = DocumentFragment()

    def clone(self, deep: bool = True) -> TemplateElement:
        copy = TemplateElement(self.attributes)
        if deep:
            copy.content = self.content.clone(deep=True)
        return copy
