"""Node-kind dispatch for tree walks.

Subclasses define ``visit_<kind>`` methods where ``<kind>`` is the
lower-cased node class name (``visit_text``, ``visit_element``,
``visit_templateelement``, ...). Nodes without a handler fall through to
:meth:`NodeVisitor.generic_visit`, which walks the children.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from jsonbind.dom.nodes import Node, ParentNode


class NodeVisitor:
    """Depth-first visitor with an O(1) dispatch table."""

    def __init__(self) -> None:
        self._dispatch: dict[str, Callable[[Any], None]] = {}
        for name in dir(self):
            if name.startswith("visit_"):
                method = getattr(self, name)
                if callable(method):
                    self._dispatch[name[6:]] = method

    def visit(self, node: Node) -> None:
        handler = self._dispatch.get(type(node).__name__.lower())
        if handler:
            handler(node)
        else:
            self.generic_visit(node)

    def generic_visit(self, node: Node) -> None:
        """Visit a snapshot of the children.

        Nodes inserted during the walk are not visited.
        """
        if isinstance(node, ParentNode):
            for child in list(node.children):
                self.visit(child)
