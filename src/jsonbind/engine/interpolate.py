"""Substitute ``{...}`` spans inside a cloned subtree.

Only clones are ever handed to the Interpolator; the authoring template is
read, never written. Dispatch per node kind:

    Text             → spans replaced, text rewritten wholesale
    Element          → attributes with spans rewritten, then children
    TemplateElement  → array marker: handed to the ArrayRenderer
                       plain template: left verbatim
    Comment          → untouched

"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from jsonbind.dom.nodes import Comment, Element, TemplateElement, Text
from jsonbind.dom.visitor import NodeVisitor
from jsonbind.engine.expressions import evaluate_expression

if TYPE_CHECKING:
    from jsonbind.engine.arrays import ArrayRenderer

# Non-nested spans; "{}" and braces inside a span are not expressions.
SPAN_RE = re.compile(r"\{([^{}]+)\}")


def has_spans(text: str) -> bool:
    return SPAN_RE.search(text) is not None


def interpolate_text(text: str, context: Any) -> str:
    """Replace every span in ``text`` with its rendered value.

    Example:
        >>> interpolate_text("{first} {last || '?'}", {"first": "Ada"})
        'Ada ?'
    """
    return SPAN_RE.sub(lambda match: evaluate_expression(match.group(1), context), text)


class Interpolator(NodeVisitor):
    """Depth-first interpolation of one cloned fragment.

    Attributes:
        context: Data value in scope for this fragment
        arrays: Renderer that expands nested array markers
    """

    def __init__(self, context: Any, arrays: ArrayRenderer) -> None:
        super().__init__()
        self.context = context
        self.arrays = arrays

    def visit_text(self, node: Text) -> None:
        if has_spans(node.data):
            node.data = interpolate_text(node.data, self.context)

    def visit_comment(self, node: Comment) -> None:
        pass

    def visit_element(self, node: Element) -> None:
        for name, value in list(node.attributes.items()):
            if has_spans(value):
                node.set_attribute(name, interpolate_text(value, self.context))
        self.generic_visit(node)

    def visit_templateelement(self, node: TemplateElement) -> None:
        if self.arrays.is_marker(node):
            self.arrays.render_marker(node, self.context)
