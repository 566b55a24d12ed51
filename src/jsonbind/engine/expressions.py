"""Expression grammar for ``{...}`` spans.

Grammar (one operator at most):

    expression := operand [ operator fallback ]
    operand    := quoted-literal | path
    operator   := "||" | "??" | "&&"
    fallback   := quoted-string | "true" | "false" | number | bare-text

Operator detection is quote-aware: ``||``, ``??`` and ``&&`` inside a
single- or double-quoted run are plain text. The leftmost operator found
outside quotes splits the expression.

Semantics:

    {name || "Guest"}     fallback when name is falsy
    {count ?? 0}          fallback only when count is null/undefined
    {active && "Online"}  fallback when active is truthy, else active as-is

Bare words are always paths: ``{null}`` looks up the key ``"null"``;
``{"null"}`` is the literal string ``null``. Quotes cannot be escaped.

Expressions are parsed on every evaluation; the data context differs for
each item so nothing is cached.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from jsonbind.engine.paths import resolve_path
from jsonbind.engine.values import is_nullish, is_truthy, to_display
from jsonbind.environment.exceptions import MalformedExpressionError, report

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
# Longer digit runs stay text; int() rejects huge literals.
_MAX_NUMBER_LENGTH = 64


class Operator(Enum):
    """Short-circuit operators, keyed by their source token."""

    OR = "||"
    NULLISH = "??"
    AND = "&&"


_OPERATORS: dict[str, Operator] = {op.value: op for op in Operator}

FallbackValue = str | int | float | bool | None


@dataclass(frozen=True, slots=True)
class Literal:
    """Quoted left operand: ``{"text"}``. Always a string."""

    value: str

    def evaluate(self, context: Any) -> Any:
        return self.value


@dataclass(frozen=True, slots=True)
class PathRef:
    """Unquoted left operand, resolved against the data context."""

    path: str

    def evaluate(self, context: Any) -> Any:
        return resolve_path(context, self.path)


Operand = Literal | PathRef


@dataclass(frozen=True, slots=True)
class Expression:
    """Parsed ``{...}`` span.

    Attributes:
        left: Literal or path operand
        operator: Operator, or None for a bare operand
        fallback: Right-hand value used when the operator selects it
    """

    left: Operand
    operator: Operator | None = None
    fallback: FallbackValue = None

    def evaluate(self, context: Any) -> Any:
        """Return the selected value (before display coercion)."""
        value = self.left.evaluate(context)
        if self.operator is Operator.OR:
            return value if is_truthy(value) else self.fallback
        if self.operator is Operator.NULLISH:
            return self.fallback if is_nullish(value) else value
        if self.operator is Operator.AND:
            return self.fallback if is_truthy(value) else value
        return value

    def render(self, context: Any) -> str:
        return to_display(self.evaluate(context))


def _is_quoted(text: str) -> bool:
    return len(text) >= 2 and text[0] in "'\"" and text[-1] == text[0]


def find_operator(text: str) -> tuple[int, Operator] | None:
    """Locate the leftmost operator outside quotes.

    Returns:
        (offset, operator), or None when the text has no operator.

    Example:
        >>> find_operator('"a || b" ?? c')
        (9, <Operator.NULLISH: '??'>)
    """
    quote = ""
    i = 0
    while i < len(text):
        char = text[i]
        if quote:
            if char == quote:
                quote = ""
        elif char in "'\"":
            quote = char
        else:
            op = _OPERATORS.get(text[i : i + 2])
            if op is not None:
                return i, op
        i += 1
    return None


def parse_operand(text: str) -> Operand:
    """Classify a trimmed left operand as a Literal or a PathRef."""
    text = text.strip()
    if _is_quoted(text):
        return Literal(text[1:-1])
    return PathRef(text)


def parse_fallback(text: str) -> FallbackValue:
    """Parse the right-hand side. Never fails.

    Tried in order: quoted string, ``true``/``false``, number, and finally
    the trimmed text itself. Numbers are integers (``42``) or floats with a
    fraction or exponent (``1.5``, ``.5``, ``1e3``, ``-2.5E-3``).
    """
    text = text.strip()
    if _is_quoted(text):
        return text[1:-1]
    if text == "true":
        return True
    if text == "false":
        return False
    if len(text) <= _MAX_NUMBER_LENGTH and _NUMBER_RE.fullmatch(text):
        return float(text) if any(c in text for c in ".eE") else int(text)
    return text


def parse_expression(raw: str) -> Expression:
    """Parse the text between one ``{`` and ``}``.

    An operator with an empty side (``{ || "x"}``) is malformed: it is
    reported at debug level and the whole text is treated as one path.
    """
    found = find_operator(raw)
    if found is None:
        return Expression(parse_operand(raw))

    offset, operator = found
    left = raw[:offset].strip()
    right = raw[offset + 2 :].strip()
    if not left or not right:
        report(logger, MalformedExpressionError(raw), level=logging.DEBUG)
        return Expression(PathRef(raw.strip()))

    return Expression(parse_operand(left), operator, parse_fallback(right))


def evaluate_expression(raw: str, context: Any) -> str:
    """Parse and render one span against ``context``."""
    return parse_expression(raw).render(context)
