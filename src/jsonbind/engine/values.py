"""Value semantics shared by expressions and interpolation.

JSON data is evaluated with JavaScript-flavoured rules, because templates
are written against JSON rather than Python objects:

- A failed lookup yields ``UNDEFINED``, which is distinct from JSON
  ``null`` (``None``) yet renders the same way.
- Empty lists and objects are truthy; ``0``, ``NaN``, ``""`` and ``false``
  are falsy.
- Booleans render as ``true`` / ``false`` and integral floats drop their
  fraction (``1.0`` renders as ``1``).

"""

from __future__ import annotations

import json
import math
from typing import Any


class _Undefined:
    """Singleton for "no value here". Falsy, renders as empty string."""

    __slots__ = ()
    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED: Any = _Undefined()


def is_nullish(value: Any) -> bool:
    """True for ``None`` and ``UNDEFINED``."""
    return value is None or value is UNDEFINED


def is_truthy(value: Any) -> bool:
    """JavaScript truthiness for JSON values."""
    if is_nullish(value) or value is False:
        return False
    if value is True:
        return True
    if isinstance(value, (int, float)):
        # NaN != NaN
        return value == value and value != 0
    if isinstance(value, str):
        return value != ""
    return True


def format_number(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def to_display(value: Any) -> str:
    """Coerce a value to the text written into the tree.

    Lists join their elements with ``,`` (nullish elements become empty),
    objects render as compact JSON.
    """
    if is_nullish(value):
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ",".join(to_display(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    return str(value)
