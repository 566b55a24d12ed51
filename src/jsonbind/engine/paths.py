"""Path resolution against JSON values.

Paths use dot and bracket notation:

    name                    → data["name"]
    user.profile.name       → data["user"]["profile"]["name"]
    items[0].title          → data["items"][0]["title"]
    items[-1]               → last element of data["items"]
    user['first-name']      → data["user"]["first-name"]
    user["email.address"]   → data["user"]["email.address"] (dot kept)
    items.length            → len(data["items"])

Resolution behaves like optional chaining: a missing key, an out-of-range
index, a step into a scalar, or a ``null`` along the way all yield
``UNDEFINED``. Nothing here raises or logs.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from jsonbind.engine.values import UNDEFINED, is_nullish

PathSegment = str | int

_PROPERTY_PREFIX_RE = re.compile(r"^([^\[]+)(?=\[)")
_BRACKET_RE = re.compile(r"\[(['\"]?)(.+?)\1\]")
_INDEX_RE = re.compile(r"-?\d+")
# int() refuses very long digit strings; no real index is this long.
_MAX_INDEX_DIGITS = 64


def _split_parts(path: str) -> list[str]:
    """Split on dots that are outside brackets and outside quoted keys."""
    parts: list[str] = []
    current: list[str] = []
    bracket_depth = 0
    quote = ""

    for char in path:
        if char == "[" and not quote:
            bracket_depth += 1
            current.append(char)
        elif char == "]" and not quote:
            bracket_depth -= 1
            current.append(char)
        elif char in "'\"" and bracket_depth > 0:
            if not quote:
                quote = char
            elif quote == char:
                quote = ""
            current.append(char)
        elif char == "." and bracket_depth == 0:
            if current:
                parts.append("".join(current))
                current = []
        else:
            current.append(char)

    if current:
        parts.append("".join(current))
    return parts


def split_path(path: str) -> tuple[PathSegment, ...] | None:
    """Split ``path`` into ordered key (str) and index (int) segments.

    Returns:
        The segments, or None when the path cannot address anything
        (blank, or an unquoted bracket that is not an integer).

    Example:
        >>> split_path("users[1]['first-name'].tags[-1]")
        ('users', 1, 'first-name', 'tags', -1)
    """
    if not path or not path.strip():
        return None

    segments: list[PathSegment] = []
    for part in _split_parts(path.strip()):
        if "[" not in part:
            segments.append(part)
            continue

        prefix = _PROPERTY_PREFIX_RE.match(part)
        if prefix:
            segments.append(prefix.group(1))
            part = part[len(prefix.group(1)) :]

        for match in _BRACKET_RE.finditer(part):
            quote, key = match.group(1), match.group(2)
            if quote:
                segments.append(key)
            elif _INDEX_RE.fullmatch(key) and len(key) < _MAX_INDEX_DIGITS:
                segments.append(int(key))
            else:
                return None

    return tuple(segments)


def _is_array(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _index(items: Sequence[Any], index: int) -> Any:
    if index < 0:
        index += len(items)
    if 0 <= index < len(items):
        return items[index]
    return UNDEFINED


def step(current: Any, segment: PathSegment) -> Any:
    """Take one path step from ``current``. Never raises."""
    if isinstance(segment, int):
        return _index(current, segment) if _is_array(current) else UNDEFINED

    if isinstance(current, Mapping):
        return current[segment] if segment in current else UNDEFINED
    if _is_array(current):
        if segment == "length":
            return len(current)
        if segment.isdecimal() and len(segment) < _MAX_INDEX_DIGITS:
            return _index(current, int(segment))
    return UNDEFINED


def resolve_path(data: Any, path: str) -> Any:
    """Resolve ``path`` against ``data``.

    Returns:
        The addressed value (which may be ``None`` for JSON null), or
        ``UNDEFINED`` when any step fails.
    """
    segments = split_path(path)
    if not segments:
        return UNDEFINED

    current = data
    for segment in segments:
        if is_nullish(current):
            return UNDEFINED
        current = step(current, segment)
    return current
