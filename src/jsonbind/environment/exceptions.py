"""Error taxonomy for jsonbind.

Exception Hierarchy:
BindingError (base)
├── ConfigurationError        # Container lacks its source binding
├── SourceNotFoundError       # Data-bearing node missing at setup
├── InvalidJSONError          # Source text failed to parse (transient)
├── TemplateNotFoundError     # No direct-child <template> at setup
├── ArrayMarkerTypeError      # data-array path resolved to a non-list
├── ArrayDepthError           # Marker nesting exceeded max_array_depth
├── SliceSyntaxError          # Unparseable slice attribute
└── MalformedExpressionError  # Operator with an empty operand

None of these escape the engine. They are built where a problem is
detected, reported through :func:`report`, and the affected render step
is skipped or the pass aborted.

Example log line:
    ```
    [json-template] JT-SRC-002: Invalid JSON in source element 'data-source': Expecting value (line 1, column 1)
    ```

"""

from __future__ import annotations

import logging
from enum import Enum

DIAGNOSTIC_PREFIX = "[json-template]"


class ErrorCode(Enum):
    """Searchable error codes.

    Format: JT-{CATEGORY}-{NUMBER}
    Categories: CFG (configuration), SRC (data source), TPL (template),
    ARR (array rendering), EXP (expressions), RUN (render pass)
    """

    MISSING_SOURCE_ATTRIBUTE = "JT-CFG-001"
    DETACHED_CONTAINER = "JT-CFG-002"

    SOURCE_NOT_FOUND = "JT-SRC-001"
    INVALID_JSON = "JT-SRC-002"

    TEMPLATE_NOT_FOUND = "JT-TPL-001"
    MULTIPLE_TEMPLATES = "JT-TPL-002"

    ARRAY_TYPE_MISMATCH = "JT-ARR-001"
    INVALID_SLICE = "JT-ARR-002"
    ARRAY_DEPTH = "JT-ARR-003"

    MALFORMED_EXPRESSION = "JT-EXP-001"

    RENDER_FAILED = "JT-RUN-001"

    @property
    def category(self) -> str:
        """Error category (e.g., 'source', 'template', 'array')."""
        prefix = self.value.split("-")[1]
        return {
            "CFG": "configuration",
            "SRC": "source",
            "TPL": "template",
            "ARR": "array",
            "EXP": "expression",
            "RUN": "runtime",
        }.get(prefix, "unknown")


class BindingError(Exception):
    """Base exception for all jsonbind diagnostics.

    Attributes:
        code: ErrorCode identifying the failure
        suggestion: Optional hint appended to the formatted message
    """

    code: ErrorCode = ErrorCode.RENDER_FAILED

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.suggestion = suggestion

    def format_compact(self, prefix: str = DIAGNOSTIC_PREFIX) -> str:
        """Format as a one-line (plus optional hint) diagnostic.

        Format::

            [json-template] JT-TPL-001: No <template> element found as direct child of <div id="list">
              Hint: Wrap the markup to render in a <template> inside the container
        """
        header = f"{prefix} {self.code.value}: {self.message}"
        if self.suggestion:
            return f"{header}\n  Hint: {self.suggestion}"
        return header


class ConfigurationError(BindingError):
    """Container is missing required binding configuration."""

    code = ErrorCode.MISSING_SOURCE_ATTRIBUTE


class SourceNotFoundError(BindingError):
    """Data-bearing node could not be found at setup (permanent)."""

    code = ErrorCode.SOURCE_NOT_FOUND

    def __init__(self, source_id: str) -> None:
        self.source_id = source_id
        super().__init__(
            f"Data source element not found: {source_id!r}",
            suggestion="The source is looked up once at setup; add it to the document before connecting",
        )


class InvalidJSONError(BindingError):
    """Source text failed to parse as JSON (transient)."""

    code = ErrorCode.INVALID_JSON

    def __init__(self, source_id: str | None, reason: str) -> None:
        self.source_id = source_id
        self.reason = reason
        super().__init__(f"Invalid JSON in source element {source_id!r}: {reason}")


class TemplateNotFoundError(BindingError):
    """No direct-child ``<template>`` in the container (permanent)."""

    code = ErrorCode.TEMPLATE_NOT_FOUND

    def __init__(self, container: str) -> None:
        super().__init__(
            f"No <template> element found as direct child of {container}",
            suggestion="Wrap the markup to render in a <template> inside the container",
        )


class ArrayMarkerTypeError(BindingError):
    """An array marker path resolved to something other than a list."""

    code = ErrorCode.ARRAY_TYPE_MISMATCH

    def __init__(self, path: str, value: object) -> None:
        self.path = path
        self.value_type = _json_type_name(value)
        super().__init__(f"Expected array at path {path!r}, got {self.value_type}")


class ArrayDepthError(BindingError):
    """Nested array markers went deeper than the configured limit."""

    code = ErrorCode.ARRAY_DEPTH

    def __init__(self, path: str, max_depth: int, stack: list[str]) -> None:
        chain = " > ".join([*stack, path])
        super().__init__(
            f"Maximum array nesting depth exceeded ({max_depth}) at {chain}",
            suggestion="Check for markers nested deeper than the data can be",
        )


class SliceSyntaxError(BindingError):
    """Slice attribute text is not ``start:end`` or a bare integer."""

    code = ErrorCode.INVALID_SLICE

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(
            f"Invalid slice {text!r}; rendering all items",
            suggestion="Use 'start:end', 'start:', ':end' or a single integer",
        )


class MalformedExpressionError(BindingError):
    """An operator was found with nothing on one side of it."""

    code = ErrorCode.MALFORMED_EXPRESSION

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"Malformed expression {{{raw}}}; treating it as a plain path")


def _json_type_name(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def report(
    logger: logging.Logger,
    error: BindingError,
    *,
    level: int = logging.ERROR,
    prefix: str = DIAGNOSTIC_PREFIX,
) -> None:
    """Send ``error`` down the diagnostics channel."""
    logger.log(level, error.format_compact(prefix), extra={"error_code": error.code.value})
