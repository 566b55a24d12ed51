"""Configuration and diagnostics for jsonbind."""

from jsonbind.environment.config import DEFAULT_CONFIG, BindingConfig
from jsonbind.environment.exceptions import (
    DIAGNOSTIC_PREFIX,
    ArrayDepthError,
    ArrayMarkerTypeError,
    BindingError,
    ConfigurationError,
    ErrorCode,
    InvalidJSONError,
    MalformedExpressionError,
    SliceSyntaxError,
    SourceNotFoundError,
    TemplateNotFoundError,
    report,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DIAGNOSTIC_PREFIX",
    "ArrayDepthError",
    "ArrayMarkerTypeError",
    "BindingConfig",
    "BindingError",
    "ConfigurationError",
    "ErrorCode",
    "InvalidJSONError",
    "MalformedExpressionError",
    "SliceSyntaxError",
    "SourceNotFoundError",
    "TemplateNotFoundError",
    "report",
]
