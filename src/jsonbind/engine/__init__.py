"""Binding engine: paths, expressions, interpolation, arrays and rendering.

Control flow for one change of the data source::

    DataSource → RenderScheduler → ArrayRenderer (root array?)
               → Interpolator → parse_expression → resolve_path

Nested ``<template data-array>`` markers recurse back through the
ArrayRenderer from inside the Interpolator.
"""

from jsonbind.engine.arrays import ArrayRenderer, SliceSpec, parse_slice
from jsonbind.engine.expressions import (
    Expression,
    Literal,
    Operator,
    PathRef,
    evaluate_expression,
    find_operator,
    parse_expression,
    parse_fallback,
)
from jsonbind.engine.interpolate import Interpolator, interpolate_text
from jsonbind.engine.paths import resolve_path, split_path
from jsonbind.engine.scheduler import RenderScheduler, render_fragment
from jsonbind.engine.source import DataSource, parse_json
from jsonbind.engine.template import JsonTemplate, bind_document, is_bound
from jsonbind.engine.values import UNDEFINED, is_nullish, is_truthy, to_display

__all__ = [
    "UNDEFINED",
    "ArrayRenderer",
    "DataSource",
    "Expression",
    "Interpolator",
    "JsonTemplate",
    "Literal",
    "Operator",
    "PathRef",
    "RenderScheduler",
    "SliceSpec",
    "bind_document",
    "evaluate_expression",
    "find_operator",
    "interpolate_text",
    "is_bound",
    "is_nullish",
    "is_truthy",
    "parse_expression",
    "parse_fallback",
    "parse_json",
    "parse_slice",
    "render_fragment",
    "resolve_path",
    "split_path",
    "to_display",
]
