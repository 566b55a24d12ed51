"""Binding configuration.

Attribute names and limits shared by every component of one container.
Instances are immutable; derive variants with :func:`dataclasses.replace`.

Example:
    >>> from dataclasses import replace
    >>> cfg = replace(DEFAULT_CONFIG, array_attr="x-each")
    >>> cfg.array_attr
    'x-each'

"""

from __future__ import annotations

from dataclasses import dataclass

from jsonbind.environment.exceptions import DIAGNOSTIC_PREFIX


@dataclass(frozen=True, slots=True)
class BindingConfig:
    """Names and limits for a json-template container.

    Attributes:
        source_attr: Container attribute naming the data source id
        slice_attr: Container attribute with a slice for root-array data
        array_attr: Nested ``<template>`` attribute naming an array path
        array_slice_attr: Nested ``<template>`` attribute with a slice
        behavior_attr: Attribute listing behaviors attached to an element
        behavior_name: Token in ``behavior_attr`` that marks a container
        log_prefix: Prefix on every diagnostic line
        max_array_depth: Deepest allowed nesting of array markers
    """

    source_attr: str = "json-template-for"
    slice_attr: str = "json-template-slice"
    array_attr: str = "data-array"
    array_slice_attr: str = "data-array-slice"
    behavior_attr: str = "behavior"
    behavior_name: str = "json-template"
    log_prefix: str = DIAGNOSTIC_PREFIX
    max_array_depth: int = 32

    def __post_init__(self) -> None:
        if self.max_array_depth < 1:
            raise ValueError(f"max_array_depth must be >= 1, got {self.max_array_depth}")


DEFAULT_CONFIG = BindingConfig()
