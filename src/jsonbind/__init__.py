"""jsonbind: reactive JSON-to-template rendering for HTML node trees.

A container element names a JSON data source and holds one authoring
``<template>``. The template is cloned, ``{...}`` spans in text and
attributes are filled from the data, and the result is inserted as
siblings before the template. Whenever the source's text changes the
output is rebuilt from scratch.

Quickstart:
    >>> from jsonbind import Document, JsonTemplate, to_html
    >>> doc = Document.from_html(
    ...     '<script id="data">{"name": "Ada"}</script>'
    ...     '<div id="out" json-template-for="data">'
    ...     '<template><p>Hi {name || "Guest"}</p></template></div>'
    ... )
    >>> binding = JsonTemplate(doc.get_element_by_id("out"))
    >>> binding.connect()
    True
    >>> to_html(doc.get_element_by_id("out"))
    '<div id="out" json-template-for="data"><p>Hi Ada</p><template><p>Hi {name || "Guest"}</p></template></div>'

Expression grammar:
    {user.name}              path, dots and brackets: {items[-1]}, {a["b.c"]}
    {"text"}                 quoted literal
    {name || "Guest"}        fallback when falsy
    {count ?? 0}             fallback when null or missing
    {active && "Online"}     fallback when truthy

Arrays:
    Root-level list data renders the template once per item, optionally
    sliced with ``json-template-slice="start:end"``. Inside a template,
    ``<template data-array="path">`` repeats its content per element of
    the list at ``path`` (``data-array-slice`` slices it).

Reactivity:
    Mutations are queued on the Document; ``doc.flush_mutations()``
    delivers them and re-renders every affected container.

Diagnostics:
    Problems are logged through ``logging.getLogger("jsonbind...")`` with
    the ``[json-template]`` prefix and a ``JT-*`` error code. No public
    entry point raises on bad data or markup.

"""

from jsonbind.dom import (
    Comment,
    Document,
    DocumentFragment,
    Element,
    MutationObserver,
    MutationRecord,
    Node,
    NodeVisitor,
    TemplateElement,
    Text,
    inner_html,
    parse_html,
    to_html,
)
from jsonbind.engine import (
    UNDEFINED,
    DataSource,
    JsonTemplate,
    RenderScheduler,
    SliceSpec,
    bind_document,
    evaluate_expression,
    interpolate_text,
    parse_expression,
    parse_slice,
    render_fragment,
    resolve_path,
)
from jsonbind.environment import (
    DEFAULT_CONFIG,
    BindingConfig,
    BindingError,
    ErrorCode,
)
from jsonbind.render_context import RenderContext, get_render_context, render_context

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CONFIG",
    "UNDEFINED",
    "BindingConfig",
    "BindingError",
    "Comment",
    "DataSource",
    "Document",
    "DocumentFragment",
    "Element",
    "ErrorCode",
    "JsonTemplate",
    "MutationObserver",
    "MutationRecord",
    "Node",
    "NodeVisitor",
    "RenderContext",
    "RenderScheduler",
    "SliceSpec",
    "TemplateElement",
    "Text",
    "__version__",
    "bind_document",
    "evaluate_expression",
    "get_render_context",
    "inner_html",
    "interpolate_text",
    "parse_expression",
    "parse_html",
    "parse_slice",
    "render_context",
    "render_fragment",
    "resolve_path",
    "to_html",
]
