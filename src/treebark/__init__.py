"""Treebark: safe, declarative HTML from YAML/JSON templates.

Templates are plain data: a tag is a one-key mapping, children are lists,
and ``{{path}}`` markers pull values from a data context. Output is
restricted to an allowlist of tags, attributes, URL schemes and CSS, so
templates from untrusted authors can be rendered safely.

Quickstart:
    >>> from treebark import render_to_string
    >>> render_to_string({
    ...     "template": {"ul": {"$bind": "items", "$children": [{"li": "{{name}}"}]}},
    ...     "data": {"items": [{"name": "Ada"}, {"name": "Grace"}]},
    ... })
    '<ul><li>Ada</li><li>Grace</li></ul>'

From YAML source:
    >>> from treebark.loader import render_block
    >>> render_block("p: Hello {{who}}", {"who": "World"})
    '<p>Hello World</p>'

Architecture:
Template + data → TreeRenderer → render events → StringFormatter | DomFormatter

One traversal emits a flat event stream; the string and DOM backends both
consume it, so they always agree.

Error Model:
Rendering never raises for template or data problems. Fatal errors drop the
offending node, warnings drop a single attribute or style property; both
are reported to the configured logger (default: the ``treebark`` logging
logger).

Thread-Safety:
Rendering uses only per-call state. Concurrent renders are safe.
"""

from treebark.api import render, render_to_dom, render_to_string
from treebark.conditions import evaluate_condition, is_truthy
from treebark.diagnostics import Diagnostics, Logger, LoggingLogger
from treebark.errors import (
    AttributeNotAllowedError,
    BindingError,
    BlockedPropertyError,
    ConditionalError,
    DepthLimitError,
    ErrorCode,
    IgnoredContentError,
    NestedCommentError,
    PropertyFallbackError,
    RenderWarning,
    Severity,
    StyleTypeError,
    TagNotAllowedError,
    TemplateSourceError,
    TemplateStructureError,
    TreebarkError,
    UnsafeStyleError,
    UnsafeUrlError,
)
from treebark.formatters.dom import to_html
from treebark.options import RenderOptions, TreebarkInput
from treebark.resolver import resolve_property
from treebark.utils.helpers import UNDEFINED
from treebark.utils.html import html_escape

__version__ = "0.1.0"

__all__ = [
    "UNDEFINED",
    "AttributeNotAllowedError",
    "BindingError",
    "BlockedPropertyError",
    "ConditionalError",
    "DepthLimitError",
    "Diagnostics",
    "ErrorCode",
    "IgnoredContentError",
    "Logger",
    "LoggingLogger",
    "NestedCommentError",
    "PropertyFallbackError",
    "RenderOptions",
    "RenderWarning",
    "Severity",
    "StyleTypeError",
    "TagNotAllowedError",
    "TemplateSourceError",
    "TemplateStructureError",
    "TreebarkError",
    "TreebarkInput",
    "UnsafeStyleError",
    "UnsafeUrlError",
    "__version__",
    "evaluate_condition",
    "html_escape",
    "is_truthy",
    "render",
    "render_to_dom",
    "render_to_string",
    "resolve_property",
    "to_html",
]
