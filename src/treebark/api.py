"""Public render entry points.

Both functions share one traversal (`treebark.renderer.TreeRenderer`) and
differ only in the formatter that consumes its events.

No-throw contract:
Template and data problems never raise. They are reported to the
configured logger and the affected node renders as nothing. Only misuse of
the API itself (e.g. an ``options`` value of the wrong type) raises.

Example:
    >>> render_to_string({"template": {"p": "Hello {{name}}"}, "data": {"name": "Ada"}})
    '<p>Hello Ada</p>'
"""

from __future__ import annotations

from typing import Any
from xml.dom import minidom

from treebark.diagnostics import Diagnostics
from treebark.formatters.dom import DomFormatter
from treebark.formatters.string import StringFormatter
from treebark.nodes import Event
from treebark.options import RenderOptions, TreebarkInput
from treebark.renderer import TreeRenderer


def render_events(input: Any, options: RenderOptions) -> list[Event]:
    """Run the tree renderer and return its events."""
    source = TreebarkInput.from_value(input)
    renderer = TreeRenderer(options, Diagnostics(options.logger))
    return renderer.render(source.template, source.data)


def render_to_string(input: Any, options: Any = None, **overrides: Any) -> str:
    """Render a template to an HTML string.

    Args:
        input: ``TreebarkInput``, ``{"template": ..., "data": ...}`` mapping,
            or a bare template
        options: ``RenderOptions``, a mapping of option names, or None
        **overrides: Option fields overriding ``options``

    Returns:
        HTML text (``""`` when everything was dropped)
    """
    opts = RenderOptions.from_value(options, **overrides)
    return StringFormatter(opts.indent_str).format(render_events(input, opts))


def render_to_dom(
    input: Any,
    options: Any = None,
    *,
    document: minidom.Document | None = None,
    **overrides: Any,
) -> minidom.DocumentFragment:
    """Render a template to a ``xml.dom.minidom`` document fragment.

    Indentation options are ignored; the DOM carries no formatting.

    Args:
        input: Same forms as `render_to_string`
        options: Same forms as `render_to_string`
        document: Owner document for the created nodes
        **overrides: Option fields overriding ``options``
    """
    opts = RenderOptions.from_value(options, **overrides)
    return DomFormatter(document).format(render_events(input, opts))


render = render_to_string
