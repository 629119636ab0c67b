"""Tree renderer: walks a template against data and emits render events.

Architecture:
The renderer is backend-agnostic. It produces a flat list of events
(see `treebark.nodes`) that `treebark.formatters` turns into an HTML string
or a DOM fragment. Each node renders into its own local event list; when a
fatal ``TreebarkError`` is raised anywhere inside the node, the list is
discarded, the error is reported, and the node contributes nothing.
Siblings and ancestors keep rendering.

Per-node dispatch:
- ``str``: text with ``{{path}}`` / ``{{{path}}}`` interpolation
- ``list``: fragment, children in order at the same depth
- mapping: tag object (``$if``, ``$comment`` or an HTML element)
- ``int`` / ``float`` / ``bool``: text
- ``None``: nothing

Scope chain:
``ancestors`` is an immutable tuple. ``$bind`` and array iteration push the
pre-bind data, which descendants reach through ``{{..name}}``.

Thread-Safety:
A ``TreeRenderer`` holds per-render diagnostics; create one per render.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

from treebark.conditions import (
    check_descriptor,
    evaluate_conditional_value,
    is_conditional_value,
)
from treebark.diagnostics import Diagnostics
from treebark.errors import (
    ConditionalError,
    DepthLimitError,
    IgnoredContentError,
    NestedCommentError,
    RenderWarning,
    TemplateStructureError,
    TreebarkError,
)
from treebark.nodes import (
    CloseComment,
    CloseTag,
    Event,
    OpenComment,
    OpenTag,
    TagKind,
    TagNode,
    Text,
    normalize_tag,
    wrap_events,
)
from treebark.options import RenderOptions
from treebark.resolver import PropertyFallback, resolve_property, validate_path_expression
from treebark.security import (
    is_url_attribute,
    sanitize_style,
    validate_attribute,
    validate_tag,
    validate_url,
)
from treebark.tags import (
    BIND_KEY,
    BLOCK_CONTAINER_ATTR,
    BLOCK_CONTAINER_STYLE,
    CHECK_KEY,
    CONDITIONAL_KEYS,
    ELSE_KEY,
    FILTER_KEY,
    SHADOW_HOST_ATTR,
    THEN_KEY,
)
from treebark.utils.helpers import is_sequence, stringify
from treebark.utils.html import escape_text, html_escape

logger = logging.getLogger(__name__)

# {{{path}}} must be tried first; [^{}] keeps the scan linear
_MARKER_RE = re.compile(r"\{\{\{([^{}]*)\}\}\}|\{\{([^{}]*)\}\}")


def interpolate(
    template: str,
    data: Any,
    ancestors: Sequence[Any] = (),
    *,
    escape: bool = True,
    context: Diagnostics | None = None,
    fallback: PropertyFallback | None = None,
) -> str:
    """Replace ``{{path}}`` markers with data values.

    ``{{{path}}}`` is the escape hatch for literal braces: it renders as the
    text ``{{path}}`` without resolving anything.

    Args:
        template: Text possibly containing markers
        data: Current data context
        ancestors: Scope chain for ``..`` paths
        escape: Text context when True (literal text gets the entity-preserving
            escape, values the full escape); attribute context when False
            (nothing escaped here, the formatter escapes the whole value)
        context: Diagnostics sink for blocked property access
        fallback: Property fallback for unresolved paths

    Example:
        >>> interpolate("Hi {{name}} & {{{name}}}", {"name": "<b>"})
        'Hi &lt;b&gt; &amp; {{name}}'
    """
    parts: list[str] = []
    position = 0
    for match in _MARKER_RE.finditer(template):
        literal = template[position : match.start()]
        parts.append(escape_text(literal) if escape else literal)
        raw, path = match.groups()
        if raw is not None:
            value = "{{" + raw.strip() + "}}"
        else:
            value = stringify(resolve_property(data, path.strip(), ancestors, context, fallback))
        parts.append(html_escape(value) if escape else value)
        position = match.end()
    tail = template[position:]
    parts.append(escape_text(tail) if escape else tail)
    return "".join(parts)


def binds_current(template: Any) -> bool:
    """True for a single tag object bound with ``$bind: "."``."""
    if not isinstance(template, Mapping) or len(template) != 1:
        return False
    value = next(iter(template.values()))
    return isinstance(value, Mapping) and value.get(BIND_KEY) == "."


class TreeRenderer:
    """Renders one template into a list of render events.

    Example:
        >>> renderer = TreeRenderer(RenderOptions(), Diagnostics())
        >>> renderer.render({"p": "Hello {{name}}"}, {"name": "World"})
        [OpenTag(depth=0, tag='p', attrs=(), void=False), \
Text(depth=1, html='Hello World'), CloseTag(depth=0, tag='p')]
    """

    __slots__ = ("options", "diagnostics", "_fallback", "_max_depth")

    def __init__(self, options: RenderOptions, diagnostics: Diagnostics):
        self.options = options
        self.diagnostics = diagnostics
        self._fallback = options.property_fallback
        self._max_depth = options.max_depth

    def render(self, template: Any, data: Any) -> list[Event]:
        """Render ``template`` against ``data``, applying the isolation wrappers."""
        if isinstance(template, Mapping) and is_sequence(data) and not binds_current(template):
            # A single tag against a list renders once per item
            events: list[Event] = []
            for item in data:
                events.extend(self._render_node(template, item, (), 0, 0, False))
        else:
            events = self._render_node(template, data, (), 0, 0, False)

        if self.options.use_shadow_dom:
            events = wrap_events(events, "template", (("shadowrootmode", "open"),))
            events = wrap_events(events, "div", ((SHADOW_HOST_ATTR, "true"),))
        if self.options.use_block_container:
            events = wrap_events(
                events,
                "div",
                (("style", BLOCK_CONTAINER_STYLE), (BLOCK_CONTAINER_ATTR, "true")),
            )
        return events

    # =========================================================================
    # Node dispatch
    # =========================================================================

    def _render_node(
        self,
        node: Any,
        data: Any,
        ancestors: tuple[Any, ...],
        depth: int,
        nesting: int,
        in_comment: bool,
    ) -> list[Event]:
        try:
            if nesting > self._max_depth:
                raise DepthLimitError(self._max_depth)
            return self._dispatch(node, data, ancestors, depth, nesting, in_comment)
        except TreebarkError as exc:
            self.diagnostics.report(exc)
            logger.debug("Dropped node at depth %d (%s)", depth, exc.code.value)
            return []

    def _dispatch(
        self,
        node: Any,
        data: Any,
        ancestors: tuple[Any, ...],
        depth: int,
        nesting: int,
        in_comment: bool,
    ) -> list[Event]:
        if isinstance(node, str):
            html = self._interpolate_text(node, data, ancestors)
            return [Text(depth, html)] if html else []
        if isinstance(node, list):
            events: list[Event] = []
            for child in node:
                events.extend(self._render_node(child, data, ancestors, depth, nesting + 1, in_comment))
            return events
        if node is None:
            return []
        if isinstance(node, (bool, int, float)):
            return [Text(depth, html_escape(stringify(node)))]
        if isinstance(node, Mapping):
            return self._render_tag(normalize_tag(node), data, ancestors, depth, nesting, in_comment)
        raise TemplateStructureError(f"Unsupported template node of type {type(node).__name__}")

    def _render_tag(
        self,
        node: TagNode,
        data: Any,
        ancestors: tuple[Any, ...],
        depth: int,
        nesting: int,
        in_comment: bool,
    ) -> list[Event]:
        validate_tag(node.tag)

        if node.kind is TagKind.CONDITIONAL:
            return self._render_if(node, data, ancestors, depth, nesting, in_comment)

        if node.kind is TagKind.COMMENT and in_comment:
            raise NestedCommentError()

        if node.kind is TagKind.VOID and node.children:
            self.diagnostics.report(
                IgnoredContentError(f'Tag "{node.tag}" is a void element and cannot have children')
            )
            node = TagNode(node.tag, node.kind, node.attrs, ())

        if BIND_KEY in node.attrs:
            return self._render_bound(node, data, ancestors, depth, nesting, in_comment)

        if FILTER_KEY in node.attrs:
            self.diagnostics.report(
                IgnoredContentError(f'"{FILTER_KEY}" is ignored without "{BIND_KEY}" on tag "{node.tag}"')
            )
            node = TagNode(
                node.tag, node.kind, {k: v for k, v in node.attrs.items() if k != FILTER_KEY}, node.children
            )

        children = self._render_children(node, node.children, data, ancestors, depth, nesting, in_comment)
        return self._element(node, node.attrs, data, ancestors, depth, children)

    # =========================================================================
    # Control tags
    # =========================================================================

    def _render_if(
        self,
        node: TagNode,
        data: Any,
        ancestors: tuple[Any, ...],
        depth: int,
        nesting: int,
        in_comment: bool,
    ) -> list[Event]:
        descriptor = node.attrs
        if not isinstance(descriptor.get(CHECK_KEY), str):
            raise ConditionalError(
                '"$if" tag requires $check attribute to specify the condition',
                suggestion='Add a data path, e.g. {"$if": {"$check": "user.isAdmin", "$then": ...}}',
            )
        for key in descriptor:
            if key not in CONDITIONAL_KEYS:
                self.diagnostics.report(
                    IgnoredContentError(
                        f'"$if" ignores "{key}"; only $check, operators, $not, $join, $then and $else are supported'
                    )
                )
        if node.children:
            self.diagnostics.report(IgnoredContentError('"$if" ignores "$children"; use $then / $else'))
        for key in (THEN_KEY, ELSE_KEY):
            if isinstance(descriptor.get(key), list):
                raise ConditionalError(
                    f'"{key}" must be a single node, not a list',
                    suggestion="Wrap several nodes in one container element",
                )

        holds = check_descriptor(descriptor, data, ancestors, self.diagnostics, self._fallback)
        branch = THEN_KEY if holds else ELSE_KEY
        if branch not in descriptor:
            return []
        return self._render_node(descriptor[branch], data, ancestors, depth, nesting + 1, in_comment)

    def _render_bound(
        self,
        node: TagNode,
        data: Any,
        ancestors: tuple[Any, ...],
        depth: int,
        nesting: int,
        in_comment: bool,
    ) -> list[Event]:
        attrs = {k: v for k, v in node.attrs.items() if k not in (BIND_KEY, FILTER_KEY)}
        path = node.attrs[BIND_KEY]
        validate_path_expression(BIND_KEY, path)
        bound = resolve_property(data, path.strip(), ancestors, self.diagnostics, self._fallback)
        pushed = (*ancestors, data)

        if not is_sequence(bound):
            if FILTER_KEY in node.attrs:
                self.diagnostics.report(
                    IgnoredContentError(f'"{FILTER_KEY}" is ignored because "{path}" is not a list')
                )
            rebound = TagNode(node.tag, node.kind, attrs, node.children)
            children = self._render_children(rebound, node.children, bound, pushed, depth, nesting, in_comment)
            return self._element(rebound, attrs, bound, pushed, depth, children)

        items: Sequence[Any] = bound
        if FILTER_KEY in node.attrs:
            condition = node.attrs[FILTER_KEY]
            if not is_conditional_value(condition):
                raise ConditionalError(
                    f'"{FILTER_KEY}" must be a conditional with a string "$check"',
                    suggestion='e.g. "$filter": {"$check": "price", "$<": 500}',
                )
            items = [
                item
                for item in bound
                if check_descriptor(condition, item, pushed, self.diagnostics, self._fallback)
            ]

        children: list[Event] = []
        for item in items:
            children.extend(
                self._render_children(node, node.children, item, pushed, depth, nesting, in_comment)
            )
        return self._element(node, attrs, data, ancestors, depth, children)

    # =========================================================================
    # Elements and attributes
    # =========================================================================

    def _render_children(
        self,
        node: TagNode,
        children: Sequence[Any],
        data: Any,
        ancestors: tuple[Any, ...],
        depth: int,
        nesting: int,
        in_comment: bool,
    ) -> list[Event]:
        inside = in_comment or node.kind is TagKind.COMMENT
        events: list[Event] = []
        for child in children:
            events.extend(self._render_node(child, data, ancestors, depth + 1, nesting + 1, inside))
        return events

    def _element(
        self,
        node: TagNode,
        attrs: Mapping[str, Any],
        data: Any,
        ancestors: tuple[Any, ...],
        depth: int,
        children: list[Event],
    ) -> list[Event]:
        pairs = self._render_attrs(node.tag, attrs, data, ancestors)
        if node.kind is TagKind.COMMENT:
            return [OpenComment(depth), *children, CloseComment(depth)]
        if node.kind is TagKind.VOID:
            return [OpenTag(depth, node.tag, pairs, void=True)]
        return [OpenTag(depth, node.tag, pairs), *children, CloseTag(depth, node.tag)]

    def _render_attrs(
        self, tag: str, attrs: Mapping[str, Any], data: Any, ancestors: tuple[Any, ...]
    ) -> tuple[tuple[str, str], ...]:
        """Validate and evaluate attributes; warnings drop only the offending attribute."""
        pairs: list[tuple[str, str]] = []
        for name, value in attrs.items():
            try:
                validate_attribute(name, tag)
                if is_conditional_value(value):
                    value = evaluate_conditional_value(
                        value, data, ancestors, self.diagnostics, self._fallback
                    )
                if name == "style":
                    text = sanitize_style(
                        value,
                        lambda raw: self._interpolate_attr(raw, data, ancestors),
                        self.diagnostics,
                    )
                    if not text:
                        continue
                elif isinstance(value, str):
                    text = self._interpolate_attr(value, data, ancestors)
                else:
                    text = stringify(value)
                if is_url_attribute(name):
                    validate_url(name, text)
            except RenderWarning as warning:
                self.diagnostics.report(warning)
                continue
            pairs.append((name, text))
        return tuple(pairs)

    def _interpolate_text(self, text: str, data: Any, ancestors: tuple[Any, ...]) -> str:
        return interpolate(
            text, data, ancestors, escape=True, context=self.diagnostics, fallback=self._fallback
        )

    def _interpolate_attr(self, text: str, data: Any, ancestors: tuple[Any, ...]) -> str:
        return interpolate(
            text, data, ancestors, escape=False, context=self.diagnostics, fallback=self._fallback
        )
