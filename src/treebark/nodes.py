"""Template node normalization and render events.

Tag objects come in three shorthand forms::

    {"p": "Hello"}                          # text child
    {"ul": [{"li": "a"}, {"li": "b"}]}      # children list
    {"a": {"href": "/", "$children": [...]}}  # attributes (+ children)

``normalize_tag`` turns all of them into one ``TagNode`` record so the
renderer handles a single shape.

The renderer does not build output directly. It emits a flat stream of
render events (``OpenTag``, ``Text``, ``CloseTag``, ``OpenComment``,
``CloseComment``), each tagged with its nesting depth. The string and DOM
formatters consume the same stream, so the two backends cannot diverge.

Events are immutable for thread-safety.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from treebark.errors import TemplateStructureError
from treebark.tags import CHILDREN_KEY, COMMENT_TAG, IF_TAG, VOID_TAGS


class TagKind(Enum):
    """Element taxonomy used by the renderer and the formatters."""

    CONTAINER = "container"
    VOID = "void"
    COMMENT = "comment"
    CONDITIONAL = "conditional"

    @classmethod
    def of(cls, tag: str) -> TagKind:
        if tag == IF_TAG:
            return cls.CONDITIONAL
        if tag == COMMENT_TAG:
            return cls.COMMENT
        if tag in VOID_TAGS:
            return cls.VOID
        return cls.CONTAINER


@dataclass(frozen=True, slots=True)
class TagNode:
    """A tag object in normalized form.

    Attributes:
        tag: Tag name (``"div"``, ``"$if"``, ...)
        kind: Taxonomy of the tag
        attrs: Attribute mapping without ``$children`` (the descriptor for ``$if``)
        children: Child template nodes, in order
    """

    tag: str
    kind: TagKind
    attrs: Mapping[str, Any]
    children: Sequence[Any]


def _children_of(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return value
    raise TemplateStructureError(
        f'"{CHILDREN_KEY}" must be a list of nodes, got {type(value).__name__}'
    )


def normalize_tag(node: Mapping[str, Any]) -> TagNode:
    """Normalize a tag object into a ``TagNode``.

    Raises:
        TemplateStructureError: If the object does not have exactly one key,
            the key is not a string, or ``$children`` is not a list
    """
    if len(node) != 1:
        raise TemplateStructureError(
            f"Tag object must have exactly one key (the tag name), got {len(node)}",
            suggestion='Wrap siblings in a list: [{"h1": "..."}, {"p": "..."}]',
        )
    tag, value = next(iter(node.items()))
    if not isinstance(tag, str):
        raise TemplateStructureError(f"Tag name must be a string, got {tag!r}")

    if isinstance(value, Mapping):
        attrs = {k: v for k, v in value.items() if k != CHILDREN_KEY}
        children = _children_of(value.get(CHILDREN_KEY))
    elif isinstance(value, (list, str)) or value is None:
        attrs = {}
        children = _children_of(value)
    elif isinstance(value, (int, float)):
        attrs = {}
        children = [value]
    else:
        raise TemplateStructureError(
            f'Tag "{tag}" has an unsupported value of type {type(value).__name__}'
        )
    return TagNode(tag, TagKind.of(tag), attrs, children)


# =============================================================================
# Render events
# =============================================================================


@dataclass(frozen=True, slots=True)
class Event:
    """Base class for render events. ``depth`` is 0 for top-level nodes."""

    depth: int


@dataclass(frozen=True, slots=True)
class OpenTag(Event):
    """Start of an element. Attribute values are raw (unescaped) strings."""

    tag: str
    attrs: tuple[tuple[str, str], ...] = ()
    void: bool = False


@dataclass(frozen=True, slots=True)
class CloseTag(Event):
    tag: str


@dataclass(frozen=True, slots=True)
class Text(Event):
    """Text content, already escaped for HTML."""

    html: str


@dataclass(frozen=True, slots=True)
class OpenComment(Event):
    pass


@dataclass(frozen=True, slots=True)
class CloseComment(Event):
    pass


def shift(events: Iterable[Event], by: int) -> list[Event]:
    """Return ``events`` with every depth increased by ``by``."""
    return [replace(event, depth=event.depth + by) for event in events]


def wrap_events(
    events: Sequence[Event], tag: str, attrs: tuple[tuple[str, str], ...]
) -> list[Event]:
    """Wrap an event stream in a top-level element, nesting it one level deeper.

    Example:
        >>> wrap_events([Text(0, "hi")], "div", (("class", "box"),))
        [OpenTag(depth=0, tag='div', attrs=(('class', 'box'),), void=False), \
Text(depth=1, html='hi'), CloseTag(depth=0, tag='div')]
    """
    return [OpenTag(0, tag, attrs), *shift(events, 1), CloseTag(0, tag)]
