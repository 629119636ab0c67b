"""DOM formatter over ``xml.dom.minidom``.

Builds element and text nodes inside a ``DocumentFragment``. Attributes are
set with ``setAttribute`` and text with ``createTextNode`` only, so nothing
is ever parsed as markup. Comment nodes hold the compact string rendering of
their children.

``to_html`` serializes a minidom tree with HTML rules (void elements are not
closed, empty containers are), so DOM output can be compared with the
string formatter's output.
"""

from __future__ import annotations

import html
from collections.abc import Iterable
from xml.dom import minidom
from xml.dom.minidom import getDOMImplementation

from treebark.formatters.string import StringFormatter, format_attrs
from treebark.nodes import CloseComment, CloseTag, Event, OpenComment, OpenTag, Text
from treebark.security import sanitize_comment
from treebark.tags import VOID_TAGS
from treebark.utils.html import html_escape


def new_document() -> minidom.Document:
    """Create an empty owner document for fragments."""
    return getDOMImplementation().createDocument(None, None, None)


class DomFormatter:
    """Formats render events as a minidom ``DocumentFragment``.

    Args:
        document: Owner document for created nodes (default: a new one)
    """

    __slots__ = ("document",)

    def __init__(self, document: minidom.Document | None = None):
        self.document = document if document is not None else new_document()

    def format(self, events: Iterable[Event]) -> minidom.DocumentFragment:
        doc = self.document
        fragment = doc.createDocumentFragment()
        stack: list[minidom.Node] = [fragment]
        comment: list[Event] | None = None
        comment_depth = 0

        for event in events:
            if comment is not None:
                if isinstance(event, CloseComment) and event.depth == comment_depth:
                    body = StringFormatter(None).format(comment)
                    stack[-1].appendChild(doc.createComment(sanitize_comment(body)))
                    comment = None
                else:
                    comment.append(event)
            elif isinstance(event, OpenComment):
                comment = []
                comment_depth = event.depth
            elif isinstance(event, OpenTag):
                element = doc.createElement(event.tag)
                for name, value in event.attrs:
                    element.setAttribute(name, value)
                stack[-1].appendChild(element)
                if not event.void:
                    stack.append(element)
            elif isinstance(event, CloseTag):
                stack.pop()
            elif isinstance(event, Text) and event.html:
                stack[-1].appendChild(doc.createTextNode(html.unescape(event.html)))

        fragment.normalize()
        return fragment


def to_html(node: minidom.Node) -> str:
    """Serialize a minidom node (or fragment) as HTML.

    Example:
        >>> doc = new_document()
        >>> img = doc.createElement("img")
        >>> img.setAttribute("alt", "a < b")
        >>> to_html(img)
        '<img alt="a &lt; b">'
    """
    if node.nodeType == node.TEXT_NODE:
        return html_escape(node.data)
    if node.nodeType == node.COMMENT_NODE:
        return f"<!--{node.data}-->"
    if node.nodeType == node.ELEMENT_NODE:
        tag = node.tagName
        attrs = format_attrs(node.attributes.items())
        if tag in VOID_TAGS:
            return f"<{tag}{attrs}>"
        inner = "".join(to_html(child) for child in node.childNodes)
        return f"<{tag}{attrs}>{inner}</{tag}>"
    return "".join(to_html(child) for child in node.childNodes)
