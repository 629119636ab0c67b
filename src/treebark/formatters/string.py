"""HTML string formatter.

Rebuilds element nesting from the flat event stream with a stack of frames.
Each frame collects ``(level, html)`` entries for one open element; closing
the element flattens the frame into a single entry of its parent.

Indentation rules (when an indent unit is configured):
- a lone child without markup stays inline: ``<p>Hello</p>``
- otherwise every child goes on its own line, indented ``indent * level``,
  and the closing tag is indented to the element's own level
- multi-line text children become one line each
- top-level nodes are joined by newlines

Example:
    >>> from treebark.nodes import CloseTag, OpenTag, Text
    >>> StringFormatter("  ").format([OpenTag(0, "div"), Text(1, "hi"), CloseTag(0, "div")])
    '<div>hi</div>'
"""

from __future__ import annotations

from collections.abc import Iterable

from treebark.nodes import CloseComment, CloseTag, Event, OpenComment, OpenTag, Text
from treebark.security import sanitize_comment
from treebark.utils.html import html_escape


def format_attrs(attrs: Iterable[tuple[str, str]]) -> str:
    """Serialize attribute pairs as `` name="value"`` (values escaped)."""
    return "".join(f' {name}="{html_escape(value)}"' for name, value in attrs)


class _Frame:
    __slots__ = ("opener", "depth", "entries")

    def __init__(self, opener: OpenTag | OpenComment | None, depth: int):
        self.opener = opener
        self.depth = depth
        self.entries: list[tuple[int, str]] = []


class StringFormatter:
    """Formats render events as an HTML string.

    Args:
        indent: Indent unit (e.g. ``"  "``), or None for compact output
    """

    __slots__ = ("indent",)

    def __init__(self, indent: str | None = None):
        self.indent = indent or None

    def format(self, events: Iterable[Event]) -> str:
        root = _Frame(None, -1)
        stack = [root]
        for event in events:
            frame = stack[-1]
            if isinstance(event, Text):
                self._add_text(frame, event, is_root=frame is root)
            elif isinstance(event, OpenTag):
                if event.void:
                    frame.entries.append((event.depth, f"<{event.tag}{format_attrs(event.attrs)}>"))
                else:
                    stack.append(_Frame(event, event.depth))
            elif isinstance(event, OpenComment):
                stack.append(_Frame(event, event.depth))
            elif isinstance(event, (CloseTag, CloseComment)):
                stack.pop()
                stack[-1].entries.append((frame.depth, self._close(frame)))

        separator = "\n" if self.indent else ""
        return separator.join(html for _, html in root.entries if html)

    def _add_text(self, frame: _Frame, event: Text, *, is_root: bool) -> None:
        if not event.html:
            return
        if self.indent and not is_root and "\n" in event.html and "<" not in event.html:
            frame.entries.extend((event.depth, line) for line in event.html.split("\n"))
        else:
            frame.entries.append((event.depth, event.html))

    def _flatten(self, entries: list[tuple[int, str]]) -> str:
        entries = [entry for entry in entries if entry[1]]
        if not self.indent:
            return "".join(html for _, html in entries)
        if not entries:
            return ""
        if len(entries) == 1 and "<" not in entries[0][1]:
            return entries[0][1]
        lines = "\n".join(self.indent * level + html for level, html in entries)
        return f"\n{lines}\n"

    def _close(self, frame: _Frame) -> str:
        body = self._flatten(frame.entries)
        closing_indent = self.indent * frame.depth if self.indent and body.startswith("\n") else ""
        opener = frame.opener
        if isinstance(opener, OpenTag):
            return f"<{opener.tag}{format_attrs(opener.attrs)}>{body}{closing_indent}</{opener.tag}>"
        return f"<!--{sanitize_comment(body)}{closing_indent}-->"
