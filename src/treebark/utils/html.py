"""HTML escaping for Treebark output.

Two escapers:

- ``html_escape``: escapes all five reserved characters. Used for
  interpolated data values and attribute values.
- ``escape_text``: same, but leaves ``&`` alone when it already starts a
  character reference. Used for literal template text so that escaping is
  idempotent (``escape_text(escape_text(s)) == escape_text(s)``).

Complexity:
Both are O(n): a single ``str.translate()`` pass, plus one linear regex
substitution for the ampersands in ``escape_text``.
"""

from __future__ import annotations

import re

_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
    }
)

# Same table without "&"; ampersands are handled by _BARE_AMPERSAND_RE
_ESCAPE_TABLE_NO_AMP = str.maketrans(
    {
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
    }
)

# An ampersand that does not start &name; &#123; or &#x1F;
_BARE_AMPERSAND_RE = re.compile(r"&(?!(?:[A-Za-z][A-Za-z0-9]{0,31}|#[0-9]{1,7}|#[xX][0-9A-Fa-f]{1,6});)")


def html_escape(value: str) -> str:
    """Escape ``& < > " '`` for safe inclusion in HTML text or attributes.

    Example:
        >>> html_escape('<a href="x">Tom & Jerry</a>')
        '&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&lt;/a&gt;'
    """
    return value.translate(_ESCAPE_TABLE)


def escape_text(value: str) -> str:
    """Escape literal template text, keeping existing character references.

    Example:
        >>> escape_text("Fish &amp; Chips <3")
        'Fish &amp; Chips &lt;3'
    """
    return _BARE_AMPERSAND_RE.sub("&amp;", value.translate(_ESCAPE_TABLE_NO_AMP))
