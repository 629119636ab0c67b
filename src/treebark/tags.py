"""Shared constants for Treebark.

Tag, attribute, protocol and key tables used by the security guard, the
condition evaluator and the renderer. Everything here is immutable.
"""

from __future__ import annotations

# Container tags: may have children, always get a closing tag
CONTAINER_TAGS: frozenset[str] = frozenset(
    {
        # Sectioning
        "div",
        "span",
        "p",
        "header",
        "footer",
        "main",
        "section",
        "article",
        # Headings
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        # Phrasing
        "strong",
        "em",
        "blockquote",
        "code",
        "pre",
        # Lists
        "ul",
        "ol",
        "li",
        # Tables
        "table",
        "thead",
        "tbody",
        "tr",
        "th",
        "td",
        # Links
        "a",
    }
)

# Void tags: self-closing, children are dropped
VOID_TAGS: frozenset[str] = frozenset({"img", "br", "hr"})

COMMENT_TAG = "$comment"
IF_TAG = "$if"

# Control nodes that never correspond to an HTML element
SPECIAL_TAGS: frozenset[str] = frozenset({COMMENT_TAG, IF_TAG})

ALLOWED_TAGS: frozenset[str] = CONTAINER_TAGS | VOID_TAGS | SPECIAL_TAGS

# Attributes allowed on every tag
GLOBAL_ATTRS: frozenset[str] = frozenset({"id", "class", "style", "title", "role"})
GLOBAL_ATTR_PREFIXES: tuple[str, ...] = ("data-", "aria-")

TAG_SPECIFIC_ATTRS: dict[str, frozenset[str]] = {
    "a": frozenset({"href", "target", "rel"}),
    "img": frozenset({"src", "alt", "width", "height"}),
    "table": frozenset({"summary"}),
    "th": frozenset({"scope", "colspan", "rowspan"}),
    "td": frozenset({"scope", "colspan", "rowspan"}),
    "blockquote": frozenset({"cite"}),
}

# Attributes whose value is navigated to or fetched by the browser
URL_ATTRS: frozenset[str] = frozenset({"href", "src", "cite"})

SAFE_URL_SCHEMES: frozenset[str] = frozenset({"http", "https", "mailto", "tel"})

# Path segments refused by the property resolver
BLOCKED_PROPERTY_NAMES: frozenset[str] = frozenset({"constructor", "__proto__", "prototype"})

# Reserved keys on tag attribute mappings
CHILDREN_KEY = "$children"
BIND_KEY = "$bind"
FILTER_KEY = "$filter"

# Conditional descriptor keys
CHECK_KEY = "$check"
THEN_KEY = "$then"
ELSE_KEY = "$else"
NOT_KEY = "$not"
JOIN_KEY = "$join"

# Comparison operators, in evaluation order
OPERATORS: tuple[str, ...] = ("$<", "$>", "$<=", "$>=", "$=", "$in")

CONDITIONAL_KEYS: frozenset[str] = frozenset(
    {CHECK_KEY, THEN_KEY, ELSE_KEY, NOT_KEY, JOIN_KEY, *OPERATORS}
)

# Styles applied to the isolation container
BLOCK_CONTAINER_STYLE = "contain: content; isolation: isolate;"
BLOCK_CONTAINER_ATTR = "data-treebark-container"
SHADOW_HOST_ATTR = "data-treebark-shadow"
