"""Security guard: tag and attribute allowlists, URL and CSS sanitization.

Every element, attribute and inline style that reaches the output passes
through this module. Checks raise ``TreebarkError`` subclasses; the renderer
decides what to drop based on the error's severity:

- ``validate_tag`` raises a fatal ``TagNotAllowedError`` (node dropped)
- ``validate_attribute`` / ``validate_url`` raise warnings (attribute dropped)
- ``sanitize_style`` reports warnings itself and returns what survived

Example:
    >>> validate_url("href", "https://example.com")
    'https://example.com'
    >>> sanitize_style({"color": "red", "font-size": 14}, str)
    'color: red; font-size: 14;'
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from treebark.errors import (
    AttributeNotAllowedError,
    StyleTypeError,
    TagNotAllowedError,
    UnsafeStyleError,
    UnsafeUrlError,
)
from treebark.tags import (
    ALLOWED_TAGS,
    COMMENT_TAG,
    GLOBAL_ATTR_PREFIXES,
    GLOBAL_ATTRS,
    SAFE_URL_SCHEMES,
    TAG_SPECIFIC_ATTRS,
    URL_ATTRS,
)
from treebark.utils.helpers import is_number, stringify

if TYPE_CHECKING:
    from treebark.diagnostics import Diagnostics

# ASCII whitespace and C0/DEL control characters, which browsers ignore in schemes
_URL_NOISE_RE = re.compile(r"[\x00-\x20\x7f]+")
_URL_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*):")

_CSS_PROPERTY_RE = re.compile(r"^-?[a-z][a-z0-9-]*$")
_WHITESPACE_RE = re.compile(r"\s+")
_CSS_URL_RE = re.compile(r"url\(")
_CSS_DATA_URL_RE = re.compile(r"""["']?data:""")

# Matched against the lowercased value with all whitespace removed
_CSS_BLOCKED_PATTERNS: tuple[str, ...] = (
    "expression(",
    "javascript:",
    "vbscript:",
    "@import",
    "behavior:",
    "-moz-binding",
    "\\",
)

_COMMENT_DASHES_RE = re.compile(r"-(?=-)")


def validate_tag(tag: str) -> None:
    """Raise ``TagNotAllowedError`` for tags outside the allowlist."""
    if tag not in ALLOWED_TAGS:
        raise TagNotAllowedError(tag)


def is_attribute_allowed(name: str, tag: str) -> bool:
    if tag == COMMENT_TAG or not isinstance(name, str):
        return False
    if name in GLOBAL_ATTRS or name.startswith(GLOBAL_ATTR_PREFIXES):
        return True
    return name in TAG_SPECIFIC_ATTRS.get(tag, ())


def validate_attribute(name: str, tag: str) -> None:
    """Raise ``AttributeNotAllowedError`` unless ``name`` is allowed on ``tag``."""
    if not is_attribute_allowed(name, tag):
        raise AttributeNotAllowedError(name, tag)


def url_scheme(url: str) -> str | None:
    """Return the lowercased scheme of ``url``, or None for scheme-less URLs.

    Whitespace and control characters are removed first, so
    ``"java\\tscript:"`` is recognized as ``javascript``.
    """
    match = _URL_SCHEME_RE.match(_URL_NOISE_RE.sub("", url))
    return match.group(1).lower() if match else None


def validate_url(name: str, url: str) -> str:
    """Validate a URL-bearing attribute value.

    Args:
        name: Attribute name (``href``, ``src`` or ``cite``)
        url: Attribute value after interpolation

    Returns:
        The value unchanged when its scheme is allowed

    Raises:
        UnsafeUrlError: For ``javascript:``, ``data:``, ``vbscript:`` and any
            other scheme outside ``SAFE_URL_SCHEMES``
    """
    scheme = url_scheme(url)
    if scheme is not None and scheme not in SAFE_URL_SCHEMES:
        raise UnsafeUrlError(name, scheme)
    return url


def is_url_attribute(name: str) -> bool:
    return name in URL_ATTRS


def split_bare_semicolon(value: str) -> tuple[str, bool]:
    """Cut ``value`` at the first ``;`` outside quotes and parentheses.

    Returns:
        ``(head, truncated)`` where ``truncated`` tells whether a cut happened

    Example:
        >>> split_bare_semicolon("red; background: blue")
        ('red', True)
        >>> split_bare_semicolon('url("a;b")')
        ('url("a;b")', False)
    """
    quote: str | None = None
    depth = 0
    for position, char in enumerate(value):
        if quote is not None:
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth = max(depth - 1, 0)
        elif char == ";" and depth == 0:
            return value[:position], True
    return value, False


def find_blocked_css(value: str) -> str | None:
    """Return the first blocked pattern found in a CSS value, or None."""
    compact = _WHITESPACE_RE.sub("", value.lower())
    for match in _CSS_URL_RE.finditer(compact):
        if not _CSS_DATA_URL_RE.match(compact, match.end()):
            return "url("
    for pattern in _CSS_BLOCKED_PATTERNS:
        if pattern in compact:
            return pattern
    return None


def sanitize_style(
    style: Any,
    interpolate: Callable[[str], str],
    context: Diagnostics | None = None,
) -> str:
    """Serialize a CSS-properties mapping into a safe ``style`` attribute value.

    Each property is checked on its own; a rejected property is reported as
    an ``UnsafeStyleError`` warning and left out, the rest still render.

    Args:
        style: Mapping of kebab-case property names to string or number values
        interpolate: Applied to string values (data interpolation, unescaped)
        context: Diagnostics sink for dropped or truncated properties

    Returns:
        ``"name: value;"`` items joined by a space; ``""`` when nothing survived

    Raises:
        StyleTypeError: If ``style`` is not a mapping
    """
    if not isinstance(style, Mapping):
        raise StyleTypeError(style)

    def warn(message: str) -> None:
        if context is not None:
            context.report(UnsafeStyleError(message))

    items: list[str] = []
    for name, raw in style.items():
        if not isinstance(name, str) or not _CSS_PROPERTY_RE.match(name):
            warn(f'CSS property "{name}" is not a valid property name')
            continue
        if isinstance(raw, str):
            value = interpolate(raw)
        elif is_number(raw):
            value = stringify(raw)
        else:
            warn(f'CSS value for "{name}" must be a string or a number')
            continue

        value, truncated = split_bare_semicolon(value)
        if truncated:
            warn(f'CSS value for "{name}" was truncated at ";"')
        value = value.strip()
        if not value:
            continue

        blocked = find_blocked_css(value)
        if blocked is not None:
            warn(f'CSS value for "{name}" contains blocked pattern "{blocked}"')
            continue
        items.append(f"{name}: {value};")
    return " ".join(items)


def sanitize_comment(text: str) -> str:
    """Break up ``--`` runs so a comment body cannot close the comment early."""
    return _COMMENT_DASHES_RE.sub("- ", text)
