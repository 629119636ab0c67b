"""Render configuration and input records.

``RenderOptions`` is immutable; ``from_value`` accepts the loose forms the
public API allows (``None``, a plain mapping, an existing instance) plus
keyword overrides, and always returns a new instance.

Example:
    >>> opts = RenderOptions.from_value({"indent": True}, use_block_container=True)
    >>> opts.indent_str
    '  '
    >>> opts.use_block_container
    True
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any

from treebark.diagnostics import Logger
from treebark.resolver import PropertyFallback

DEFAULT_MAX_DEPTH = 128
DEFAULT_INDENT = "  "


@dataclass(frozen=True, slots=True)
class RenderOptions:
    """Options shared by both render backends.

    Attributes:
        indent: ``False``/``None`` for compact output, ``True`` for two
            spaces, an int for that many spaces, or a literal indent string
        logger: Receives diagnostics; needs ``error`` and optionally
            ``warn`` / ``log`` (default: the ``treebark`` logging logger)
        property_fallback: Called as ``(path, data, ancestors)`` when a
            path does not resolve
        use_block_container: Wrap output in a CSS containment ``<div>``
        use_shadow_dom: Wrap output in a declarative shadow root host
        max_depth: Maximum template nesting before a subtree is dropped
    """

    indent: bool | int | str | None = None
    logger: Logger | None = None
    property_fallback: PropertyFallback | None = None
    use_block_container: bool = False
    use_shadow_dom: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH

    @classmethod
    def from_value(cls, options: Any = None, **overrides: Any) -> RenderOptions:
        """Coerce ``None``, a mapping or an instance into ``RenderOptions``.

        Unknown mapping keys are ignored so option dicts can be shared with
        other consumers.

        Raises:
            TypeError: If ``options`` is of any other type
        """
        if options is None:
            base = cls()
        elif isinstance(options, cls):
            base = options
        elif isinstance(options, Mapping):
            names = {f.name for f in fields(cls)}
            base = cls(**{k: v for k, v in options.items() if k in names})
        else:
            raise TypeError(f"options must be RenderOptions, a mapping or None, got {type(options).__name__}")
        return replace(base, **overrides) if overrides else base

    @property
    def indent_str(self) -> str | None:
        """The indent unit, or None when output is compact."""
        indent = self.indent
        if indent is None or indent is False:
            return None
        if indent is True:
            return DEFAULT_INDENT
        if isinstance(indent, int):
            return " " * indent if indent > 0 else None
        return indent or None


@dataclass(frozen=True, slots=True)
class TreebarkInput:
    """A template paired with the data it renders against."""

    template: Any
    data: Any = None

    @classmethod
    def from_value(cls, value: Any) -> TreebarkInput:
        """Accept an instance, a ``{"template": ..., "data": ...}`` mapping or a bare template."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping) and "template" in value:
            return cls(value["template"], value.get("data"))
        return cls(value)
