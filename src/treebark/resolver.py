"""Property resolution against a data value and its scope chain.

Paths:
    ``.``               the current data itself
    ``name``            key of the current mapping
    ``items.0.name``    nested keys and list indices
    ``..name``          key of the nearest ancestor context
    ``../..name``       two levels up (``....name`` is equivalent)

The scope chain is an immutable tuple of ancestor data values, innermost last.
Every ``$bind`` (and every array iteration) pushes the pre-bind data onto it.

Sandbox:
Only mappings and lists/tuples are indexed. Attributes of arbitrary Python
objects are never read, and the segments in ``BLOCKED_PROPERTY_NAMES`` plus
any dunder segment are refused outright.

Thread-Safety:
All functions are pure; nothing is cached between calls.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from treebark.errors import BindingError, BlockedPropertyError, ConditionalError, PropertyFallbackError
from treebark.tags import BLOCKED_PROPERTY_NAMES
from treebark.utils.helpers import UNDEFINED, is_sequence, is_undefined

if TYPE_CHECKING:
    from treebark.diagnostics import Diagnostics

PropertyFallback = Callable[[str, Any, tuple[Any, ...]], Any]


def is_blocked_segment(segment: str) -> bool:
    """True for path segments that name reflection or prototype vectors."""
    return segment in BLOCKED_PROPERTY_NAMES or segment.startswith("__")


def split_parent_reference(path: str) -> tuple[int, str]:
    """Split a path into (parent levels, remaining path).

    Example:
        >>> split_parent_reference("../..company.name")
        (2, 'company.name')
        >>> split_parent_reference("title")
        (0, 'title')
    """
    levels = 0
    rest = path
    while rest.startswith(".."):
        levels += 1
        rest = rest[2:]
        if rest.startswith("/"):
            rest = rest[1:]
    if levels and rest.startswith("."):
        rest = rest[1:]
    return levels, rest


def _index(current: Any, segment: str) -> Any:
    if isinstance(current, Mapping):
        if segment in current:
            return current[segment]
        # YAML sources may carry integer keys
        if segment.isdigit() and int(segment) in current:
            return current[int(segment)]
        return UNDEFINED
    if is_sequence(current):
        if segment.isdigit():
            position = int(segment)
            if position < len(current):
                return current[position]
        return UNDEFINED
    return UNDEFINED


def resolve_property(
    data: Any,
    path: str,
    ancestors: Sequence[Any] = (),
    context: Diagnostics | None = None,
    fallback: PropertyFallback | None = None,
) -> Any:
    """Resolve a dotted / parent-relative path.

    Args:
        data: Current data context
        path: Path expression (already trimmed)
        ancestors: Scope chain, outermost first
        context: Diagnostics sink for blocked-access warnings
        fallback: Called as ``fallback(path, data, ancestors)`` when
            resolution fails; its result is returned instead of UNDEFINED

    Returns:
        The resolved value, or ``UNDEFINED``. Never raises for missing data.

    Raises:
        PropertyFallbackError: If the fallback itself raises

    Example:
        >>> resolve_property({"user": {"name": "Ada"}}, "user.name")
        'Ada'
        >>> resolve_property({}, "..company", ({"company": "ACME"},))
        'ACME'
    """
    if path == ".":
        return data

    ancestors = tuple(ancestors)
    levels, rest = split_parent_reference(path)

    current = data
    found = True
    if levels:
        if levels <= len(ancestors):
            current = ancestors[len(ancestors) - levels]
        else:
            found = False

    if found and rest:
        for segment in rest.split("."):
            if is_blocked_segment(segment):
                if context is not None:
                    context.report(BlockedPropertyError(segment, path))
                return UNDEFINED
            current = _index(current, segment)
            if is_undefined(current):
                found = False
                break

    if found:
        return current
    if fallback is None:
        return UNDEFINED

    try:
        value = fallback(path, data, ancestors)
    except Exception as exc:
        raise PropertyFallbackError(path, exc) from exc
    return UNDEFINED if value is None else value


def validate_path_expression(key: str, path: Any) -> None:
    """Validate a ``$bind`` or ``$check`` path.

    Both accept literal property paths only: parent access (``..``) and
    interpolation markers (``{{``) are reserved for text and attribute
    interpolation. The identity path ``.`` is always valid.

    Args:
        key: ``"$bind"`` or ``"$check"`` (used for the error type and message)
        path: The path value from the template

    Raises:
        BindingError: For an invalid ``$bind``
        ConditionalError: For an invalid ``$check``
    """
    error_type = BindingError if key == "$bind" else ConditionalError
    if not isinstance(path, str) or not path.strip():
        raise error_type(f"{key} must be a non-empty property path string, got {path!r}")
    if path == ".":
        return
    if ".." in path:
        raise error_type(
            f"{key} does not support parent context access (..) - use interpolation "
            f'{{{{..prop}}}} in content/attributes instead. Invalid: {key}: "{path}"'
        )
    if "{{" in path:
        raise error_type(
            f"{key} does not support interpolation {{{{...}}}} - use literal property "
            f'paths only. Invalid: {key}: "{path}"'
        )
