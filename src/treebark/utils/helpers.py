"""Value helpers shared by the resolver, the condition evaluator and the renderer.

These functions are pure and stateless.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any


class _Undefined:
    """Sentinel for a value that could not be resolved.

    Distinct from ``None`` so that a present-but-null value and a missing one
    can be told apart (the property fallback only runs for missing values).
    Renders as an empty string and is falsy.
    """

    __slots__ = ()

    def __str__(self) -> str:
        return ""

    def __repr__(self) -> str:
        return "Undefined"

    def __bool__(self) -> bool:
        return False

    def __len__(self) -> int:
        return 0

    def __iter__(self):
        return iter(())

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _Undefined)

    def __hash__(self) -> int:
        return hash(_Undefined)


UNDEFINED = _Undefined()


def is_undefined(value: Any) -> bool:
    return isinstance(value, _Undefined)


def is_number(value: Any) -> bool:
    """True for ints and floats; ``bool`` is not a number here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_sequence(value: Any) -> bool:
    """True for lists and tuples (strings are not sequences of items)."""
    return isinstance(value, (list, tuple))


def _json_safe(value: Any, active: set[int]) -> Any:
    """Copy containers into JSON-encodable form: string keys, cycles cut."""
    if not isinstance(value, (Mapping, list, tuple)):
        return value
    if id(value) in active:
        return "[Circular]"
    active.add(id(value))
    try:
        if isinstance(value, Mapping):
            return {
                key if isinstance(key, str) else stringify(key): _json_safe(item, active)
                for key, item in value.items()
            }
        return [_json_safe(item, active) for item in value]
    finally:
        active.discard(id(value))


def stringify(value: Any) -> str:
    """Convert a data value to the text that is interpolated into output.

    Never raises for data values.

    Rules:
        - ``UNDEFINED`` and ``None`` -> ``""``
        - ``True`` / ``False`` -> ``"true"`` / ``"false"``
        - integral floats drop the fraction (``25.0`` -> ``"25"``)
        - lists and mappings -> compact JSON; non-string keys are
          stringified and self-references render as ``"[Circular]"``
        - containers nested too deeply to encode -> ``""``
        - anything else -> ``str(value)``

    Example:
        >>> stringify(0)
        '0'
        >>> stringify(None)
        ''
        >>> stringify([1, "a"])
        '[1,"a"]'
        >>> stringify({(1, 2): "x"})
        '{"[1,2]":"x"}'
    """
    if value is None or isinstance(value, _Undefined):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (Mapping, list, tuple)):
        try:
            return json.dumps(
                _json_safe(value, set()), ensure_ascii=False, separators=(",", ":"), default=str
            )
        except RecursionError:
            return ""
    return str(value)
