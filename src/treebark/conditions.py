"""Condition evaluation for ``$if`` nodes, conditional attributes and ``$filter``.

A conditional descriptor names a data path in ``$check`` and optionally
compares the resolved value with one or more operators:

**Comparison Operators**:
    - ``$<``, ``$>``, ``$<=``, ``$>=``: numeric comparison (both sides numbers)
    - ``$=``: strict equality (no cross-type coercion)
    - ``$in``: strict membership in a list

**Modifiers**:
    - ``$join``: ``"OR"`` to require any operator, otherwise all must hold
    - ``$not``: negate the final result

Without operators the check is a truthiness test. Truthiness follows an
explicit falsy set: ``UNDEFINED``, ``None``, ``False``, zero, NaN and the
empty string. Empty lists and mappings are truthy.

Type mismatches never raise; the operator simply does not hold.

Example:
    >>> evaluate_condition(40, {"$check": "age", "$>=": 18, "$<=": 65})
    True
    >>> evaluate_condition(30, {"$check": "age", "$<": 18, "$>": 65, "$join": "OR"})
    False
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from treebark.errors import ConditionalError
from treebark.resolver import PropertyFallback, resolve_property, validate_path_expression
from treebark.tags import CHECK_KEY, ELSE_KEY, JOIN_KEY, NOT_KEY, OPERATORS, THEN_KEY
from treebark.utils.helpers import is_number, is_sequence, is_undefined

if TYPE_CHECKING:
    from treebark.diagnostics import Diagnostics


def is_truthy(value: Any) -> bool:
    """Truthiness over the explicit falsy set."""
    if value is None or value is False or is_undefined(value):
        return False
    if isinstance(value, str):
        return value != ""
    if is_number(value):
        return not (value == 0 or (isinstance(value, float) and math.isnan(value)))
    return True


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without coercion between booleans, numbers and strings.

    Lists and mappings are equal only to themselves (identity, not contents).

    Example:
        >>> strict_equals(1, 1.0)
        True
        >>> strict_equals(1, True)
        False
        >>> strict_equals("1", 1)
        False
        >>> strict_equals([1], [1])
        False
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if is_number(left) and is_number(right):
        return left == right
    if is_undefined(left) or is_undefined(right):
        return is_undefined(left) and is_undefined(right)
    if isinstance(left, (Mapping, list, tuple)) or isinstance(right, (Mapping, list, tuple)):
        return left is right
    return type(left) is type(right) and left == right


def _numeric(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def operator(value: Any, operand: Any) -> bool:
        return is_number(value) and is_number(operand) and compare(value, operand)

    return operator


def _op_in(value: Any, operand: Any) -> bool:
    return is_sequence(operand) and any(strict_equals(value, item) for item in operand)


_OPERATOR_FUNCS: dict[str, Callable[[Any, Any], bool]] = {
    "$<": _numeric(lambda a, b: a < b),
    "$>": _numeric(lambda a, b: a > b),
    "$<=": _numeric(lambda a, b: a <= b),
    "$>=": _numeric(lambda a, b: a >= b),
    "$=": strict_equals,
    "$in": _op_in,
}


def evaluate_condition(value: Any, descriptor: Mapping[str, Any]) -> bool:
    """Evaluate a conditional descriptor against an already-resolved value.

    Args:
        value: The value ``$check`` resolved to
        descriptor: Mapping holding operators, ``$join`` and ``$not``

    Returns:
        Whether the condition holds
    """
    results = [
        _OPERATOR_FUNCS[op](value, descriptor[op]) for op in OPERATORS if op in descriptor
    ]
    if not results:
        result = is_truthy(value)
    elif descriptor.get(JOIN_KEY) == "OR":
        result = any(results)
    else:
        result = all(results)

    if is_truthy(descriptor.get(NOT_KEY)):
        return not result
    return result


def is_conditional_value(value: Any) -> bool:
    """True for mappings that carry a string ``$check`` (conditional attribute values)."""
    return isinstance(value, Mapping) and isinstance(value.get(CHECK_KEY), str)


def check_descriptor(
    descriptor: Mapping[str, Any],
    data: Any,
    ancestors: Sequence[Any] = (),
    context: Diagnostics | None = None,
    fallback: PropertyFallback | None = None,
) -> bool:
    """Validate ``$check``, resolve it against ``data`` and evaluate the descriptor.

    Raises:
        ConditionalError: If ``$check`` is missing or not a valid path
    """
    if CHECK_KEY not in descriptor:
        raise ConditionalError(
            '"$check" is required in conditional descriptors',
            suggestion='Add a data path, e.g. "$check": "user.isAdmin"',
        )
    path = descriptor[CHECK_KEY]
    validate_path_expression(CHECK_KEY, path)
    value = resolve_property(data, path.strip(), ancestors, context, fallback)
    return evaluate_condition(value, descriptor)


def evaluate_conditional_value(
    descriptor: Mapping[str, Any],
    data: Any,
    ancestors: Sequence[Any] = (),
    context: Diagnostics | None = None,
    fallback: PropertyFallback | None = None,
) -> Any:
    """Pick ``$then`` or ``$else`` for a conditional attribute value.

    Returns ``""`` when the condition fails and no ``$else`` is given, so
    the attribute renders with an empty value.

    Example:
        >>> evaluate_conditional_value(
        ...     {"$check": "active", "$then": "on", "$else": "off"}, {"active": 0}
        ... )
        'off'
    """
    if check_descriptor(descriptor, data, ancestors, context, fallback):
        return descriptor.get(THEN_KEY, "")
    return descriptor.get(ELSE_KEY, "")
