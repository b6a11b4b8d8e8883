"""Condition evaluation for the advisory rule engine.

A condition reads one fact from the evaluation context and compares it with
the value written in the rule. Evaluation never raises: an absent fact, an
unknown operator or a comparison that cannot be made all count as "not met",
so a bad rule can only ever fail to trigger.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from agrisense.models.context import EvaluationContext
from agrisense.models.rule import Condition, Operator


def _exactly_equal(actual: Any, expected: Any) -> bool:
    """Equality without bool/number coercion (True is not 1)."""
    if isinstance(actual, bool) != isinstance(expected, bool):
        return False
    return actual == expected


def _between(actual: Any, bounds: Any) -> bool:
    low, high = bounds
    return low <= actual <= high


COMPARATORS: dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.GREATER_THAN: lambda a, e: a > e,
    Operator.LESS_THAN: lambda a, e: a < e,
    Operator.GREATER_THAN_OR_EQUAL: lambda a, e: a >= e,
    Operator.LESS_THAN_OR_EQUAL: lambda a, e: a <= e,
    Operator.BETWEEN: _between,
    Operator.EQUAL: _exactly_equal,
}


def lookup_fact(
    context: EvaluationContext | Mapping[str, Any], variable: str | None
) -> Any:
    """Read a fact by name, None when it is not in the context."""
    if variable is None:
        return None
    if isinstance(context, EvaluationContext):
        context = context.as_mapping()
    return context.get(variable)


def evaluate_condition(
    condition: Condition,
    context: EvaluationContext | Mapping[str, Any],
) -> bool:
    """Check a condition against the context.

    Args:
        condition: Condition to test
        context: Evaluation context, or any name -> value mapping

    Returns:
        True only if the fact is present and the comparison holds
    """
    actual = lookup_fact(context, condition.variable)
    if actual is None:
        return False

    comparator = COMPARATORS.get(condition.operator)
    if comparator is None:
        return False

    try:
        return bool(comparator(actual, condition.value))
    except (TypeError, ValueError):
        return False
