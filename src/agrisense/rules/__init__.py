"""Rule engine for evaluating weather facts against farming advisory rules."""

from agrisense.rules.conditions import evaluate_condition
from agrisense.rules.context import build_context
from agrisense.rules.engine import (
    EvaluationResult,
    RuleEngine,
    evaluate_rules,
    get_icon_for_severity,
    map_severity_to_type,
)
from agrisense.rules.loader import RuleTableError, load_rule_table, parse_rule_table

__all__ = [
    "RuleEngine",
    "EvaluationResult",
    "evaluate_rules",
    "evaluate_condition",
    "build_context",
    "get_icon_for_severity",
    "map_severity_to_type",
    "RuleTableError",
    "load_rule_table",
    "parse_rule_table",
]
