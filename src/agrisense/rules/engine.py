"""Rule engine for turning weather facts into farming advisories.

The engine tests every rule of an immutable rule table against an evaluation
context. Every rule whose conditions all hold produces an advisory, in table
order; when none do, a single "conditions stable" advisory is returned so
the result is never empty.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from agrisense.models.advisory import Advisory, PresentationType
from agrisense.models.context import EvaluationContext
from agrisense.models.observation import Observation
from agrisense.models.rule import Rule, RuleTable, Severity
from agrisense.rules.conditions import evaluate_condition
from agrisense.rules.context import build_context
from agrisense.rules.loader import load_rule_table

logger = logging.getLogger(__name__)

SEVERITY_TO_TYPE: dict[str, PresentationType] = {
    Severity.DANGER.value: PresentationType.DANGER,
    Severity.ALERT.value: PresentationType.DANGER,  # Rendered like danger
    Severity.WARNING.value: PresentationType.WARNING,
    Severity.INFO.value: PresentationType.INFO,
}

# Keyed by the rule's raw severity, not by its presentation type
DEFAULT_ICONS: dict[str, str] = {
    "danger": "WarningCircle",
    "alert": "Warning",
    "warning": "Warning",
    "success": "CheckCircle",
}
FALLBACK_ICON = "Info"

STABLE_ADVISORY = Advisory(
    type=PresentationType.SUCCESS,
    title="Conditions Stable",
    message="No critical weather alerts detected for now. Routine monitoring advised.",
    icon="Plant",
)


def map_severity_to_type(severity: str) -> PresentationType:
    """Map a rule severity label to its presentation type (unknown -> info)."""
    return SEVERITY_TO_TYPE.get(severity, PresentationType.INFO)


def get_icon_for_severity(icon: str | None, severity: str) -> str:
    """Use the rule's own icon, else a default chosen by raw severity."""
    if icon:
        return icon
    return DEFAULT_ICONS.get(severity, FALLBACK_ICON)


def rule_triggers(rule: Rule, context: EvaluationContext | Mapping[str, Any]) -> bool:
    """Check whether every condition of a rule holds.

    Conditions are tested in order and testing stops at the first failure.
    A rule with an empty condition list always triggers; a malformed rule
    never does.
    """
    if not rule.is_well_formed:
        logger.debug(f"Skipping malformed rule {rule.id!r}: {', '.join(rule.problems())}")
        return False
    return all(evaluate_condition(c, context) for c in rule.conditions)


def to_advisory(rule: Rule) -> Advisory:
    """Build the advisory a triggered rule emits."""
    return Advisory(
        type=map_severity_to_type(rule.severity),
        title=rule.title,
        message=rule.message,
        icon=get_icon_for_severity(rule.icon, rule.severity),
    )


def evaluate_rules(
    context: EvaluationContext | Mapping[str, Any],
    table: RuleTable,
) -> list[Advisory]:
    """Evaluate a rule table against a context.

    Args:
        context: Facts to test the rules against
        table: Rules, in evaluation order

    Returns:
        One advisory per triggered rule in table order, or the single
        stable-conditions advisory when nothing triggered
    """
    facts = context.as_mapping() if isinstance(context, EvaluationContext) else context
    advisories = [to_advisory(rule) for rule in table.rules if rule_triggers(rule, facts)]

    if not advisories:
        advisories.append(STABLE_ADVISORY)

    return advisories


@dataclass(frozen=True)
class EvaluationResult:
    """Context and advisories produced for one observation."""

    context: EvaluationContext
    advisories: list[Advisory] = field(default_factory=list)
    rules_version: str | None = None

    @property
    def triggered(self) -> bool:
        """True if at least one rule (not just the fallback) fired."""
        return self.advisories != [STABLE_ADVISORY]


class RuleEngine:
    """Evaluates observations against a swappable, immutable rule table.

    The table reference is read once per evaluation and replaced as a whole
    on reload, so concurrent evaluations each see one complete table.

    Example:
        ```python
        engine = RuleEngine.from_file("rules.json")

        advisories = engine.generate_advisories(observation)

        # Later, pick up an edited rule file
        engine.reload("rules.json", strict=True)
        ```
    """

    def __init__(self, table: RuleTable, source: Path | None = None):
        """Initialize the engine.

        Args:
            table: Rule table to evaluate
            source: File the table was loaded from, used by reload()
        """
        self._table = table
        self._source = source

    @classmethod
    def from_file(cls, path: str | Path, strict: bool = False) -> RuleEngine:
        """Create an engine from a rule file."""
        path = Path(path)
        return cls(load_rule_table(path, strict=strict), source=path)

    @property
    def table(self) -> RuleTable:
        return self._table

    @property
    def source(self) -> Path | None:
        return self._source

    def swap_table(self, table: RuleTable) -> RuleTable:
        """Replace the rule table, returning the previous one."""
        previous, self._table = self._table, table
        logger.info(
            f"Rule table swapped: {len(previous)} -> {len(table)} rules "
            f"(version {table.version or 'unversioned'})"
        )
        return previous

    def reload(self, path: str | Path | None = None, strict: bool = False) -> RuleTable:
        """Load a rule file and swap it in.

        The new table is fully loaded before the swap; if loading fails the
        current table stays in place and the error propagates.

        Raises:
            RuleTableError: If the file cannot be loaded
            ValueError: If no path is given and the engine has no source file
        """
        if path is None:
            if self._source is None:
                raise ValueError("No rule file to reload from")
            path = self._source
        path = Path(path)
        table = load_rule_table(path, strict=strict)
        self._source = path
        self.swap_table(table)
        return table

    def evaluate(self, observation: Observation) -> EvaluationResult:
        """Build the context for an observation and evaluate it."""
        table = self._table
        context = build_context(observation)
        return EvaluationResult(
            context=context,
            advisories=evaluate_rules(context, table),
            rules_version=table.version,
        )

    def generate_advisories(self, observation: Observation) -> list[Advisory]:
        """Advisories for an observation, never empty."""
        return self.evaluate(observation).advisories
