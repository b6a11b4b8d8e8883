"""Advisory rule models.

A rule table is a JSON document of the form:

```json
{
  "version": "2024.1",
  "rules": [
    {
      "id": "high_wind_spray",
      "severity": "warning",
      "title": "Avoid Spraying",
      "message": "Strong winds will cause pesticide drift.",
      "icon": "Wind",
      "conditions": [
        {"var": "wind_kmph", "operator": "gt", "value": 20}
      ]
    }
  ]
}
```

Rules are parsed leniently: an unknown operator or a missing field does not
reject the rule, it only makes the rule unable to trigger. `Rule.problems()`
lists those defects so a strict loader can refuse them up front.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class Operator(str, Enum):
    """Comparison operators available to conditions."""

    GREATER_THAN = "gt"
    LESS_THAN = "lt"
    GREATER_THAN_OR_EQUAL = "gte"
    LESS_THAN_OR_EQUAL = "lte"
    BETWEEN = "between"  # Inclusive [low, high]
    EQUAL = "eq"

    @classmethod
    def parse(cls, value: Any) -> Operator | None:
        """Resolve an operator name, returning None when it is not recognised."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class Severity(str, Enum):
    """Severity labels a rule author can assign."""

    DANGER = "danger"
    ALERT = "alert"
    WARNING = "warning"
    INFO = "info"


class Condition(BaseModel):
    """A predicate over a single context fact.

    Example:
        ```python
        # Wind faster than 30 km/h
        Condition(variable="wind_kmph", operator=Operator.GREATER_THAN, value=30)

        # Humidity between 80% and 95%, both ends included
        Condition(variable="humidity_pct", operator="between", value=[80, 95])
        ```
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    variable: str | None = Field(
        default=None,
        validation_alias=AliasChoices("var", "variable"),
        description="Context fact the condition reads",
    )
    operator: Operator | None = Field(
        default=None, description="Comparison operator; None if unrecognised"
    )
    raw_operator: str | None = Field(
        default=None, description="Operator as written in the rule document"
    )
    value: Any = Field(default=None, description="Scalar, or [low, high] for between")

    @model_validator(mode="before")
    @classmethod
    def resolve_operator(cls, data: Any) -> Any:
        """Keep unknown operators instead of failing validation."""
        if isinstance(data, dict) and "operator" in data:
            raw = data["operator"]
            data = dict(data)
            data["operator"] = Operator.parse(raw)
            data.setdefault(
                "raw_operator", raw.value if isinstance(raw, Operator) else str(raw)
            )
        return data

    def problems(self) -> list[str]:
        """Describe what keeps this condition from ever being true."""
        found: list[str] = []
        if not self.variable:
            found.append("missing variable")
        if self.operator is None:
            if self.raw_operator is None:
                found.append("missing operator")
            else:
                found.append(f"unknown operator {self.raw_operator!r}")
        elif self.operator is Operator.BETWEEN:
            if not isinstance(self.value, (list, tuple)) or len(self.value) != 2:
                found.append(f"between expects [low, high], got {self.value!r}")
        elif self.value is None:
            found.append("missing value")
        return found


class Rule(BaseModel):
    """A severity-tagged set of conditions and the advisory text they produce."""

    model_config = ConfigDict(frozen=True)

    id: str | int | None = None
    severity: str = Field(
        default=Severity.INFO.value,
        description="Raw severity label (danger, alert, warning, info)",
    )
    title: str | None = None
    message: str | None = None
    icon: str | None = None
    conditions: tuple[Condition, ...] | None = Field(
        default=None, description="All must hold for the rule to trigger"
    )

    @property
    def is_well_formed(self) -> bool:
        """True when the rule carries the fields an advisory needs."""
        return (
            self.title is not None
            and self.message is not None
            and self.conditions is not None
        )

    def problems(self) -> list[str]:
        """Describe every defect in this rule, prefixed with its location."""
        found: list[str] = []
        for name in ("title", "message", "conditions"):
            if getattr(self, name) is None:
                found.append(f"missing {name}")
        for index, condition in enumerate(self.conditions or ()):
            found.extend(f"condition {index}: {p}" for p in condition.problems())
        return found


class RuleTable(BaseModel):
    """An ordered, immutable set of rules."""

    model_config = ConfigDict(frozen=True)

    version: str | None = None
    rules: tuple[Rule, ...] = Field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.rules)

    def get(self, rule_id: str | int) -> Rule | None:
        """Find a rule by id."""
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None
