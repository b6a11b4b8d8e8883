"""Rule table loading.

Rule tables are JSON documents `{"rules": [...]}` (see
`agrisense.models.rule`). Loading is lenient by default: a rule entry that
cannot be parsed at all is logged and dropped, and a rule with defects is
kept but will never trigger. With `strict=True` any defect rejects the
whole table, which is how startup validation and reloads are guarded.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from agrisense.models.rule import Rule, RuleTable

logger = logging.getLogger(__name__)


class RuleTableError(Exception):
    """Raised when a rule table cannot be loaded."""

    def __init__(self, message: str, problems: list[str] | None = None):
        super().__init__(message)
        self.problems = problems or []

    def __str__(self) -> str:
        message = super().__str__()
        if not self.problems:
            return message
        return message + "\n" + "\n".join(f"  - {p}" for p in self.problems)


def _rule_label(index: int, entry: Any) -> str:
    if isinstance(entry, dict) and entry.get("id") is not None:
        return f"rule {index} ({entry['id']})"
    return f"rule {index}"


def parse_rule_table(document: Any, strict: bool = False) -> RuleTable:
    """Build a RuleTable from a decoded rule document.

    Args:
        document: Decoded JSON, expected to be `{"rules": [...]}`
        strict: Reject the table if any rule has a defect

    Returns:
        The parsed RuleTable, rules in document order

    Raises:
        RuleTableError: If the document has no rule list, or in strict mode
            if any rule is defective
    """
    if not isinstance(document, dict) or not isinstance(document.get("rules"), list):
        raise RuleTableError("Rule document must be an object with a 'rules' list")

    rules: list[Rule] = []
    problems: list[str] = []

    for index, entry in enumerate(document["rules"]):
        label = _rule_label(index, entry)
        try:
            rule = Rule.model_validate(entry)
        except ValidationError as e:
            problems.append(f"{label}: {e.error_count()} validation error(s)")
            logger.warning(f"Dropping unparseable {label}: {e}")
            continue

        defects = rule.problems()
        if defects:
            problems.extend(f"{label}: {d}" for d in defects)
            logger.warning(f"{label} will never trigger: {', '.join(defects)}")
        rules.append(rule)

    if strict and problems:
        raise RuleTableError("Rule table failed validation", problems)

    version = document.get("version")
    return RuleTable(
        version=str(version) if version is not None else None,
        rules=tuple(rules),
    )


def load_rule_table(path: str | Path, strict: bool = False) -> RuleTable:
    """Read and parse a rule table file.

    Raises:
        RuleTableError: If the file is missing, not JSON, or fails parsing
    """
    path = Path(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise RuleTableError(f"Cannot read rule file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise RuleTableError(f"Rule file {path} is not valid JSON: {e}") from e

    table = parse_rule_table(document, strict=strict)
    logger.info(f"Loaded {len(table)} advisory rules from {path}")
    return table
