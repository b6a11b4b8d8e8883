"""Advisory rule table routes.

Lets operators inspect the loaded rule table and pick up an edited rule
file without restarting the service.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from agrisense.api.dependencies import get_rule_engine
from agrisense.config import get_settings
from agrisense.models.rule import Rule
from agrisense.rules.engine import RuleEngine
from agrisense.rules.loader import RuleTableError

logger = logging.getLogger(__name__)

router = APIRouter()


class RuleTableResponse(BaseModel):
    """The rule table currently used for evaluation."""

    version: str | None
    count: int
    source: str | None
    rules: list[Rule]


def _describe(engine: RuleEngine) -> RuleTableResponse:
    table = engine.table
    return RuleTableResponse(
        version=table.version,
        count=len(table),
        source=str(engine.source) if engine.source else None,
        rules=list(table.rules),
    )


@router.get("", response_model=RuleTableResponse)
async def get_rules(engine: RuleEngine = Depends(get_rule_engine)) -> RuleTableResponse:
    """Get the loaded rule table."""
    return _describe(engine)


@router.post("/reload", response_model=RuleTableResponse)
def reload_rules(engine: RuleEngine = Depends(get_rule_engine)) -> RuleTableResponse:
    """Reload the rule file.

    The current table stays active if the new file cannot be loaded. Declared
    sync so the file read runs in the threadpool.
    """
    try:
        engine.reload(strict=get_settings().strict_rules)
    except RuleTableError as e:
        logger.warning(f"Rule reload rejected: {e}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": e.args[0], "problems": e.problems},
        )
    return _describe(engine)
