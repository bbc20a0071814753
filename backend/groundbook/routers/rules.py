"""Pricing rules router — list, inspect and adjust the active discount rules."""

import logging

from fastapi import APIRouter, HTTPException

from groundbook.schemas.pricing import RuleOut, RuleUpdate
from groundbook.services.pricing_engine import ValidationError
from groundbook.services.rule_catalog import rule_catalog

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def list_rules():
    """List all rules in evaluation order, including inactive ones."""
    return {"rules": [RuleOut.from_rule(r) for r in rule_catalog.list_rules()]}


@router.get("/{rule_id}", response_model=RuleOut)
async def get_rule(rule_id: str):
    try:
        rule = rule_catalog.get(rule_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Pricing rule not found")
    return RuleOut.from_rule(rule)


@router.patch("/{rule_id}", response_model=RuleOut)
async def update_rule(rule_id: str, req: RuleUpdate):
    """Update a rule's discount, condition, name or active flag."""
    update_data = req.model_dump(exclude_unset=True, exclude_none=True)
    try:
        rule = rule_catalog.update(rule_id, **update_data)
    except KeyError:
        raise HTTPException(status_code=404, detail="Pricing rule not found")
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return RuleOut.from_rule(rule)
