"""Rule catalog — in-process source of discount rules for the pricing engine."""

import json
import logging
import threading
from dataclasses import replace
from pathlib import Path

import pydantic
from pydantic import TypeAdapter

from groundbook.config import settings
from groundbook.schemas.pricing import RuleIn, RuleOut, RuleSet
from groundbook.seed_rules import SEED_RULES
from groundbook.services.pricing_engine import DiscountRule, ValidationError

logger = logging.getLogger(__name__)

_rule_adapter = TypeAdapter(RuleIn)
_rules_adapter = TypeAdapter(list[RuleIn])


def _first_error(exc: pydantic.ValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(part) for part in err.get("loc", ()))
    return f"{loc}: {err.get('msg')}" if loc else str(err.get("msg"))


def parse_rules(payload) -> list[DiscountRule]:
    """Parse rule payloads (a list, or a dict with a "rules" key) into domain rules."""
    try:
        if isinstance(payload, dict):
            parsed = RuleSet.model_validate(payload).rules
        else:
            parsed = _rules_adapter.validate_python(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(f"invalid rule payload: {_first_error(e)}") from e

    rules = []
    seen: set[str] = set()
    for index, item in enumerate(parsed, start=1):
        rule = item.to_rule()
        if rule.id is None:
            rule = replace(rule, id=str(index))
        if rule.id in seen:
            raise ValidationError(f"duplicate rule id {rule.id!r}")
        seen.add(rule.id)
        rules.append(rule)
    return rules


class RuleCatalog:
    """Holds the current rule set as an immutable, ordered snapshot."""

    def __init__(self):
        self._lock = threading.Lock()
        self._rules: tuple[DiscountRule, ...] = ()

    def load(self, path: str | Path | None = None) -> tuple[DiscountRule, ...]:
        source = path if path is not None else settings.pricing_rules_file
        if source:
            file_path = Path(source)
            try:
                payload = json.loads(file_path.read_text(encoding="utf-8"))
            except FileNotFoundError:
                raise ValidationError(f"rules file not found: {file_path}") from None
            except json.JSONDecodeError as e:
                raise ValidationError(f"rules file {file_path} is not valid JSON: {e}") from e
            rules = parse_rules(payload)
            logger.info(f"Loaded {len(rules)} pricing rules from {file_path}")
        else:
            rules = parse_rules(SEED_RULES)
            logger.info(f"Loaded {len(rules)} default pricing rules")

        with self._lock:
            self._rules = tuple(rules)
            return self._rules

    def list_rules(self) -> tuple[DiscountRule, ...]:
        return self._rules

    def get(self, rule_id: str) -> DiscountRule:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        raise KeyError(rule_id)

    def update(
        self,
        rule_id: str,
        *,
        name: str | None = None,
        discount_percent=None,
        condition: dict | None = None,
        active: bool | None = None,
    ) -> DiscountRule:
        """Replace a rule with an updated, validated copy. Only given fields change."""
        with self._lock:
            current = self.get(rule_id)
            payload = RuleOut.from_rule(current).model_dump()
            payload["discount_percent"] = current.discount_percent
            if name is not None:
                payload["name"] = name
            if discount_percent is not None:
                payload["discount_percent"] = discount_percent
            if condition is not None:
                payload["condition"] = condition
            if active is not None:
                payload["active"] = active

            try:
                updated = _rule_adapter.validate_python(payload).to_rule()
            except pydantic.ValidationError as e:
                logger.warning(f"Rejected update to rule {rule_id}: {_first_error(e)}")
                raise ValidationError(f"invalid update for rule {rule_id}: {_first_error(e)}") from e
            except ValidationError as e:
                logger.warning(f"Rejected update to rule {rule_id}: {e}")
                raise

            self._rules = tuple(updated if r.id == rule_id else r for r in self._rules)
            logger.info(f"Updated pricing rule {rule_id} ({updated.kind}, {updated.discount_percent}%)")
            return updated


rule_catalog = RuleCatalog()
