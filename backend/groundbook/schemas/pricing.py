from datetime import date
from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator

from groundbook.services.pricing_engine import (
    MAX_WINDOW_HOUR,
    BulkCondition,
    DiscountRule,
    PricingResult,
    TimeWindow,
    WeekdayCondition,
)
from groundbook.services.time_slots import parse_hour


# ─── Rule conditions ───


class WeekdayConditionIn(BaseModel):
    days_of_week: list[int]

    def to_condition(self) -> WeekdayCondition:
        return WeekdayCondition(days_of_week=frozenset(self.days_of_week))


class BulkConditionIn(BaseModel):
    min_hours: int

    def to_condition(self) -> BulkCondition:
        return BulkCondition(min_hours=self.min_hours)


class TimeWindowIn(BaseModel):
    """Accepts hours as ints or "HH:MM" strings ("12:00")."""

    start: int | str
    end: int | str

    def to_condition(self) -> TimeWindow:
        return TimeWindow(
            start=parse_hour(self.start, max_hour=MAX_WINDOW_HOUR),
            end=parse_hour(self.end, max_hour=MAX_WINDOW_HOUR),
        )


# ─── Rules (discriminated on kind) ───


class RuleBase(BaseModel):
    id: str | None = None
    name: str | None = None
    discount_percent: Decimal
    active: bool = True

    def to_rule(self) -> DiscountRule:
        return DiscountRule(
            kind=self.kind,
            discount_percent=self.discount_percent,
            condition=self.condition.to_condition(),
            active=self.active,
            id=self.id,
            name=self.name,
        )


class WeekdayRuleIn(RuleBase):
    kind: Literal["weekday"]
    condition: WeekdayConditionIn


class BulkRuleIn(RuleBase):
    kind: Literal["bulk"]
    condition: BulkConditionIn


class TimeWindowRuleIn(RuleBase):
    kind: Literal["off-peak", "peak"]
    condition: TimeWindowIn


RuleIn = Annotated[
    Union[WeekdayRuleIn, BulkRuleIn, TimeWindowRuleIn],
    Field(discriminator="kind"),
]


class RuleSet(BaseModel):
    rules: list[RuleIn]


def _condition_out(rule: DiscountRule) -> dict:
    cond = rule.condition
    if isinstance(cond, WeekdayCondition):
        return {"days_of_week": sorted(cond.days_of_week)}
    if isinstance(cond, BulkCondition):
        return {"min_hours": cond.min_hours}
    return {"start": cond.start, "end": cond.end}


class RuleOut(BaseModel):
    id: str | None
    name: str | None
    kind: str
    discount_percent: float
    condition: dict
    active: bool

    @classmethod
    def from_rule(cls, rule: DiscountRule) -> "RuleOut":
        return cls(
            id=rule.id,
            name=rule.name,
            kind=rule.kind,
            discount_percent=float(rule.discount_percent),
            condition=_condition_out(rule),
            active=rule.active,
        )


class RuleUpdate(BaseModel):
    """Partial update; the rule's kind never changes."""

    name: str | None = None
    discount_percent: Decimal | None = None
    condition: dict | None = None
    active: bool | None = None


# ─── Quotes ───


class QuoteRequest(BaseModel):
    base_price: Decimal
    date: date
    start_time: int | str
    duration_hours: int
    rules: list[RuleIn] | None = None
    match_mode: str | None = None

    @field_validator("start_time")
    @classmethod
    def _strip_time(cls, v):
        return v.strip() if isinstance(v, str) else v


class AppliedDiscountOut(BaseModel):
    rule_id: str | None
    kind: str
    percent: float
    detail: str


class QuoteResponse(BaseModel):
    final_price: int
    base_total: float
    discount_amount: float
    total_discount_percent: float
    discount_details: list[str]
    applied: list[AppliedDiscountOut]
    formatted: dict[str, str]

    @classmethod
    def from_result(cls, result: PricingResult, formatter) -> "QuoteResponse":
        return cls(
            final_price=result.final_price,
            base_total=float(result.base_total),
            discount_amount=float(result.discount_amount),
            total_discount_percent=float(result.total_discount_percent),
            discount_details=list(result.discount_details),
            applied=[
                AppliedDiscountOut(rule_id=a.rule_id, kind=a.kind, percent=float(a.percent), detail=a.detail)
                for a in result.applied
            ],
            formatted={
                "base_total": formatter(result.base_total),
                "discount_amount": formatter(result.discount_amount),
                "final_price": formatter(result.final_price),
            },
        )


class SlotQuoteOut(BaseModel):
    hour: int
    time: str
    display: str
    final_price: int
    total_discount_percent: float
    discount_details: list[str]
