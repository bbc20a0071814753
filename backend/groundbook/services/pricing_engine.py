"""Pricing engine — applies discount rules to a ground booking and explains the result."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Iterable, Sequence

logger = logging.getLogger(__name__)

DISCOUNT_CAP_PERCENT = Decimal("50")
MAX_START_HOUR = 47   # 24..47 are past-midnight slots of the same operating day
MAX_WINDOW_HOUR = 48
MAX_BASE_PRICE = Decimal("1000000000000")

RULE_KINDS = ("weekday", "bulk", "off-peak", "peak")
MATCH_MODES = ("first", "all")


class ValidationError(ValueError):
    """Raised for malformed pricing input. Never corrected silently."""


def to_decimal(value, label: str = "value") -> Decimal:
    """Convert an int/str/float/Decimal amount without float drift."""
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError(f"{label} must be a number, got {value!r}") from None
    if not result.is_finite():
        raise ValidationError(f"{label} must be finite, got {value!r}")
    return result


def _require_int(value, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{label} must be an integer, got {value!r}")
    return value


def format_percent(percent: Decimal) -> str:
    """15 -> '15', 12.50 -> '12.5'."""
    return format(percent.normalize(), "f")


# ─── Rule conditions (one variant per rule kind) ───


@dataclass(frozen=True)
class WeekdayCondition:
    days_of_week: frozenset[int]  # 0=Sunday .. 6=Saturday

    def __post_init__(self):
        try:
            days = frozenset(_require_int(d, "day_of_week") for d in self.days_of_week)
        except TypeError:
            raise ValidationError(f"days_of_week must be a collection, got {self.days_of_week!r}") from None
        if not days:
            raise ValidationError("weekday condition needs at least one day")
        bad = sorted(d for d in days if not 0 <= d <= 6)
        if bad:
            raise ValidationError(f"days of week must be 0-6, got {bad}")
        object.__setattr__(self, "days_of_week", days)


@dataclass(frozen=True)
class BulkCondition:
    min_hours: int

    def __post_init__(self):
        _require_int(self.min_hours, "min_hours")
        if self.min_hours <= 0:
            raise ValidationError(f"min_hours must be positive, got {self.min_hours}")


@dataclass(frozen=True)
class TimeWindow:
    """Half-open hour range [start, end)."""

    start: int
    end: int

    def __post_init__(self):
        _require_int(self.start, "window start")
        _require_int(self.end, "window end")
        if not (0 <= self.start <= MAX_WINDOW_HOUR and 0 <= self.end <= MAX_WINDOW_HOUR):
            raise ValidationError(f"time window hours must be 0-{MAX_WINDOW_HOUR}, got {self.start}-{self.end}")
        if self.start >= self.end:
            raise ValidationError(f"time window start must be before end, got {self.start}-{self.end}")

    def contains(self, hour: int) -> bool:
        if self.start <= hour < self.end:
            return True
        return hour >= 24 and self.start <= hour - 24 < self.end


CONDITION_TYPES: dict[str, type] = {
    "weekday": WeekdayCondition,
    "bulk": BulkCondition,
    "off-peak": TimeWindow,
    "peak": TimeWindow,
}


@dataclass(frozen=True)
class DiscountRule:
    kind: str
    discount_percent: Decimal
    condition: WeekdayCondition | BulkCondition | TimeWindow
    active: bool = True
    id: str | None = None
    name: str | None = None

    def __post_init__(self):
        if self.kind not in CONDITION_TYPES:
            raise ValidationError(f"unknown rule kind {self.kind!r}, expected one of {', '.join(RULE_KINDS)}")
        expected = CONDITION_TYPES[self.kind]
        if not isinstance(self.condition, expected):
            raise ValidationError(
                f"{self.kind} rule needs a {expected.__name__} condition, got {type(self.condition).__name__}"
            )
        percent = to_decimal(self.discount_percent, "discount_percent")
        if not 0 <= percent <= 100:
            raise ValidationError(f"discount_percent must be within 0-100, got {percent}")
        object.__setattr__(self, "discount_percent", percent)
        if not isinstance(self.active, bool):
            raise ValidationError(f"active must be true or false, got {self.active!r}")


# ─── Request / result values ───


@dataclass(frozen=True)
class BookingRequest:
    date: date
    start_time: int
    duration_hours: int

    def __post_init__(self):
        if not isinstance(self.date, date):
            raise ValidationError(f"date must be a calendar date, got {self.date!r}")
        _require_int(self.start_time, "start_time")
        if not 0 <= self.start_time <= MAX_START_HOUR:
            raise ValidationError(f"start_time must be 0-{MAX_START_HOUR}, got {self.start_time}")
        _require_int(self.duration_hours, "duration_hours")
        if self.duration_hours <= 0:
            raise ValidationError(f"duration_hours must be positive, got {self.duration_hours}")

    @property
    def day_of_week(self) -> int:
        # Python's weekday() is Monday=0; rules use Sunday=0.
        return (self.date.weekday() + 1) % 7


@dataclass(frozen=True)
class AppliedDiscount:
    rule_id: str | None
    kind: str
    percent: Decimal
    detail: str


@dataclass
class PricingResult:
    final_price: int
    total_discount_percent: Decimal
    discount_details: list[str] = field(default_factory=list)
    base_total: Decimal = Decimal("0")
    applied: list[AppliedDiscount] = field(default_factory=list)

    @property
    def discount_amount(self) -> Decimal:
        return self.base_total - self.final_price


# ─── Checkers, one per contributing rule kind ───


class DiscountChecker(ABC):
    kind: str

    def candidates(self, rules: Sequence[DiscountRule]) -> list[DiscountRule]:
        return [r for r in rules if r.active and r.kind == self.kind]

    @abstractmethod
    def check(
        self,
        rules: Sequence[DiscountRule],
        request: BookingRequest,
        match_mode: str,
    ) -> list[AppliedDiscount]:
        ...


class WeekdayChecker(DiscountChecker):
    kind = "weekday"

    def check(self, rules, request, match_mode) -> list[AppliedDiscount]:
        day = request.day_of_week
        matched = [r for r in self.candidates(rules) if day in r.condition.days_of_week]
        if match_mode == "first":
            matched = matched[:1]
        return [
            AppliedDiscount(
                rule_id=r.id,
                kind=self.kind,
                percent=r.discount_percent,
                detail=f"Weekday discount: {format_percent(r.discount_percent)}%",
            )
            for r in matched
        ]


class BulkChecker(DiscountChecker):
    """Single winner: the highest threshold the duration reaches."""

    kind = "bulk"

    def check(self, rules, request, match_mode) -> list[AppliedDiscount]:
        tiers = sorted(self.candidates(rules), key=lambda r: r.condition.min_hours, reverse=True)
        for rule in tiers:
            if request.duration_hours >= rule.condition.min_hours:
                return [
                    AppliedDiscount(
                        rule_id=rule.id,
                        kind=self.kind,
                        percent=rule.discount_percent,
                        detail=f"{rule.condition.min_hours}+ hours discount: {format_percent(rule.discount_percent)}%",
                    )
                ]
        return []


class OffPeakChecker(DiscountChecker):
    kind = "off-peak"

    def check(self, rules, request, match_mode) -> list[AppliedDiscount]:
        candidates = self.candidates(rules)
        if match_mode == "first":
            # Only the first off-peak rule is considered, matching or not.
            candidates = candidates[:1]
        return [
            AppliedDiscount(
                rule_id=r.id,
                kind=self.kind,
                percent=r.discount_percent,
                detail=f"Off-peak discount: {format_percent(r.discount_percent)}%",
            )
            for r in candidates
            if r.condition.contains(request.start_time)
        ]


# Evaluation order determines the order of discount_details.
CHECKERS: tuple[DiscountChecker, ...] = (WeekdayChecker(), BulkChecker(), OffPeakChecker())


class PricingEngine:
    """Computes a booking price from a base hourly rate and a set of discount rules.

    Stateless: rules are passed in per call and never cached or modified.
    """

    def __init__(self, checkers: Iterable[DiscountChecker] = CHECKERS):
        self.checkers = tuple(checkers)

    def quote(
        self,
        base_price,
        request: BookingRequest,
        rules: Sequence[DiscountRule] = (),
        match_mode: str = "first",
    ) -> PricingResult:
        base = to_decimal(base_price, "base_price")
        if base < 0:
            raise ValidationError(f"base_price must not be negative, got {base}")
        if base > MAX_BASE_PRICE:
            raise ValidationError(f"base_price must not exceed {MAX_BASE_PRICE}, got {base}")
        if not isinstance(request, BookingRequest):
            raise ValidationError(f"request must be a BookingRequest, got {type(request).__name__}")
        if match_mode not in MATCH_MODES:
            raise ValidationError(f"match_mode must be one of {', '.join(MATCH_MODES)}, got {match_mode!r}")
        rules = list(rules)
        for rule in rules:
            if not isinstance(rule, DiscountRule):
                raise ValidationError(f"rules must be DiscountRule instances, got {type(rule).__name__}")

        applied: list[AppliedDiscount] = []
        for checker in self.checkers:
            applied.extend(checker.check(rules, request, match_mode))

        raw_percent = sum((a.percent for a in applied), Decimal("0"))
        total_percent = min(raw_percent, DISCOUNT_CAP_PERCENT)
        if raw_percent > total_percent:
            logger.debug(f"Discount {raw_percent}% capped at {total_percent}%")

        # Enough precision for the exact product, so quantize never overflows.
        with localcontext() as ctx:
            ctx.prec = (
                len(base.as_tuple().digits)
                + request.duration_hours.bit_length() // 3 + 1
                + len(total_percent.as_tuple().digits)
                + 10
            )
            base_total = base * request.duration_hours
            discounted = base_total * (Decimal("100") - total_percent) / Decimal("100")
            final_price = int(discounted.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

        logger.debug(
            f"Quote {request.date} {request.start_time}h x{request.duration_hours}: "
            f"{base_total} -> {final_price} ({total_percent}% off, {len(applied)} rule(s))"
        )
        return PricingResult(
            final_price=final_price,
            total_discount_percent=total_percent,
            discount_details=[a.detail for a in applied],
            base_total=base_total,
            applied=applied,
        )


pricing_engine = PricingEngine()


def compute_price(
    base_price,
    request: BookingRequest,
    rules: Sequence[DiscountRule] = (),
    match_mode: str = "first",
) -> PricingResult:
    """Price a booking; see PricingEngine.quote."""
    return pricing_engine.quote(base_price, request, rules, match_mode)
