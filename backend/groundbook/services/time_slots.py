"""Bookable time slots for an operating day and per-slot price sheets."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Sequence

from groundbook.services.pricing_engine import (
    MAX_START_HOUR,
    BookingRequest,
    DiscountRule,
    PricingResult,
    ValidationError,
    compute_price,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeSlot:
    hour: int      # operating-day hour, 24+ for past midnight
    time: str      # clock time, e.g. "13:00" or "1:00"
    display: str   # 12-hour label, e.g. "1:00 PM"


@dataclass
class PricedSlot:
    slot: TimeSlot
    result: PricingResult


def parse_hour(value, max_hour: int = MAX_START_HOUR) -> int:
    """Parse an hour given as an int or an "H:MM" / "HH:MM" string.

    Only whole hours are bookable, so minutes must be "00".
    """
    if isinstance(value, bool):
        raise ValidationError(f"invalid hour {value!r}")
    if isinstance(value, int):
        hour = value
    elif isinstance(value, str):
        text = value.strip()
        hour_part, sep, minute_part = text.partition(":")
        if not (hour_part.isascii() and hour_part.isdigit()) or (sep and minute_part != "00"):
            raise ValidationError(f"invalid time {value!r}, expected whole hours like '13:00'")
        hour = int(hour_part)
    else:
        raise ValidationError(f"invalid hour {value!r}")
    if not 0 <= hour <= max_hour:
        raise ValidationError(f"hour must be 0-{max_hour}, got {hour}")
    return hour


def _display(hour: int) -> str:
    clock = hour % 24
    suffix = "AM" if clock < 12 else "PM"
    twelve = clock % 12 or 12
    return f"{twelve}:00 {suffix}"


def generate_time_slots(opening_hour: int = 8, closing_hour: int = 26) -> list[TimeSlot]:
    """One slot per start hour from opening_hour to closing_hour inclusive."""
    if not 0 <= opening_hour <= closing_hour <= MAX_START_HOUR:
        raise ValidationError(f"invalid opening hours {opening_hour}-{closing_hour}")
    return [
        TimeSlot(hour=h, time=f"{h % 24}:00", display=_display(h))
        for h in range(opening_hour, closing_hour + 1)
    ]


def price_sheet(
    base_price,
    booking_date: date,
    duration_hours: int,
    rules: Sequence[DiscountRule],
    opening_hour: int = 8,
    closing_hour: int = 26,
    match_mode: str = "first",
) -> list[PricedSlot]:
    """Quote every slot of the operating day for the same duration."""
    slots = generate_time_slots(opening_hour, closing_hour)
    sheet = [
        PricedSlot(
            slot=slot,
            result=compute_price(
                base_price,
                BookingRequest(date=booking_date, start_time=slot.hour, duration_hours=duration_hours),
                rules,
                match_mode,
            ),
        )
        for slot in slots
    ]
    logger.debug(f"Price sheet for {booking_date}: {len(sheet)} slots")
    return sheet
