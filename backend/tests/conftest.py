"""
Shared pytest fixtures for the pricing engine, rule catalog and API tests.
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from groundbook.services.pricing_engine import (
    BookingRequest,
    BulkCondition,
    DiscountRule,
    TimeWindow,
    WeekdayCondition,
)

TUESDAY = date(2024, 1, 2)
SATURDAY = date(2024, 1, 6)
SUNDAY = date(2024, 1, 7)


def weekday_rule(days, percent, **kwargs) -> DiscountRule:
    return DiscountRule(kind="weekday", discount_percent=percent, condition=WeekdayCondition(frozenset(days)), **kwargs)


def bulk_rule(min_hours, percent, **kwargs) -> DiscountRule:
    return DiscountRule(kind="bulk", discount_percent=percent, condition=BulkCondition(min_hours), **kwargs)


def off_peak_rule(start, end, percent, **kwargs) -> DiscountRule:
    return DiscountRule(kind="off-peak", discount_percent=percent, condition=TimeWindow(start, end), **kwargs)


@pytest.fixture
def default_rules():
    """Mon-Thu 15%, 3h 10%, 5h 15%, lunch off-peak 20%."""
    return [
        weekday_rule({1, 2, 3, 4}, 15, id="1"),
        bulk_rule(3, 10, id="2"),
        bulk_rule(5, 15, id="3"),
        off_peak_rule(12, 15, 20, id="4"),
    ]


@pytest.fixture
def tuesday_lunch():
    """Three hours from 13:00 on a Tuesday."""
    return BookingRequest(date=TUESDAY, start_time=13, duration_hours=3)


@pytest.fixture
def client():
    """API client with the catalog freshly loaded from the default rules."""
    from groundbook.main import app

    with TestClient(app) as c:
        yield c
