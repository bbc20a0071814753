"""Pricing router — booking quotes and per-slot price sheets."""

import logging
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, HTTPException, Query

from groundbook.config import settings
from groundbook.data.currency import format_price
from groundbook.schemas.pricing import QuoteRequest, QuoteResponse, SlotQuoteOut
from groundbook.services.pricing_engine import BookingRequest, ValidationError, compute_price
from groundbook.services.rule_catalog import rule_catalog
from groundbook.services.time_slots import parse_hour, price_sheet

logger = logging.getLogger(__name__)

router = APIRouter()


def _format(amount) -> str:
    return format_price(amount, settings.currency)


@router.post("/quote", response_model=QuoteResponse)
async def quote(req: QuoteRequest):
    """Price a booking with inline rules, or with the catalog rules when none are given."""
    try:
        rules = [r.to_rule() for r in req.rules] if req.rules is not None else rule_catalog.list_rules()
        request = BookingRequest(
            date=req.date,
            start_time=parse_hour(req.start_time),
            duration_hours=req.duration_hours,
        )
        result = compute_price(
            req.base_price,
            request,
            rules,
            req.match_mode or settings.rule_match_mode,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return QuoteResponse.from_result(result, _format)


@router.get("/slots", response_model=list[SlotQuoteOut])
async def slots(
    base_price: Decimal = Query(...),
    booking_date: date = Query(..., alias="date"),
    duration_hours: int = Query(1),
):
    """Quote every bookable slot of the day for the given duration."""
    try:
        sheet = price_sheet(
            base_price,
            booking_date,
            duration_hours,
            rule_catalog.list_rules(),
            opening_hour=settings.opening_hour,
            closing_hour=settings.closing_hour,
            match_mode=settings.rule_match_mode,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return [
        SlotQuoteOut(
            hour=p.slot.hour,
            time=p.slot.time,
            display=p.slot.display,
            final_price=p.result.final_price,
            total_discount_percent=float(p.result.total_discount_percent),
            discount_details=p.result.discount_details,
        )
        for p in sheet
    ]
