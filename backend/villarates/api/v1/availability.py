"""Availability, pricing, and slot search endpoints for a single property."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.api.deps import get_calculator, get_db, get_resolver, get_slot_search
from villarates.availability.occupancy import OccupancyResolver
from villarates.availability.pricing import PricingCalculator
from villarates.availability.slots import SearchWindow, SlotSearch
from villarates.exceptions import InvalidSpanError
from villarates.schemas.availability import (
    AvailabilityResponse,
    NightPriceResponse,
    OccupancyMarkResponse,
    OccupancyResponse,
    PeriodSummaryResponse,
    QuoteResponse,
    SlotResponse,
    SlotSearchResponse,
)
from villarates.services.property_service import get_property

router = APIRouter(prefix="/api/v1/properties/{property_id}", tags=["availability"])


@router.get(
    "/availability",
    response_model=AvailabilityResponse,
    summary="Check whether a stay can be booked",
)
async def check_availability(
    property_id: uuid.UUID,
    check_in: date = Query(...),
    check_out: date = Query(...),
    db: AsyncSession = Depends(get_db),
    resolver: OccupancyResolver = Depends(get_resolver),
) -> AvailabilityResponse:
    await get_property(db, property_id)
    check = await resolver.check_availability(property_id, check_in, check_out)
    return AvailabilityResponse(
        property_id=property_id,
        check_in=check_in,
        check_out=check_out,
        available=check.available,
        blocked_dates=check.blocked_dates,
        conflicting_booking_ids=[booking.booking_id for booking in check.conflicting_bookings],
    )


@router.get(
    "/occupancy",
    response_model=OccupancyResponse,
    summary="Occupied days in a window",
)
async def get_occupancy(
    property_id: uuid.UUID,
    start: date = Query(..., description="First day (inclusive)"),
    end: date = Query(..., description="End of the window (exclusive)"),
    db: AsyncSession = Depends(get_db),
    resolver: OccupancyResolver = Depends(get_resolver),
) -> OccupancyResponse:
    """Each occupied day in ``[start, end)`` with the source that occupies it.

    A booking's check-out day is never reported as occupied.
    """
    await get_property(db, property_id)
    marks = await resolver.occupancy_marks(property_id, start, end)
    return OccupancyResponse(
        property_id=property_id,
        start=start,
        end=end,
        occupied_dates=sorted({mark.day for mark in marks}),
        marks=[OccupancyMarkResponse.model_validate(mark) for mark in marks],
    )


@router.get(
    "/quote",
    response_model=QuoteResponse,
    summary="Price a stay night by night",
)
async def get_quote(
    property_id: uuid.UUID,
    check_in: date = Query(...),
    check_out: date = Query(...),
    db: AsyncSession = Depends(get_db),
    calculator: PricingCalculator = Depends(get_calculator),
) -> QuoteResponse:
    """Quote ``[check_in, check_out)``.

    Nights without a price are reported in ``underspecified_dates`` and count
    as zero; clients must not present such a total as final.
    """
    await get_property(db, property_id)
    quote = await calculator.quote(property_id, check_in, check_out)
    return QuoteResponse.model_validate(quote)


@router.get(
    "/price",
    response_model=NightPriceResponse,
    summary="Nightly price for one date",
)
async def get_night_price(
    property_id: uuid.UUID,
    day: date = Query(..., alias="date"),
    db: AsyncSession = Depends(get_db),
    calculator: PricingCalculator = Depends(get_calculator),
) -> NightPriceResponse:
    await get_property(db, property_id)
    night = await calculator.price_for_date(property_id, day)
    return NightPriceResponse.model_validate(night)


@router.get(
    "/slots",
    response_model=SlotSearchResponse,
    summary="Earliest free stays of a given length",
)
async def find_slots(
    property_id: uuid.UUID,
    nights: int = Query(..., ge=1),
    start: date | None = Query(None, description="First candidate check-in"),
    end: date | None = Query(None, description="Last candidate check-in"),
    year: int | None = Query(None, ge=1),
    month: int | None = Query(None, ge=1, le=12),
    limit: int | None = Query(None, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    slot_search: SlotSearch = Depends(get_slot_search),
) -> SlotSearchResponse:
    """Search either an explicit ``start``..``end`` window or a whole ``year``/``month``.

    Days before today are never offered.
    """
    if year is not None and month is not None:
        window = SearchWindow.for_month(year, month)
    elif start is not None and end is not None:
        window = SearchWindow(start, end)
    else:
        raise InvalidSpanError("Provide either start and end, or year and month")

    await get_property(db, property_id)
    slots = await slot_search.find_available_slots(property_id, window, nights, limit)
    return SlotSearchResponse(
        property_id=property_id,
        start=window.start,
        end=window.end,
        nights=nights,
        slots=[SlotResponse.model_validate(slot) for slot in slots],
    )


@router.get(
    "/summary",
    response_model=PeriodSummaryResponse,
    summary="Free and occupied days over a period",
)
async def summarize_period(
    property_id: uuid.UUID,
    start: date = Query(..., description="First day (inclusive)"),
    end: date = Query(..., description="Last day (inclusive)"),
    nights: int = Query(1, ge=1),
    db: AsyncSession = Depends(get_db),
    slot_search: SlotSearch = Depends(get_slot_search),
) -> PeriodSummaryResponse:
    await get_property(db, property_id)
    summary = await slot_search.summarize_period(property_id, start, end, nights)
    return PeriodSummaryResponse.model_validate(summary)
