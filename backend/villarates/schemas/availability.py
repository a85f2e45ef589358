"""Response schemas for availability, quotes, and slot search.

The engine returns frozen dataclasses; ``from_attributes`` lets these models
validate them directly.
"""

import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from villarates.availability.records import OccupancySource, SeasonType


class AvailabilityResponse(BaseModel):
    property_id: uuid.UUID
    check_in: date
    check_out: date
    available: bool
    blocked_dates: list[date]
    conflicting_booking_ids: list[uuid.UUID]


class OccupancyMarkResponse(BaseModel):
    day: date
    source: OccupancySource
    reason: str | None = None

    model_config = ConfigDict(from_attributes=True)


class OccupancyResponse(BaseModel):
    property_id: uuid.UUID
    start: date
    end: date
    occupied_dates: list[date]
    marks: list[OccupancyMarkResponse]


class NightPriceResponse(BaseModel):
    day: date
    price: Decimal
    season_type: SeasonType | None = None
    is_zero_price: bool

    model_config = ConfigDict(from_attributes=True)


class QuoteResponse(BaseModel):
    check_in: date
    check_out: date
    nights: int
    total_price: Decimal
    average_per_night: int
    has_underspecified_nights: bool
    underspecified_dates: list[date]
    breakdown: list[NightPriceResponse]

    model_config = ConfigDict(from_attributes=True)


class SlotResponse(BaseModel):
    check_in: date
    check_out: date
    nights: int
    total_price: Decimal
    average_per_night: int
    has_underspecified_nights: bool

    model_config = ConfigDict(from_attributes=True)


class SlotSearchResponse(BaseModel):
    property_id: uuid.UUID
    start: date
    end: date
    nights: int
    slots: list[SlotResponse]


class PeriodSummaryResponse(BaseModel):
    total_days: int
    free_days: int
    occupied_days: int
    occupied_dates: list[date]
    is_fully_available: bool
    is_partially_available: bool
    nearest_slots: list[SlotResponse]

    model_config = ConfigDict(from_attributes=True)
