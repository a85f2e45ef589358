"""Typed records used by the availability engine.

Storage rows are converted into these frozen dataclasses at the boundary so
the matcher, resolver, and calculator never see ORM objects.
"""

import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from villarates.availability.daymonth import DayMonth, DayMonthRange
from villarates.models.booking import Booking
from villarates.models.calendar_block import CalendarBlock
from villarates.models.season import SeasonPeriod

ACTIVE = "active"
CANCELLED = "cancelled"


class SeasonType(str, Enum):
    LOW = "low"
    MID = "mid"
    PEAK = "peak"
    PRIME = "prime"
    HOLIDAY = "holiday"


class OccupancySource(str, Enum):
    CALENDAR = "calendar"
    BOOKING = "booking"


@dataclass(frozen=True)
class SeasonRecord:
    """One recurring price period, in stored order."""

    season_type: SeasonType
    day_range: DayMonthRange
    price_per_night: Decimal
    minimum_nights: int
    source_price_per_night: Decimal | None = None

    @property
    def is_unpriced(self) -> bool:
        return self.price_per_night == 0

    @classmethod
    def from_row(cls, row: SeasonPeriod) -> "SeasonRecord":
        return cls(
            season_type=SeasonType(row.season_type),
            day_range=DayMonthRange(
                DayMonth.parse(row.start_day_month),
                DayMonth.parse(row.end_day_month),
            ),
            price_per_night=Decimal(row.price_per_night),
            minimum_nights=row.minimum_nights,
            source_price_per_night=(
                Decimal(row.source_price_per_night) if row.source_price_per_night is not None else None
            ),
        )


@dataclass(frozen=True)
class BookingRecord:
    booking_id: uuid.UUID
    check_in: date
    check_out: date
    status: str

    @property
    def is_active(self) -> bool:
        return self.status != CANCELLED

    @classmethod
    def from_row(cls, row: Booking) -> "BookingRecord":
        return cls(
            booking_id=row.id,
            check_in=row.check_in,
            check_out=row.check_out,
            status=row.status,
        )


@dataclass(frozen=True)
class BlockRecord:
    blocked_date: date
    reason: str | None
    source: str

    @classmethod
    def from_row(cls, row: CalendarBlock) -> "BlockRecord":
        return cls(blocked_date=row.blocked_date, reason=row.reason, source=row.source)


@dataclass(frozen=True)
class OccupancyMark:
    """A single occupied day annotated with where the occupancy comes from."""

    day: date
    source: OccupancySource
    reason: str | None = None
