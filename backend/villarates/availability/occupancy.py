"""Occupancy resolver: merges the booking ledger with calendar blocks.

Boundary rules differ by call site and are spelled out on each method:

* ``occupied_dates`` / ``occupancy_marks`` (general window, quotes, slot
  search, admin calendar): blocks on ``[start, end)``; a booking occupies
  ``[check_in, check_out)``, so its departure day stays free.
* ``check_availability`` (availability check and booking creation): a
  booking conflicts when ``check_in < req.check_out and check_out >
  req.check_in``; a block conflicts only when it lies strictly between the
  requested check-in and check-out, because the arrival day may be another
  stay's turnover day.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.availability.records import (
    CANCELLED,
    BlockRecord,
    BookingRecord,
    OccupancyMark,
    OccupancySource,
)
from villarates.availability.spans import count_nights, iter_days
from villarates.exceptions import InvalidSpanError
from villarates.models.booking import Booking
from villarates.models.calendar_block import CalendarBlock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailabilityCheck:
    """Outcome of the strict span check used before accepting a booking."""

    conflicting_bookings: list[BookingRecord] = field(default_factory=list)
    blocked_dates: list[date] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return not self.conflicting_bookings and not self.blocked_dates


def expand_occupancy(
    blocks: list[BlockRecord],
    bookings: list[BookingRecord],
    window_start: date,
    window_end: date,
) -> list[OccupancyMark]:
    """Expand blocks and bookings into per-day marks inside ``[window_start, window_end)``.

    Cancelled bookings never occupy anything. A day held by both a block and a
    booking yields one mark per source.
    """
    marks: set[OccupancyMark] = set()
    for block in blocks:
        if window_start <= block.blocked_date < window_end:
            marks.add(OccupancyMark(block.blocked_date, OccupancySource.CALENDAR, block.reason))

    for booking in bookings:
        if not booking.is_active:
            continue
        first = max(booking.check_in, window_start)
        last = min(booking.check_out, window_end)
        for day in iter_days(first, last):
            marks.add(OccupancyMark(day, OccupancySource.BOOKING, str(booking.booking_id)))

    return sorted(marks, key=lambda mark: (mark.day, mark.source.value, mark.reason or ""))


class OccupancyResolver:
    """Read-only occupancy queries for one database session."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def _window_rows(
        self, property_id: uuid.UUID, window_start: date, window_end: date
    ) -> tuple[list[BlockRecord], list[BookingRecord]]:
        block_result = await self._db.execute(
            select(CalendarBlock)
            .where(
                CalendarBlock.property_id == property_id,
                CalendarBlock.blocked_date >= window_start,
                CalendarBlock.blocked_date < window_end,
            )
            .order_by(CalendarBlock.blocked_date)
        )
        booking_result = await self._db.execute(
            select(Booking)
            .where(
                Booking.property_id == property_id,
                Booking.status != CANCELLED,
                Booking.check_in < window_end,
                Booking.check_out > window_start,
            )
            .order_by(Booking.check_in)
        )
        blocks = [BlockRecord.from_row(row) for row in block_result.scalars().all()]
        bookings = [BookingRecord.from_row(row) for row in booking_result.scalars().all()]
        return blocks, bookings

    async def occupancy_marks(
        self, property_id: uuid.UUID, window_start: date, window_end: date
    ) -> list[OccupancyMark]:
        """Occupied days in ``[window_start, window_end)`` with their source.

        An unknown property simply has no occupancy.
        """
        if window_end < window_start:
            raise InvalidSpanError("window end must not be before window start")
        blocks, bookings = await self._window_rows(property_id, window_start, window_end)
        return expand_occupancy(blocks, bookings, window_start, window_end)

    async def occupied_dates(self, property_id: uuid.UUID, window_start: date, window_end: date) -> set[date]:
        """Set of occupied days in ``[window_start, window_end)``."""
        marks = await self.occupancy_marks(property_id, window_start, window_end)
        return {mark.day for mark in marks}

    async def check_availability(
        self,
        property_id: uuid.UUID,
        check_in: date,
        check_out: date,
        exclude_booking_id: uuid.UUID | None = None,
    ) -> AvailabilityCheck:
        """Strict check for a new stay ``[check_in, check_out)``.

        Blocks count only on ``check_in < blocked_date < check_out``; active
        bookings count on half-open overlap. ``exclude_booking_id`` skips the
        booking being moved.
        """
        count_nights(check_in, check_out)

        booking_query = select(Booking).where(
            Booking.property_id == property_id,
            Booking.status != CANCELLED,
            Booking.check_in < check_out,
            Booking.check_out > check_in,
        )
        if exclude_booking_id is not None:
            booking_query = booking_query.where(Booking.id != exclude_booking_id)
        booking_result = await self._db.execute(booking_query.order_by(Booking.check_in))

        block_result = await self._db.execute(
            select(CalendarBlock.blocked_date)
            .where(
                CalendarBlock.property_id == property_id,
                CalendarBlock.blocked_date > check_in,
                CalendarBlock.blocked_date < check_out,
            )
            .order_by(CalendarBlock.blocked_date)
        )

        result = AvailabilityCheck(
            conflicting_bookings=[BookingRecord.from_row(row) for row in booking_result.scalars().all()],
            blocked_dates=list(block_result.scalars().all()),
        )
        if not result.available:
            logger.debug(
                "Property %s unavailable %s..%s: %d bookings, %d blocked days",
                property_id,
                check_in,
                check_out,
                len(result.conflicting_bookings),
                len(result.blocked_dates),
            )
        return result
