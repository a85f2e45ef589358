"""Booking ledger service: create, reschedule, and cancel stays.

Creation is serialized per property: the property row is locked
(``SELECT ... FOR UPDATE``) before the availability check, so two requests
for overlapping dates cannot both pass the check and both insert.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.availability.occupancy import AvailabilityCheck, OccupancyResolver
from villarates.availability.pricing import PricingCalculator
from villarates.availability.records import CANCELLED
from villarates.exceptions import BookingConflictError, BookingNotFoundError, InvalidSpanError
from villarates.models.booking import Booking
from villarates.schemas.booking import BookingCreate, BookingUpdate
from villarates.services.property_service import get_property

logger = logging.getLogger(__name__)


def _conflict_detail(check: AvailabilityCheck) -> str:
    if check.conflicting_bookings:
        return "Dates conflict with an existing booking"
    blocked = ", ".join(day.isoformat() for day in check.blocked_dates)
    return f"Property is blocked on {blocked}"


async def get_booking(db: AsyncSession, booking_id: uuid.UUID) -> Booking:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if booking is None:
        raise BookingNotFoundError(booking_id)
    return booking


async def create_booking(db: AsyncSession, body: BookingCreate) -> Booking:
    """Insert a booking after the strict availability check passes.

    When no ``total_price`` is supplied it is taken from the season table,
    unless the stay has unpriced nights, in which case it stays empty.
    """
    await get_property(db, body.property_id, for_update=True)

    check = await OccupancyResolver(db).check_availability(body.property_id, body.check_in, body.check_out)
    if not check.available:
        logger.info(
            "Rejected booking for property %s %s..%s: %s",
            body.property_id,
            body.check_in,
            body.check_out,
            _conflict_detail(check),
        )
        raise BookingConflictError(_conflict_detail(check))

    booking = Booking(**body.model_dump())
    if booking.total_price is None:
        quote = await PricingCalculator(db).quote(body.property_id, body.check_in, body.check_out)
        if quote.usable:
            booking.total_price = quote.total_price

    db.add(booking)
    await db.flush()
    await db.refresh(booking)
    logger.info(
        "Created booking %s for property %s (%s..%s)",
        booking.id,
        booking.property_id,
        booking.check_in,
        booking.check_out,
    )
    return booking


async def update_booking(db: AsyncSession, booking_id: uuid.UUID, body: BookingUpdate) -> Booking:
    """Apply a partial update; moved dates are re-checked against everything else."""
    booking = await get_booking(db, booking_id)
    update_data = body.model_dump(exclude_unset=True)

    new_check_in = update_data.get("check_in", booking.check_in)
    new_check_out = update_data.get("check_out", booking.check_out)
    if new_check_out <= new_check_in:
        raise InvalidSpanError("check_out must be after check_in")

    dates_changed = new_check_in != booking.check_in or new_check_out != booking.check_out
    if dates_changed and booking.status != CANCELLED:
        await get_property(db, booking.property_id, for_update=True)
        check = await OccupancyResolver(db).check_availability(
            booking.property_id,
            new_check_in,
            new_check_out,
            exclude_booking_id=booking.id,
        )
        if not check.available:
            raise BookingConflictError(_conflict_detail(check))

    for field, value in update_data.items():
        setattr(booking, field, value)

    await db.flush()
    await db.refresh(booking)
    return booking


async def cancel_booking(db: AsyncSession, booking_id: uuid.UUID) -> Booking:
    """Mark a booking cancelled; its days become free immediately."""
    booking = await get_booking(db, booking_id)
    if booking.status != CANCELLED:
        booking.status = CANCELLED
        await db.flush()
        await db.refresh(booking)
        logger.info("Cancelled booking %s", booking_id)
    return booking
