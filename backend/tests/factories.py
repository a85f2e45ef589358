"""Row builders shared by the test modules."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from villarates.models.booking import Booking
from villarates.models.calendar_block import CalendarBlock
from villarates.models.property import Property
from villarates.models.season import SeasonPeriod

async def make_property(db: AsyncSession, **overrides) -> Property:
    """Insert a published villa (overridable) and return it."""
    values = {
        "name": f"Villa {uuid.uuid4().hex[:6]}",
        "property_type": "villa",
        "location": "Ubud, Bali",
        "bedrooms": 3,
        "max_guests": 6,
        "status": "published",
    }
    values.update(overrides)
    prop = Property(**values)
    db.add(prop)
    await db.flush()
    await db.refresh(prop)
    return prop

async def add_period(
    db: AsyncSession,
    property_id: uuid.UUID,
    start: str,
    end: str,
    price: str | int,
    season_type: str = "low",
    minimum_nights: int = 1,
    position: int = 0,
) -> SeasonPeriod:
    period = SeasonPeriod(
        property_id=property_id,
        position=position,
        season_type=season_type,
        start_day_month=start,
        end_day_month=end,
        price_per_night=Decimal(str(price)),
        minimum_nights=minimum_nights,
    )
    db.add(period)
    await db.flush()
    return period

async def add_booking(
    db: AsyncSession,
    property_id: uuid.UUID,
    check_in: date,
    check_out: date,
    status: str = "active",
) -> Booking:
    booking = Booking(
        property_id=property_id,
        check_in=check_in,
        check_out=check_out,
        status=status,
        guest_name="Test Guest",
        guest_email="guest@test.com",
    )
    db.add(booking)
    await db.flush()
    await db.refresh(booking)
    return booking

async def add_block(
    db: AsyncSession,
    property_id: uuid.UUID,
    blocked_date: date,
    reason: str | None = "Blocked",
    source: str = "manual",
) -> CalendarBlock:
    block = CalendarBlock(property_id=property_id, blocked_date=blocked_date, reason=reason, source=source)
    db.add(block)
    await db.flush()
    return block

