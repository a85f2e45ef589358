"""Public listing search: available, fully priced properties for a stay."""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import ColumnElement, and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.availability.pricing import Quote, load_season_tables, quote_from_periods
from villarates.availability.records import CANCELLED
from villarates.availability.spans import count_nights
from villarates.models.booking import Booking
from villarates.models.calendar_block import CalendarBlock
from villarates.models.property import Property
from villarates.models.season import SeasonPeriod
from villarates.services.property_service import get_property

logger = logging.getLogger(__name__)

PUBLISHED = "published"
ALTERNATIVES_LIMIT = 6


@dataclass(frozen=True)
class PricedListing:
    property: Property
    quote: Quote


@dataclass(frozen=True)
class Alternative:
    property: Property
    min_price_per_night: Decimal | None


def available_clause(check_in: date, check_out: date) -> ColumnElement[bool]:
    """SQL form of the strict availability check, correlated to ``Property``.

    Same boundaries as booking creation: active bookings on half-open overlap,
    blocks strictly between check-in and check-out.
    """
    booked = select(Booking.id).where(
        Booking.property_id == Property.id,
        Booking.status != CANCELLED,
        Booking.check_in < check_out,
        Booking.check_out > check_in,
    )
    blocked = select(CalendarBlock.id).where(
        CalendarBlock.property_id == Property.id,
        CalendarBlock.blocked_date > check_in,
        CalendarBlock.blocked_date < check_out,
    )
    return and_(~booked.exists(), ~blocked.exists())


def _published_query(
    check_in: date,
    check_out: date,
    min_bedrooms: int | None = None,
    search: str | None = None,
):
    query = select(Property).where(Property.status == PUBLISHED, available_clause(check_in, check_out))
    if min_bedrooms is not None:
        query = query.where(Property.bedrooms >= min_bedrooms)
    if search:
        query = query.where(Property.name.ilike(f"%{search}%"))
    return query


async def search_listings(
    db: AsyncSession,
    check_in: date,
    check_out: date,
    min_bedrooms: int | None = None,
    search: str | None = None,
    sort: str = "price_asc",
) -> list[PricedListing]:
    """Available published properties with a usable quote for the stay.

    Properties whose quote has unpriced nights are left out rather than shown
    with a partial total. ``sort`` is ``price_asc``, ``price_desc`` or
    ``newest``.
    """
    count_nights(check_in, check_out)
    result = await db.execute(
        _published_query(check_in, check_out, min_bedrooms, search).order_by(Property.created_at.desc())
    )
    properties = list(result.scalars().all())
    tables = await load_season_tables(db, [prop.id for prop in properties])

    listings: list[PricedListing] = []
    for prop in properties:
        quote = quote_from_periods(tables[prop.id], check_in, check_out)
        if not quote.usable:
            logger.debug("Excluding property %s from listing: unpriced nights %s", prop.id, quote.underspecified_dates)
            continue
        listings.append(PricedListing(property=prop, quote=quote))

    if sort == "price_asc":
        listings.sort(key=lambda listing: listing.quote.total_price)
    elif sort == "price_desc":
        listings.sort(key=lambda listing: listing.quote.total_price, reverse=True)
    return listings


async def count_available(
    db: AsyncSession,
    check_in: date,
    check_out: date,
    min_bedrooms: int | None = None,
    search: str | None = None,
) -> int:
    """Number of published properties free for the stay, priced or not."""
    count_nights(check_in, check_out)
    subquery = _published_query(check_in, check_out, min_bedrooms, search).subquery()
    result = await db.execute(select(func.count()).select_from(subquery))
    return result.scalar_one()


async def find_alternatives(
    db: AsyncSession,
    property_id: uuid.UUID,
    check_in: date,
    check_out: date,
    limit: int = ALTERNATIVES_LIMIT,
) -> list[Alternative]:
    """Other published properties, at least as large, free for the same stay."""
    count_nights(check_in, check_out)
    current = await get_property(db, property_id)

    query = _published_query(check_in, check_out, min_bedrooms=current.bedrooms).where(Property.id != property_id)
    result = await db.execute(query.order_by(Property.created_at.desc()).limit(limit))
    properties = list(result.scalars().all())
    if not properties:
        return []

    price_result = await db.execute(
        select(SeasonPeriod.property_id, func.min(SeasonPeriod.price_per_night))
        .where(
            SeasonPeriod.property_id.in_([prop.id for prop in properties]),
            SeasonPeriod.price_per_night > 0,
        )
        .group_by(SeasonPeriod.property_id)
    )
    min_prices = {row[0]: row[1] for row in price_result.all()}
    return [Alternative(property=prop, min_price_per_night=min_prices.get(prop.id)) for prop in properties]
