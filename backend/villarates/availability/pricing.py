"""Pricing calculator: night-by-night quotes against a property's season table."""

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.availability.daymonth import resolve_season
from villarates.availability.records import SeasonRecord, SeasonType
from villarates.availability.spans import count_nights, iter_days
from villarates.models.season import SeasonPeriod

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class NightPrice:
    day: date
    price: Decimal
    season_type: SeasonType | None  # None when no period matched
    is_zero_price: bool


@dataclass(frozen=True)
class Quote:
    check_in: date
    check_out: date
    nights: int
    total_price: Decimal
    average_per_night: int
    breakdown: list[NightPrice]
    has_underspecified_nights: bool

    @property
    def usable(self) -> bool:
        """A quote with unpriced nights must not be shown or sorted on."""
        return not self.has_underspecified_nights

    @property
    def underspecified_dates(self) -> list[date]:
        return [night.day for night in self.breakdown if night.is_zero_price]


def round_currency(value: Decimal) -> int:
    """Round to a whole currency unit, half up."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def price_night(day: date, periods: Sequence[SeasonRecord]) -> NightPrice:
    """Price one night; unmatched or zero-priced nights come back as zero, flagged."""
    period = resolve_season(day, periods)
    if period is None:
        return NightPrice(day=day, price=ZERO, season_type=None, is_zero_price=True)
    return NightPrice(
        day=day,
        price=period.price_per_night,
        season_type=period.season_type,
        is_zero_price=period.is_unpriced,
    )


def quote_from_periods(periods: Sequence[SeasonRecord], check_in: date, check_out: date) -> Quote:
    """Quote ``[check_in, check_out)``; the departure night is never charged.

    No fallback price is substituted for an unpriced night: it contributes
    zero and sets ``has_underspecified_nights``.
    """
    nights = count_nights(check_in, check_out)
    breakdown = [price_night(day, periods) for day in iter_days(check_in, check_out)]
    total = sum((night.price for night in breakdown), ZERO)
    return Quote(
        check_in=check_in,
        check_out=check_out,
        nights=nights,
        total_price=total,
        average_per_night=round_currency(total / nights),
        breakdown=breakdown,
        has_underspecified_nights=any(night.is_zero_price for night in breakdown),
    )


async def load_season_records(db: AsyncSession, property_id: uuid.UUID) -> list[SeasonRecord]:
    """Load a property's season table in stored order as typed records."""
    result = await db.execute(
        select(SeasonPeriod).where(SeasonPeriod.property_id == property_id).order_by(SeasonPeriod.position)
    )
    return [SeasonRecord.from_row(row) for row in result.scalars().all()]


async def load_season_tables(
    db: AsyncSession, property_ids: Sequence[uuid.UUID]
) -> dict[uuid.UUID, list[SeasonRecord]]:
    """Load several season tables in one query, each in stored order.

    Every requested id is present in the result; a property with no periods
    maps to an empty list.
    """
    tables: dict[uuid.UUID, list[SeasonRecord]] = {property_id: [] for property_id in property_ids}
    if not tables:
        return tables
    result = await db.execute(
        select(SeasonPeriod)
        .where(SeasonPeriod.property_id.in_(list(tables)))
        .order_by(SeasonPeriod.property_id, SeasonPeriod.position)
    )
    for row in result.scalars().all():
        tables[row.property_id].append(SeasonRecord.from_row(row))
    return tables


class PricingCalculator:
    """Quotes stays for one database session."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def quote(self, property_id: uuid.UUID, check_in: date, check_out: date) -> Quote:
        count_nights(check_in, check_out)
        periods = await load_season_records(self._db, property_id)
        quote = quote_from_periods(periods, check_in, check_out)
        if quote.has_underspecified_nights:
            logger.info(
                "Quote for property %s %s..%s has %d unpriced nights",
                property_id,
                check_in,
                check_out,
                len(quote.underspecified_dates),
            )
        return quote

    async def price_for_date(self, property_id: uuid.UUID, day: date) -> NightPrice:
        periods = await load_season_records(self._db, property_id)
        return price_night(day, periods)
