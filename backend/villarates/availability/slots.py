"""Slot search: earliest free stays of a fixed length inside a window."""

import calendar
import logging
import uuid
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from villarates.availability.occupancy import OccupancyResolver
from villarates.availability.pricing import load_season_records, quote_from_periods
from villarates.availability.records import SeasonRecord
from villarates.availability.spans import ONE_DAY, iter_days
from villarates.config import settings
from villarates.exceptions import InvalidSpanError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchWindow:
    """Candidate check-in days, ``start`` through ``end`` inclusive."""

    start: date
    end: date

    @classmethod
    def for_month(cls, year: int, month: int) -> "SearchWindow":
        if not 1 <= month <= 12:
            raise InvalidSpanError(f"month out of range: {month}")
        last_day = calendar.monthrange(year, month)[1]
        return cls(start=date(year, month, 1), end=date(year, month, last_day))


@dataclass(frozen=True)
class Slot:
    check_in: date
    check_out: date
    nights: int
    total_price: Decimal
    average_per_night: int
    has_underspecified_nights: bool


@dataclass(frozen=True)
class PeriodSummary:
    total_days: int
    free_days: int
    occupied_days: int
    occupied_dates: list[date]
    is_fully_available: bool
    is_partially_available: bool
    nearest_slots: list[Slot] = field(default_factory=list)


def _validate(nights: int, limit: int) -> None:
    if nights < 1:
        raise InvalidSpanError("nights must be at least 1")
    if limit < 1:
        raise InvalidSpanError("limit must be at least 1")


def free_check_ins(occupied: set[date], first: date, last: date, nights: int) -> Iterator[date]:
    """Yield each check-in day in ``[first, last]`` whose ``nights`` dates are all free."""
    candidate = first
    while candidate <= last:
        if not any(day in occupied for day in iter_days(candidate, candidate + timedelta(days=nights))):
            yield candidate
        candidate += ONE_DAY


def find_free_slots(
    occupied: set[date],
    periods: Sequence[SeasonRecord],
    window: SearchWindow,
    nights: int,
    limit: int,
    today: date,
) -> list[Slot]:
    """Scan ``window`` (clamped to ``today``) and quote the first ``limit`` free stays."""
    _validate(nights, limit)
    first = max(window.start, today)
    slots: list[Slot] = []
    for check_in in free_check_ins(occupied, first, window.end, nights):
        quote = quote_from_periods(periods, check_in, check_in + timedelta(days=nights))
        slots.append(
            Slot(
                check_in=quote.check_in,
                check_out=quote.check_out,
                nights=quote.nights,
                total_price=quote.total_price,
                average_per_night=quote.average_per_night,
                has_underspecified_nights=quote.has_underspecified_nights,
            )
        )
        if len(slots) >= limit:
            break
    return slots


class SlotSearch:
    """Composes the occupancy resolver and the pricing calculator."""

    def __init__(
        self,
        db: AsyncSession,
        resolver: OccupancyResolver | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._db = db
        self._resolver = resolver or OccupancyResolver(db)
        self._today = today

    async def find_available_slots(
        self,
        property_id: uuid.UUID,
        window: SearchWindow,
        nights: int,
        limit: int | None = None,
    ) -> list[Slot]:
        limit = settings.slot_search_default_limit if limit is None else limit
        _validate(nights, limit)
        if window.end < window.start:
            raise InvalidSpanError("window end must not be before window start")

        first = max(window.start, self._today())
        if first > window.end:
            return []

        occupied = await self._resolver.occupied_dates(property_id, first, window.end + timedelta(days=nights))
        periods = await load_season_records(self._db, property_id)
        slots = find_free_slots(occupied, periods, window, nights, limit, self._today())
        logger.info(
            "Slot search for property %s (%s..%s, %d nights): %d found",
            property_id,
            first,
            window.end,
            nights,
            len(slots),
        )
        return slots

    async def summarize_period(
        self, property_id: uuid.UUID, start: date, end: date, nights: int
    ) -> PeriodSummary:
        """Count free and occupied days over ``[start, end]``.

        When the period is not fully free, also propose the nearest free stays
        in the days right after ``end``.
        """
        _validate(nights, 1)
        if end < start:
            raise InvalidSpanError("end must not be before start")

        occupied = await self._resolver.occupied_dates(property_id, start, end + ONE_DAY)
        total_days = (end - start).days + 1
        occupied_days = len(occupied)
        free_days = total_days - occupied_days
        fully_available = occupied_days == 0

        nearest: list[Slot] = []
        if not fully_available:
            after = end + ONE_DAY
            nearest = await self.find_available_slots(
                property_id,
                SearchWindow(after, after + timedelta(days=settings.nearest_slot_horizon_days)),
                nights,
                settings.nearest_slot_limit,
            )

        return PeriodSummary(
            total_days=total_days,
            free_days=free_days,
            occupied_days=occupied_days,
            occupied_dates=sorted(occupied),
            is_fully_available=fully_available,
            is_partially_available=free_days >= nights and not fully_available,
            nearest_slots=nearest,
        )
