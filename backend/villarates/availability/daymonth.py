"""Year-agnostic day-month values and the season range matcher.

A season period is stored as two ``DD-MM`` strings. The range is inclusive on
both ends and wraps around New Year when its start sorts after its end
(``22-12`` .. ``06-01``). Values are compared month first, then day, without
projecting onto a concrete year, so ``29-02`` is an ordinary day-month.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from villarates.availability.records import SeasonRecord, SeasonType

_DAY_MONTH_RE = re.compile(r"^(\d{2})-(\d{2})$")

# Leap-year lengths: 29-02 must stay representable
_DAYS_IN_MONTH = (31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


@dataclass(frozen=True, order=True)
class DayMonth:
    """A calendar day without a year, ordered month-major."""

    month: int
    day: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month out of range: {self.month}")
        if not 1 <= self.day <= _DAYS_IN_MONTH[self.month - 1]:
            raise ValueError(f"day out of range for month {self.month}: {self.day}")

    @classmethod
    def parse(cls, text: str) -> DayMonth:
        """Parse the fixed-width ``DD-MM`` storage format."""
        match = _DAY_MONTH_RE.match(text or "")
        if match is None:
            raise ValueError(f"expected DD-MM, got {text!r}")
        day, month = int(match.group(1)), int(match.group(2))
        return cls(month=month, day=day)

    @classmethod
    def from_date(cls, value: date) -> DayMonth:
        return cls(month=value.month, day=value.day)

    def __str__(self) -> str:
        return f"{self.day:02d}-{self.month:02d}"


@dataclass(frozen=True)
class DayMonthRange:
    """An inclusive, possibly year-wrapping, day-month range."""

    start: DayMonth
    end: DayMonth

    def wraps(self) -> bool:
        return self.start > self.end

    def __contains__(self, value: DayMonth) -> bool:
        if self.wraps():
            return value >= self.start or value <= self.end
        return self.start <= value <= self.end

    def overlaps(self, other: DayMonthRange) -> bool:
        # Two arcs on the yearly circle intersect iff one holds the other's start
        return other.start in self or self.start in other

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"


def matches(day: int, month: int, start_dm: str, end_dm: str) -> bool:
    """Return True if ``day``/``month`` falls within the ``DD-MM`` range."""
    day_range = DayMonthRange(DayMonth.parse(start_dm), DayMonth.parse(end_dm))
    return DayMonth(month=month, day=day) in day_range


def resolve_season(target: date | DayMonth, periods: Sequence[SeasonRecord]) -> SeasonRecord | None:
    """Return the first period in stored order whose range holds ``target``."""
    day_month = target if isinstance(target, DayMonth) else DayMonth.from_date(target)
    for period in periods:
        if day_month in period.day_range:
            return period
    return None


def resolve_price(
    day: int, month: int, periods: Sequence[SeasonRecord]
) -> tuple[Decimal, SeasonType] | None:
    """Resolve ``(price, season_type)`` for a day-month, or None if unmatched.

    The fallback for an unmatched day is left to the caller.
    """
    period = resolve_season(DayMonth(month=month, day=day), periods)
    if period is None:
        return None
    return period.price_per_night, period.season_type
