"""Channel feed normalizer: turns a nightly price feed into season periods.

The channel manager reports one entry per date, keyed ``YYYYMMDD``::

    {"20250101": {"p1": "1000", "m": "2", "i": 1}, "errorCode": "..."}

Runs of consecutive days sharing price and minimum stay become one period.
Each period then gets a season type: a date-derived baseline (peak / mid /
low) refined by how far its price deviates from that baseline's average.
"""

import logging
import re
from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from villarates.availability.daymonth import DayMonth, DayMonthRange
from villarates.availability.records import SeasonType
from villarates.availability.spans import ONE_DAY
from villarates.config import settings

logger = logging.getLogger(__name__)

_FEED_KEY_RE = re.compile(r"^\d{8}$")

ZERO = Decimal("0")
CENT = Decimal("0.01")

# Baseline anchors, evaluated on a period's first day
PEAK_RANGE = DayMonthRange(DayMonth(12, 22), DayMonth(2, 21))
MID_SPRING_RANGE = DayMonthRange(DayMonth(2, 22), DayMonth(5, 6))
MID_AUTUMN_RANGE = DayMonthRange(DayMonth(10, 7), DayMonth(12, 21))

PRIME_THRESHOLD = Decimal("50")
HOLIDAY_THRESHOLD = Decimal("15")


@dataclass(frozen=True)
class FeedDay:
    day: date
    price: Decimal
    minimum_nights: int


@dataclass(frozen=True)
class NormalizedPeriod:
    """A run of fed days, ready to be stored as a season period."""

    start: date
    end: date
    season_type: SeasonType
    source_price: Decimal
    price_per_night: Decimal
    minimum_nights: int

    @property
    def day_range(self) -> DayMonthRange:
        return DayMonthRange(DayMonth.from_date(self.start), DayMonth.from_date(self.end))


@dataclass
class _Run:
    start: date
    end: date
    price: Decimal
    minimum_nights: int


def _parse_key(key: str) -> date | None:
    if not _FEED_KEY_RE.match(key):
        return None
    try:
        return date(int(key[:4]), int(key[4:6]), int(key[6:]))
    except ValueError:
        return None


def parse_feed(raw: Mapping[str, Any], default_minimum_nights: int | None = None) -> list[FeedDay]:
    """Parse and sort the usable days of a raw feed.

    Status/error keys, impossible dates and unparseable values are skipped. A
    missing price means "unset" (0); a missing minimum stay takes the default.
    Only the first occurrence of each day-month is kept, so a feed spanning a
    year and a day cannot produce overlapping periods.
    """
    if default_minimum_nights is None:
        default_minimum_nights = settings.channel_default_minimum_nights

    parsed: list[FeedDay] = []
    for key in sorted(raw):
        day = _parse_key(str(key))
        if day is None:
            logger.info("Skipping non-date feed key %r", key)
            continue
        entry = raw[key]
        if not isinstance(entry, Mapping):
            logger.info("Skipping feed date %s: entry is not an object", key)
            continue

        raw_price = entry.get("p1")
        raw_minimum = entry.get("m")
        try:
            price = Decimal(str(raw_price)) if raw_price not in (None, "") else ZERO
            minimum_nights = int(raw_minimum) if raw_minimum not in (None, "") else default_minimum_nights
        except (InvalidOperation, TypeError, ValueError):
            logger.warning("Skipping feed date %s: bad price %r or minimum stay %r", key, raw_price, raw_minimum)
            continue
        if not price.is_finite() or price < 0 or minimum_nights < 1:
            logger.warning("Skipping feed date %s: price %s, minimum stay %s", key, price, minimum_nights)
            continue
        if price == 0:
            logger.info("Feed date %s has no price, storing as unset", key)
        parsed.append(FeedDay(day=day, price=price, minimum_nights=minimum_nights))

    seen: set[DayMonth] = set()
    unique: list[FeedDay] = []
    for feed_day in parsed:
        day_month = DayMonth.from_date(feed_day.day)
        if day_month in seen:
            logger.debug("Dropping %s: day-month %s already covered", feed_day.day, day_month)
            continue
        seen.add(day_month)
        unique.append(feed_day)
    return unique


def group_runs(days: list[FeedDay]) -> list[_Run]:
    """Run-length encode consecutive days with identical price and minimum stay."""
    runs: list[_Run] = []
    for feed_day in days:
        last = runs[-1] if runs else None
        if (
            last is not None
            and feed_day.day == last.end + ONE_DAY
            and feed_day.price == last.price
            and feed_day.minimum_nights == last.minimum_nights
        ):
            last.end = feed_day.day
        else:
            runs.append(_Run(feed_day.day, feed_day.day, feed_day.price, feed_day.minimum_nights))
    return runs


def baseline_season(day: date) -> SeasonType:
    """Date-only season: peak in the high winter, mid in the shoulders, low otherwise."""
    day_month = DayMonth.from_date(day)
    if day_month in PEAK_RANGE:
        return SeasonType.PEAK
    if day_month in MID_SPRING_RANGE or day_month in MID_AUTUMN_RANGE:
        return SeasonType.MID
    return SeasonType.LOW


def _mean(values: list[Decimal]) -> Decimal:
    return sum(values, ZERO) / len(values) if values else ZERO


def baseline_averages(runs: list[_Run]) -> dict[SeasonType, Decimal]:
    """Average priced run per baseline; baselines without prices use the overall average."""
    prices: dict[SeasonType, list[Decimal]] = defaultdict(list)
    for run in runs:
        if run.price > 0:
            prices[baseline_season(run.start)].append(run.price)

    overall = _mean([price for bucket in prices.values() for price in bucket])
    averages = {}
    for season in (SeasonType.LOW, SeasonType.MID, SeasonType.PEAK):
        averages[season] = _mean(prices[season]) if prices[season] else overall
    return averages


def classify(run: _Run, averages: Mapping[SeasonType, Decimal]) -> SeasonType:
    baseline = baseline_season(run.start)
    base_price = averages.get(baseline, ZERO)
    if run.price == 0 or base_price == 0 or baseline == SeasonType.PEAK:
        return baseline

    deviation = (run.price - base_price) / base_price * 100
    if baseline == SeasonType.MID:
        if deviation > PRIME_THRESHOLD:
            return SeasonType.PRIME
        if deviation > HOLIDAY_THRESHOLD or deviation < -HOLIDAY_THRESHOLD:
            return SeasonType.HOLIDAY
        return SeasonType.MID
    if deviation > HOLIDAY_THRESHOLD:
        return SeasonType.HOLIDAY
    return SeasonType.LOW


def apply_markup(price: Decimal, markup: Decimal) -> Decimal:
    return (price * markup).quantize(CENT, rounding=ROUND_HALF_UP)


def normalize(
    raw: Mapping[str, Any],
    markup: Decimal | None = None,
    default_minimum_nights: int | None = None,
) -> list[NormalizedPeriod]:
    """Normalize a raw nightly feed into non-overlapping season periods."""
    if markup is None:
        markup = settings.channel_markup_factor

    runs = group_runs(parse_feed(raw, default_minimum_nights))
    averages = baseline_averages(runs)
    logger.info(
        "Normalized feed into %d periods (averages: low=%s mid=%s peak=%s)",
        len(runs),
        averages[SeasonType.LOW],
        averages[SeasonType.MID],
        averages[SeasonType.PEAK],
    )
    return [
        NormalizedPeriod(
            start=run.start,
            end=run.end,
            season_type=classify(run, averages),
            source_price=run.price,
            price_per_night=apply_markup(run.price, markup),
            minimum_nights=run.minimum_nights,
        )
        for run in runs
    ]
