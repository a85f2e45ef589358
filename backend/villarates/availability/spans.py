"""Date span helpers shared by the resolver, calculator, and slot search."""

from collections.abc import Iterator
from datetime import date, timedelta

from villarates.exceptions import InvalidSpanError

ONE_DAY = timedelta(days=1)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date in the half-open span ``[start, end)``."""
    current = start
    while current < end:
        yield current
        current += ONE_DAY


def count_nights(check_in: date, check_out: date) -> int:
    """Return the number of nights in a stay, rejecting empty or inverted spans."""
    nights = (check_out - check_in).days
    if nights < 1:
        raise InvalidSpanError("check_out must be after check_in")
    return nights
