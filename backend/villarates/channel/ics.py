"""ICS calendar import: fetch, validate, and expand a feed into blocked days."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

import httpx
from icalendar import Calendar

from villarates.config import settings
from villarates.exceptions import ChannelFeedError

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "Booked"


@dataclass(frozen=True)
class IcsEvent:
    start: date
    end: date
    summary: str


async def _get(url: str, transport: httpx.AsyncBaseTransport | None) -> httpx.Response:
    try:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(settings.ics_timeout_seconds),
            headers={"User-Agent": settings.ics_user_agent},
            follow_redirects=True,
            transport=transport,
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.TimeoutException as exc:
        raise ChannelFeedError(f"ICS fetch timed out: {url}") from exc
    except httpx.HTTPError as exc:
        raise ChannelFeedError(f"ICS fetch failed: {exc}") from exc
    return response


async def fetch_ics(url: str, transport: httpx.AsyncBaseTransport | None = None) -> str:
    """Download an ICS document under the configured timeout."""
    response = await _get(url, transport)
    return response.text


async def validate_ics_url(url: str, transport: httpx.AsyncBaseTransport | None = None) -> bool:
    """Check that ``url`` serves a parseable calendar.

    The response must be a calendar content type, or the URL must end in
    ``.ics``, and the body must parse as a VCALENDAR.
    """
    try:
        response = await _get(url, transport)
    except ChannelFeedError as exc:
        logger.info("ICS URL %s rejected: %s", url, exc.detail)
        return False

    content_type = response.headers.get("content-type", "")
    if "calendar" not in content_type and not url.endswith(".ics"):
        logger.info("ICS URL %s rejected: content type %r", url, content_type)
        return False

    try:
        calendar = Calendar.from_ical(response.text)
    except ValueError as exc:
        logger.info("ICS URL %s rejected: %s", url, exc)
        return False
    return calendar.name == "VCALENDAR"


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def parse_events(text: str) -> list[IcsEvent]:
    """Parse VEVENTs that carry both a start and an end."""
    try:
        calendar = Calendar.from_ical(text)
    except ValueError as exc:
        raise ChannelFeedError(f"Malformed ICS payload: {exc}") from exc

    events: list[IcsEvent] = []
    for component in calendar.walk("VEVENT"):
        dtstart = component.get("dtstart")
        dtend = component.get("dtend")
        if dtstart is None or dtend is None:
            continue
        start, end = _as_date(dtstart.dt), _as_date(dtend.dt)
        if end < start:
            logger.warning("Skipping ICS event ending before it starts: %s..%s", start, end)
            continue
        summary = str(component.get("summary") or DEFAULT_SUMMARY)
        events.append(IcsEvent(start=start, end=end, summary=summary))
    return events


def event_days(events: list[IcsEvent]) -> dict[date, str]:
    """Every day from start to end inclusive, mapped to its reason (last event wins)."""
    days: dict[date, str] = {}
    for event in events:
        current = event.start
        while current <= event.end:
            days[current] = event.summary
            current += timedelta(days=1)
    return days
