"""Channel price sync and ICS calendar sync.

Each property is synced in its own session and transaction, so one failing
property (bad feed, timeout, rejected table) is logged and counted while the
others still go through. A failed property keeps its previous season table or
blocks untouched.

Feeds are fetched before the write transaction opens, so the property row
lock (which booking creation also takes) is never held across network I/O.
"""

import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from villarates.availability.records import SeasonRecord
from villarates.channel.client import ChannelClient
from villarates.channel.ics import event_days, fetch_ics, parse_events
from villarates.channel.normalizer import normalize
from villarates.exceptions import ChannelFeedError, PropertyNotLinkedError
from villarates.models.property import Property
from villarates.services.calendar_service import replace_ics_blocks
from villarates.services.property_service import get_property
from villarates.services.season_service import replace_season_table

logger = logging.getLogger(__name__)

FEED_HORIZON = timedelta(days=365)


@dataclass
class SyncResult:
    success: int = 0
    failed: int = 0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Channel prices
# ---------------------------------------------------------------------------


class PriceSync:
    """Pulls the channel manager's nightly feed into season tables."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        client_factory: Callable[[], ChannelClient] = ChannelClient.from_settings,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._session_factory = session_factory
        self._client_factory = client_factory
        self._today = today

    async def _sync(self, client: ChannelClient, property_id: uuid.UUID) -> int:
        async with self._session_factory() as session:
            prop = await get_property(session, property_id)
            channel_prop_id, channel_room_id = prop.channel_prop_id, prop.channel_room_id
        if not channel_prop_id:
            raise PropertyNotLinkedError("Property is not linked to the channel manager")

        # Network calls run with no session open; the row lock is held only for the write.
        if not channel_room_id:
            channel_room_id = await client.get_room_id(channel_prop_id)
            if channel_room_id is None:
                raise ChannelFeedError(f"No room type found for channel property {channel_prop_id}")

        start = self._today()
        feed = await client.get_room_dates(channel_room_id, channel_prop_id, start, start + FEED_HORIZON)
        periods = normalize(feed)
        if not periods:
            raise ChannelFeedError("Channel feed contained no usable dates")

        records = [
            SeasonRecord(
                season_type=period.season_type,
                day_range=period.day_range,
                price_per_night=period.price_per_night,
                minimum_nights=period.minimum_nights,
                source_price_per_night=period.source_price,
            )
            for period in periods
        ]

        async with self._session_factory() as session, session.begin():
            prop = await get_property(session, property_id, for_update=True)
            if prop.channel_prop_id != channel_prop_id:
                raise ChannelFeedError("Channel link changed while the feed was being fetched")
            prop.channel_room_id = channel_room_id
            await replace_season_table(session, prop.id, records)
            prop.last_price_sync = _utcnow()
        return len(records)

    async def sync_property(self, property_id: uuid.UUID) -> int:
        """Replace one property's season table from the feed; returns the period count.

        Errors propagate; the property's transaction is rolled back.
        """
        async with self._client_factory() as client:
            count = await self._sync(client, property_id)
        logger.info("Synced %d season periods for property %s", count, property_id)
        return count

    async def sync_all(self) -> SyncResult:
        """Sync every property linked to the channel manager."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Property.id).where(Property.channel_prop_id.is_not(None)).order_by(Property.created_at)
            )
            property_ids = list(result.scalars().all())

        outcome = SyncResult()
        async with self._client_factory() as client:
            for property_id in property_ids:
                try:
                    await self._sync(client, property_id)
                except Exception:
                    logger.exception("Price sync failed for property %s", property_id)
                    outcome.failed += 1
                else:
                    outcome.success += 1

        logger.info("Price sync finished: %d succeeded, %d failed", outcome.success, outcome.failed)
        return outcome


# ---------------------------------------------------------------------------
# ICS calendars
# ---------------------------------------------------------------------------


class CalendarSync:
    """Imports external ICS calendars as calendar blocks."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        fetcher: Callable[[str], Awaitable[str]] = fetch_ics,
    ) -> None:
        self._session_factory = session_factory
        self._fetcher = fetcher

    async def sync_property(self, property_id: uuid.UUID) -> int:
        """Replace one property's ICS blocks; returns the number of blocked days stored.

        The calendar is fetched and parsed before the property row is locked.
        """
        async with self._session_factory() as session:
            prop = await get_property(session, property_id)
            url = prop.ics_calendar_url
        if not url:
            raise PropertyNotLinkedError("Property has no ICS calendar URL")

        days = event_days(parse_events(await self._fetcher(url)))

        async with self._session_factory() as session, session.begin():
            prop = await get_property(session, property_id, for_update=True)
            if prop.ics_calendar_url != url:
                raise ChannelFeedError("ICS calendar URL changed while the calendar was being fetched")
            stored = await replace_ics_blocks(session, prop.id, days)
            prop.last_calendar_sync = _utcnow()

        logger.info("Imported %d blocked days for property %s", stored, property_id)
        return stored

    async def sync_all(self) -> SyncResult:
        """Sync every published property that has an ICS URL."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Property.id)
                .where(Property.status == "published", Property.ics_calendar_url.is_not(None))
                .order_by(Property.created_at)
            )
            property_ids = list(result.scalars().all())

        outcome = SyncResult()
        for property_id in property_ids:
            try:
                await self.sync_property(property_id)
            except Exception:
                logger.exception("Calendar sync failed for property %s", property_id)
                outcome.failed += 1
            else:
                outcome.success += 1

        logger.info("Calendar sync finished: %d succeeded, %d failed", outcome.success, outcome.failed)
        return outcome
