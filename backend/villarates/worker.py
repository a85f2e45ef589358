"""Celery worker and beat schedule for the periodic sync jobs.

Run with::

    celery -A villarates.worker worker --beat --loglevel=info
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import asdict

from celery import Celery
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from villarates.config import settings
from villarates.services.sync_service import CalendarSync, PriceSync, SyncResult

logger = logging.getLogger(__name__)

app = Celery("villarates", broker=settings.redis_url, backend=settings.redis_url)

app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
)

# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    "sync-channel-prices": {
        "task": "villarates.sync_channel_prices",
        "schedule": settings.channel_sync_interval_minutes * 60.0,
        "options": {"expires": settings.channel_sync_interval_minutes * 60.0 - 10},
    },
    "sync-ics-calendars": {
        "task": "villarates.sync_ics_calendars",
        "schedule": settings.calendar_sync_interval_hours * 3600.0,
    },
}


def _run(job: Callable[[async_sessionmaker[AsyncSession]], Awaitable[SyncResult]]) -> dict[str, int]:
    """Run an async sync job on a fresh event loop with its own engine.

    Pooled asyncpg connections are tied to the loop that opened them, so the
    engine must not outlive the ``asyncio.run`` call.
    """

    async def runner() -> SyncResult:
        engine = create_async_engine(settings.async_database_url, pool_pre_ping=True)
        try:
            return await job(async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False))
        finally:
            await engine.dispose()

    return asdict(asyncio.run(runner()))


@app.task(name="villarates.sync_channel_prices")
def sync_channel_prices() -> dict[str, int]:
    """Pull the channel feed into every linked property's season table."""
    if not settings.channel_sync_enabled:
        logger.info("Channel sync disabled, skipping")
        return asdict(SyncResult())
    return _run(lambda factory: PriceSync(factory).sync_all())


@app.task(name="villarates.sync_ics_calendars")
def sync_ics_calendars() -> dict[str, int]:
    """Import the ICS calendar of every published property."""
    return _run(lambda factory: CalendarSync(factory).sync_all())
