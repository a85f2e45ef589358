"""Shared API dependencies: single import point for all routers.

Re-exports the database session dependency and builds the engine services
on top of it so routers (and tests, via ``dependency_overrides``) get them
from one place::

    from villarates.api.deps import get_db, get_slot_search
"""

from collections.abc import Awaitable, Callable

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from villarates.availability.occupancy import OccupancyResolver
from villarates.availability.pricing import PricingCalculator
from villarates.availability.slots import SlotSearch
from villarates.channel.ics import validate_ics_url
from villarates.database import async_session_factory, get_db
from villarates.services.sync_service import CalendarSync, PriceSync


def get_resolver(db: AsyncSession = Depends(get_db)) -> OccupancyResolver:
    return OccupancyResolver(db)


def get_calculator(db: AsyncSession = Depends(get_db)) -> PricingCalculator:
    return PricingCalculator(db)


def get_slot_search(db: AsyncSession = Depends(get_db)) -> SlotSearch:
    return SlotSearch(db)


def get_ics_validator() -> Callable[[str], Awaitable[bool]]:
    return validate_ics_url


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Sessions for work that commits per property (syncs), outside the request transaction."""
    return async_session_factory


def get_price_sync(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> PriceSync:
    return PriceSync(session_factory)


def get_calendar_sync(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> CalendarSync:
    return CalendarSync(session_factory)


__all__ = [
    "get_db",
    "get_resolver",
    "get_calculator",
    "get_slot_search",
    "get_session_factory",
    "get_price_sync",
    "get_calendar_sync",
    "get_ics_validator",
]
