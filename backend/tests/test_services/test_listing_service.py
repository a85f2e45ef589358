"""Tests for the priced listing search and alternatives."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import event, inspect
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.exceptions import InvalidSpanError
from villarates.models.property import Property
from villarates.models.season import SeasonPeriod
from villarates.services import listing_service

from factories import add_block, add_booking, add_period, make_property

pytestmark = pytest.mark.asyncio

STAY = (date(2025, 6, 10), date(2025, 6, 13))


async def _priced(db: AsyncSession, price: int, **overrides) -> Property:
    prop = await make_property(db, **overrides)
    await add_period(db, prop.id, "01-01", "31-12", price)
    return prop


class TestSearchListings:
    async def test_sorted_by_total_and_unusable_quotes_left_out(
        self, db_session: AsyncSession, test_property: Property
    ) -> None:
        cheap = await _priced(db_session, 500)
        booked = await _priced(db_session, 100)
        await add_booking(db_session, booked.id, date(2025, 6, 12), date(2025, 6, 20))
        await make_property(db_session)  # published but unpriced
        await _priced(db_session, 50, status="hidden")

        listings = await listing_service.search_listings(db_session, *STAY)
        assert [listing.property.id for listing in listings] == [cheap.id, test_property.id]
        assert [listing.quote.total_price for listing in listings] == [Decimal("1500"), Decimal("3000")]

        descending = await listing_service.search_listings(db_session, *STAY, sort="price_desc")
        assert [listing.property.id for listing in descending] == [test_property.id, cheap.id]

    async def test_block_on_check_in_day_still_listed(
        self, db_session: AsyncSession, test_property: Property
    ) -> None:
        await add_block(db_session, test_property.id, STAY[0])
        listings = await listing_service.search_listings(db_session, *STAY)
        assert [listing.property.id for listing in listings] == [test_property.id]

    async def test_block_inside_stay_excludes(self, db_session: AsyncSession, test_property: Property) -> None:
        await add_block(db_session, test_property.id, date(2025, 6, 11))
        assert await listing_service.search_listings(db_session, *STAY) == []

    async def test_filters(self, db_session: AsyncSession, test_property: Property) -> None:
        big = await _priced(db_session, 2000, name="Big Sunset Villa", bedrooms=6)
        by_bedrooms = await listing_service.search_listings(db_session, *STAY, min_bedrooms=5)
        assert [listing.property.id for listing in by_bedrooms] == [big.id]
        by_name = await listing_service.search_listings(db_session, *STAY, search="sunset")
        assert [listing.property.id for listing in by_name] == [big.id]

    async def test_season_tables_loaded_in_one_query(
        self, db_session: AsyncSession, test_property: Property
    ) -> None:
        await _priced(db_session, 500)
        await _priced(db_session, 700)
        season_selects = []

        def capture(orm_execute_state) -> None:
            if orm_execute_state.is_select and orm_execute_state.bind_mapper is inspect(SeasonPeriod):
                season_selects.append(orm_execute_state.statement)

        event.listen(db_session.sync_session, "do_orm_execute", capture)
        try:
            listings = await listing_service.search_listings(db_session, *STAY)
        finally:
            event.remove(db_session.sync_session, "do_orm_execute", capture)

        assert len(listings) == 3
        assert len(season_selects) == 1

    async def test_rejects_empty_stay(self, db_session: AsyncSession) -> None:
        with pytest.raises(InvalidSpanError):
            await listing_service.search_listings(db_session, STAY[0], STAY[0])


class TestCountAvailable:
    async def test_counts_unpriced_but_free_properties(
        self, db_session: AsyncSession, test_property: Property
    ) -> None:
        await make_property(db_session)
        booked = await _priced(db_session, 100)
        await add_booking(db_session, booked.id, *STAY)
        assert await listing_service.count_available(db_session, *STAY) == 2


class TestFindAlternatives:
    async def test_same_size_or_larger_and_free(self, db_session: AsyncSession, test_property: Property) -> None:
        larger = await _priced(db_session, 1500, bedrooms=4)
        await _priced(db_session, 700, bedrooms=2)
        busy = await _priced(db_session, 900, bedrooms=5)
        await add_booking(db_session, busy.id, *STAY)

        alternatives = await listing_service.find_alternatives(db_session, test_property.id, *STAY)
        assert [alt.property.id for alt in alternatives] == [larger.id]
        assert alternatives[0].min_price_per_night == Decimal("1500")
