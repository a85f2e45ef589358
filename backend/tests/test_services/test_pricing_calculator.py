"""Tests for quoting and slot search against stored season tables."""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.availability.pricing import PricingCalculator, load_season_tables
from villarates.availability.slots import SearchWindow, SlotSearch
from villarates.models.property import Property

from factories import add_block, add_booking, add_period, make_property

pytestmark = pytest.mark.asyncio


def _today() -> date:
    return date(2025, 6, 1)


class TestPricingCalculator:
    async def test_flat_price_quote(self, db_session: AsyncSession, test_property: Property) -> None:
        check_in = date(2025, 9, 1)
        quote = await PricingCalculator(db_session).quote(test_property.id, check_in, check_in + timedelta(days=3))
        assert quote.total_price == Decimal("3000")
        assert quote.nights == 3
        assert quote.has_underspecified_nights is False

    async def test_zero_priced_period_flags_quote(self, db_session: AsyncSession) -> None:
        prop = await make_property(db_session)
        await add_period(db_session, prop.id, "01-06", "14-06", 500, position=0)
        await add_period(db_session, prop.id, "15-06", "30-06", 0, position=1)
        quote = await PricingCalculator(db_session).quote(prop.id, date(2025, 6, 14), date(2025, 6, 16))
        assert quote.total_price == Decimal("500")
        assert quote.underspecified_dates == [date(2025, 6, 15)]

    async def test_periods_read_in_stored_order(self, db_session: AsyncSession) -> None:
        prop = await make_property(db_session)
        await add_period(db_session, prop.id, "07-01", "21-12", 800, position=1)
        await add_period(db_session, prop.id, "22-12", "06-01", 2000, season_type="peak", position=0)
        night = await PricingCalculator(db_session).price_for_date(prop.id, date(2025, 12, 25))
        assert night.price == Decimal("2000")

    async def test_price_for_unmatched_date(self, db_session: AsyncSession) -> None:
        prop = await make_property(db_session)
        night = await PricingCalculator(db_session).price_for_date(prop.id, date(2025, 12, 25))
        assert night.is_zero_price is True
        assert night.season_type is None

    async def test_bulk_load_keeps_stored_order_per_property(
        self, db_session: AsyncSession, test_property: Property
    ) -> None:
        prop = await make_property(db_session)
        await add_period(db_session, prop.id, "07-01", "21-12", 800, position=1)
        await add_period(db_session, prop.id, "22-12", "06-01", 2000, position=0)
        unpriced = await make_property(db_session)

        tables = await load_season_tables(db_session, [test_property.id, prop.id, unpriced.id])
        assert [str(record.day_range.start) for record in tables[prop.id]] == ["22-12", "07-01"]
        assert [record.price_per_night for record in tables[test_property.id]] == [Decimal("1000")]
        assert tables[unpriced.id] == []


class TestSlotSearch:
    async def test_skips_booked_days(self, db_session: AsyncSession, test_property: Property) -> None:
        await add_booking(db_session, test_property.id, date(2025, 6, 10), date(2025, 6, 15))
        search = SlotSearch(db_session, today=_today)
        slots = await search.find_available_slots(
            test_property.id, SearchWindow(date(2025, 6, 8), date(2025, 6, 20)), nights=3, limit=3
        )
        assert [slot.check_in for slot in slots] == [date(2025, 6, 15), date(2025, 6, 16), date(2025, 6, 17)]
        assert slots[0].total_price == Decimal("3000")

    async def test_stay_may_run_past_window_end(self, db_session: AsyncSession, test_property: Property) -> None:
        await add_block(db_session, test_property.id, date(2025, 6, 22))
        search = SlotSearch(db_session, today=_today)
        window = SearchWindow(date(2025, 6, 20), date(2025, 6, 20))
        assert await search.find_available_slots(test_property.id, window, nights=3) == []
        assert len(await search.find_available_slots(test_property.id, window, nights=2)) == 1

    async def test_clamps_to_today(self, db_session: AsyncSession, test_property: Property) -> None:
        search = SlotSearch(db_session, today=_today)
        slots = await search.find_available_slots(
            test_property.id, SearchWindow(date(2025, 5, 1), date(2025, 6, 30)), nights=2, limit=1
        )
        assert slots[0].check_in == date(2025, 6, 1)

    async def test_month_window(self, db_session: AsyncSession, test_property: Property) -> None:
        search = SlotSearch(db_session, today=_today)
        slots = await search.find_available_slots(test_property.id, SearchWindow.for_month(2025, 7), nights=7)
        assert len(slots) == 10
        assert slots[0].check_in == date(2025, 7, 1)


class TestSummarizePeriod:
    async def test_partially_booked_period(self, db_session: AsyncSession, test_property: Property) -> None:
        await add_booking(db_session, test_property.id, date(2025, 6, 10), date(2025, 6, 15))
        summary = await SlotSearch(db_session, today=_today).summarize_period(
            test_property.id, date(2025, 6, 10), date(2025, 6, 16), nights=2
        )
        assert summary.total_days == 7
        assert summary.occupied_days == 5
        assert summary.free_days == 2
        assert summary.is_fully_available is False
        assert summary.is_partially_available is True
        assert [slot.check_in for slot in summary.nearest_slots] == [
            date(2025, 6, 17),
            date(2025, 6, 18),
            date(2025, 6, 19),
        ]

    async def test_free_period_has_no_suggestions(self, db_session: AsyncSession, test_property: Property) -> None:
        summary = await SlotSearch(db_session, today=_today).summarize_period(
            test_property.id, date(2025, 6, 10), date(2025, 6, 16), nights=2
        )
        assert summary.is_fully_available is True
        assert summary.nearest_slots == []
