"""Tests for availability, quote, occupancy, and slot endpoints."""

import uuid
from datetime import date, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.models.property import Property

from factories import add_block, add_booking

pytestmark = pytest.mark.asyncio


def _day(offset: int) -> date:
    return date.today() + timedelta(days=offset)


class TestAvailabilityCheck:
    async def test_free_stay(self, client: AsyncClient, test_property: Property) -> None:
        response = await client.get(
            f"/api/v1/properties/{test_property.id}/availability",
            params={"check_in": "2025-06-15", "check_out": "2025-06-18"},
        )
        assert response.status_code == 200
        assert response.json()["available"] is True

    async def test_conflicts_are_reported(
        self, client: AsyncClient, db_session: AsyncSession, test_property: Property
    ) -> None:
        booking = await add_booking(db_session, test_property.id, date(2025, 6, 10), date(2025, 6, 15))
        await add_block(db_session, test_property.id, date(2025, 6, 16))
        response = await client.get(
            f"/api/v1/properties/{test_property.id}/availability",
            params={"check_in": "2025-06-14", "check_out": "2025-06-18"},
        )
        data = response.json()
        assert data["available"] is False
        assert data["conflicting_booking_ids"] == [str(booking.id)]
        assert data["blocked_dates"] == ["2025-06-16"]

    async def test_inverted_span(self, client: AsyncClient, test_property: Property) -> None:
        response = await client.get(
            f"/api/v1/properties/{test_property.id}/availability",
            params={"check_in": "2025-06-18", "check_out": "2025-06-15"},
        )
        assert response.status_code == 422

    async def test_unknown_property(self, client: AsyncClient) -> None:
        response = await client.get(
            f"/api/v1/properties/{uuid.uuid4()}/availability",
            params={"check_in": "2025-06-15", "check_out": "2025-06-18"},
        )
        assert response.status_code == 404


class TestOccupancy:
    async def test_booking_and_block_marks(
        self, client: AsyncClient, db_session: AsyncSession, test_property: Property
    ) -> None:
        await add_booking(db_session, test_property.id, date(2025, 6, 10), date(2025, 6, 12))
        await add_block(db_session, test_property.id, date(2025, 6, 12), reason="Cleaning")
        response = await client.get(
            f"/api/v1/properties/{test_property.id}/occupancy",
            params={"start": "2025-06-01", "end": "2025-07-01"},
        )
        data = response.json()
        assert data["occupied_dates"] == ["2025-06-10", "2025-06-11", "2025-06-12"]
        assert data["marks"][-1] == {"day": "2025-06-12", "source": "calendar", "reason": "Cleaning"}


class TestQuote:
    async def test_quote(self, client: AsyncClient, test_property: Property) -> None:
        response = await client.get(
            f"/api/v1/properties/{test_property.id}/quote",
            params={"check_in": "2025-09-01", "check_out": "2025-09-04"},
        )
        assert response.status_code == 200
        data = response.json()
        assert float(data["total_price"]) == 3000.0
        assert data["nights"] == 3
        assert data["average_per_night"] == 1000
        assert data["has_underspecified_nights"] is False
        assert len(data["breakdown"]) == 3
        assert data["breakdown"][0]["season_type"] == "low"

    async def test_nightly_price(self, client: AsyncClient, test_property: Property) -> None:
        response = await client.get(f"/api/v1/properties/{test_property.id}/price", params={"date": "2025-02-29"})
        assert response.status_code == 422

        response = await client.get(f"/api/v1/properties/{test_property.id}/price", params={"date": "2024-02-29"})
        assert response.status_code == 200
        assert float(response.json()["price"]) == 1000.0


class TestSlots:
    async def test_window_search(
        self, client: AsyncClient, db_session: AsyncSession, test_property: Property
    ) -> None:
        await add_booking(db_session, test_property.id, _day(10), _day(15))
        response = await client.get(
            f"/api/v1/properties/{test_property.id}/slots",
            params={"start": _day(8).isoformat(), "end": _day(20).isoformat(), "nights": 3, "limit": 2},
        )
        assert response.status_code == 200
        slots = response.json()["slots"]
        assert [slot["check_in"] for slot in slots] == [_day(15).isoformat(), _day(16).isoformat()]

    async def test_past_window_start_clamped(self, client: AsyncClient, test_property: Property) -> None:
        response = await client.get(
            f"/api/v1/properties/{test_property.id}/slots",
            params={"start": _day(-10).isoformat(), "end": _day(5).isoformat(), "nights": 2, "limit": 1},
        )
        assert response.json()["slots"][0]["check_in"] == date.today().isoformat()

    async def test_month_search(self, client: AsyncClient, test_property: Property) -> None:
        target = _day(60)
        response = await client.get(
            f"/api/v1/properties/{test_property.id}/slots",
            params={"year": target.year, "month": target.month, "nights": 2},
        )
        assert response.status_code == 200
        assert response.json()["slots"]

    async def test_missing_window(self, client: AsyncClient, test_property: Property) -> None:
        response = await client.get(f"/api/v1/properties/{test_property.id}/slots", params={"nights": 2})
        assert response.status_code == 422

    async def test_period_summary(
        self, client: AsyncClient, db_session: AsyncSession, test_property: Property
    ) -> None:
        await add_booking(db_session, test_property.id, _day(10), _day(12))
        response = await client.get(
            f"/api/v1/properties/{test_property.id}/summary",
            params={"start": _day(10).isoformat(), "end": _day(13).isoformat(), "nights": 2},
        )
        data = response.json()
        assert data["occupied_days"] == 2
        assert data["is_partially_available"] is True
        assert data["nearest_slots"][0]["check_in"] == _day(14).isoformat()
