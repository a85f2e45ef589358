"""Tests for the manual sync trigger endpoints."""

import json
import uuid

import httpx
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.api.deps import get_price_sync
from villarates.channel.client import ChannelClient
from villarates.main import app
from villarates.services.sync_service import PriceSync

from factories import make_property

pytestmark = pytest.mark.asyncio

FEED = {
    "20250601": {"p1": "200", "m": "3"},
    "20250602": {"p1": "200", "m": "3"},
}


def _use_channel(session_factory, handler) -> None:
    transport = httpx.MockTransport(handler)
    app.dependency_overrides[get_price_sync] = lambda: PriceSync(
        session_factory, lambda: ChannelClient("https://channel.test", "api-key", transport=transport)
    )


class TestPriceSyncEndpoints:
    async def test_sync_one(self, client: AsyncClient, db_session: AsyncSession, session_factory) -> None:
        prop = await make_property(db_session, channel_prop_id="55", channel_room_id="550")
        _use_channel(session_factory, lambda request: httpx.Response(200, json=FEED))

        response = await client.post(f"/api/v1/sync/prices/{prop.id}")
        assert response.status_code == 200
        assert response.json() == {"message": "Prices synced", "count": 1}

        periods = (await client.get(f"/api/v1/properties/{prop.id}/seasons")).json()["periods"]
        assert [(p["start_day_month"], p["end_day_month"], p["minimum_nights"]) for p in periods] == [
            ("01-06", "02-06", 3)
        ]
        assert float(periods[0]["price_per_night"]) == 260.0
        assert float(periods[0]["source_price_per_night"]) == 200.0

    async def test_upstream_failure_is_502(
        self, client: AsyncClient, db_session: AsyncSession, session_factory
    ) -> None:
        prop = await make_property(db_session, channel_prop_id="55", channel_room_id="550")
        _use_channel(session_factory, lambda request: httpx.Response(500))

        response = await client.post(f"/api/v1/sync/prices/{prop.id}")
        assert response.status_code == 502

    async def test_unknown_property(self, client: AsyncClient, session_factory) -> None:
        _use_channel(session_factory, lambda request: httpx.Response(200, json=FEED))
        response = await client.post(f"/api/v1/sync/prices/{uuid.uuid4()}")
        assert response.status_code == 404

    async def test_sync_all(self, client: AsyncClient, db_session: AsyncSession, session_factory) -> None:
        await make_property(db_session, channel_prop_id="55", channel_room_id="550")
        await make_property(db_session, channel_prop_id="66", channel_room_id="660")

        def handler(request: httpx.Request) -> httpx.Response:
            if json.loads(request.content)["roomId"] == "660":
                return httpx.Response(500)
            return httpx.Response(200, json=FEED)

        _use_channel(session_factory, handler)
        response = await client.post("/api/v1/sync/prices")
        assert response.status_code == 200
        assert response.json() == {"success": 1, "failed": 1}


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
