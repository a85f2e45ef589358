"""Async client for the channel manager's JSON API."""

import logging
from datetime import date
from typing import Any

import httpx

from villarates.config import settings
from villarates.exceptions import ChannelFeedError

logger = logging.getLogger(__name__)


class ChannelClient:
    """Thin wrapper over ``httpx.AsyncClient`` with bounded timeouts.

    Use as an async context manager::

        async with ChannelClient.from_settings() as client:
            feed = await client.get_room_dates(room_id, prop_id, start, end)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        prop_key_prefix: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._prop_key_prefix = prop_key_prefix
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, transport: httpx.AsyncBaseTransport | None = None) -> "ChannelClient":
        return cls(
            base_url=settings.channel_api_url,
            api_key=settings.channel_api_key,
            prop_key_prefix=settings.channel_prop_key_prefix,
            timeout=settings.channel_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "ChannelClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _post(self, endpoint: str, payload: dict[str, Any]) -> Any:
        try:
            response = await self._http.post(f"/{endpoint}", json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as exc:
            logger.warning("Channel API %s timed out", endpoint)
            raise ChannelFeedError(f"Channel API {endpoint} timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("Channel API %s failed: %s", endpoint, exc)
            raise ChannelFeedError(f"Channel API {endpoint} failed: {exc}") from exc
        except ValueError as exc:
            raise ChannelFeedError(f"Channel API {endpoint} returned invalid JSON") from exc

    async def get_properties(self) -> list[dict[str, Any]]:
        """List the properties (with their room types) visible to the API key."""
        data = await self._post("getProperties", {"authentication": {"apiKey": self._api_key}})
        if not isinstance(data, dict):
            raise ChannelFeedError("Channel API getProperties returned an unexpected payload")
        return data.get("getProperties") or []

    async def get_room_id(self, prop_id: str) -> str | None:
        """Return the first room type id of a channel property, if any."""
        for prop in await self.get_properties():
            if str(prop.get("propId")) == str(prop_id):
                room_types = prop.get("roomTypes") or []
                if room_types:
                    return str(room_types[0].get("roomId"))
        return None

    async def get_room_dates(self, room_id: str, prop_id: str, start: date, end: date) -> dict[str, Any]:
        """Fetch the nightly price/availability feed for ``start``..``end``."""
        logger.info("Requesting room dates for room %s (%s..%s)", room_id, start, end)
        data = await self._post(
            "getRoomDates",
            {
                "authentication": {
                    "apiKey": self._api_key,
                    "propKey": f"{self._prop_key_prefix}{prop_id}",
                },
                "roomId": room_id,
                "from": start.strftime("%Y%m%d"),
                "to": end.strftime("%Y%m%d"),
            },
        )
        if not isinstance(data, dict):
            raise ChannelFeedError("Channel API getRoomDates returned an unexpected payload")
        return data
