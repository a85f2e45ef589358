"""Manual triggers for channel price sync and ICS calendar sync.

The same jobs run on a schedule in the Celery worker; these endpoints let an
admin force a sync without waiting for the next beat.
"""

import uuid

from fastapi import APIRouter, Depends

from villarates.api.deps import get_calendar_sync, get_price_sync
from villarates.schemas.sync import PropertySyncResponse, SyncResultResponse
from villarates.services.sync_service import CalendarSync, PriceSync

router = APIRouter(prefix="/api/v1/sync", tags=["sync"])


@router.post(
    "/prices",
    response_model=SyncResultResponse,
    summary="Sync season tables of all linked properties",
)
async def sync_all_prices(price_sync: PriceSync = Depends(get_price_sync)) -> SyncResultResponse:
    result = await price_sync.sync_all()
    return SyncResultResponse(success=result.success, failed=result.failed)


@router.post(
    "/prices/{property_id}",
    response_model=PropertySyncResponse,
    summary="Sync one property's season table",
)
async def sync_property_prices(
    property_id: uuid.UUID,
    price_sync: PriceSync = Depends(get_price_sync),
) -> PropertySyncResponse:
    """Pull the channel feed for one property and replace its season table.

    Upstream failures return 502; the stored table is left unchanged.
    """
    count = await price_sync.sync_property(property_id)
    return PropertySyncResponse(message="Prices synced", count=count)


@router.post(
    "/calendars",
    response_model=SyncResultResponse,
    summary="Import ICS calendars of all published properties",
)
async def sync_all_calendars(calendar_sync: CalendarSync = Depends(get_calendar_sync)) -> SyncResultResponse:
    result = await calendar_sync.sync_all()
    return SyncResultResponse(success=result.success, failed=result.failed)
