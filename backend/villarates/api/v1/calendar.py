"""Calendar block routes: manual blocks, on-demand ICS import, and ICS URL checks."""

import uuid
from collections.abc import Awaitable, Callable
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.api.deps import get_calendar_sync, get_db, get_ics_validator
from villarates.schemas.calendar import (
    BlockRangeRequest,
    CalendarBlockListResponse,
    CalendarBlockResponse,
    IcsValidationRequest,
    IcsValidationResponse,
)
from villarates.schemas.common import MessageResponse
from villarates.schemas.sync import PropertySyncResponse
from villarates.services import calendar_service
from villarates.services.sync_service import CalendarSync

router = APIRouter(prefix="/api/v1/properties/{property_id}/calendar", tags=["calendar"])
validation_router = APIRouter(prefix="/api/v1/calendar", tags=["calendar"])


@router.get(
    "",
    response_model=CalendarBlockListResponse,
    summary="List blocked days",
)
async def list_blocks(
    property_id: uuid.UUID,
    start: date | None = Query(None, description="First day (inclusive)"),
    end: date | None = Query(None, description="Last day (inclusive)"),
    db: AsyncSession = Depends(get_db),
) -> CalendarBlockListResponse:
    blocks = await calendar_service.list_blocks(db, property_id, start, end)
    return CalendarBlockListResponse(
        items=[CalendarBlockResponse.model_validate(b) for b in blocks],
        total=len(blocks),
    )


@router.post(
    "",
    response_model=CalendarBlockListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Block a range of days",
)
async def add_blocks(
    property_id: uuid.UUID,
    body: BlockRangeRequest,
    db: AsyncSession = Depends(get_db),
) -> CalendarBlockListResponse:
    """Block every day from ``start`` to ``end`` inclusive."""
    blocks = await calendar_service.add_manual_blocks(db, property_id, body.start, body.end, body.reason)
    return CalendarBlockListResponse(
        items=[CalendarBlockResponse.model_validate(b) for b in blocks],
        total=len(blocks),
    )


@router.delete(
    "",
    response_model=MessageResponse,
    summary="Unblock a range of days",
)
async def remove_blocks(
    property_id: uuid.UUID,
    start: date = Query(..., description="First day (inclusive)"),
    end: date = Query(..., description="Last day (inclusive)"),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    removed = await calendar_service.remove_blocks(db, property_id, start, end)
    return MessageResponse(message=f"Removed {removed} blocked days")


@router.post(
    "/sync",
    response_model=PropertySyncResponse,
    summary="Import the property's ICS calendar now",
)
async def sync_calendar(
    property_id: uuid.UUID,
    calendar_sync: CalendarSync = Depends(get_calendar_sync),
) -> PropertySyncResponse:
    """Replace the property's imported blocks with the current ICS feed."""
    stored = await calendar_sync.sync_property(property_id)
    return PropertySyncResponse(message="Calendar synced", count=stored)


@validation_router.post(
    "/validate",
    response_model=IcsValidationResponse,
    summary="Check that a URL serves an ICS calendar",
)
async def validate_calendar(
    body: IcsValidationRequest,
    validator: Callable[[str], Awaitable[bool]] = Depends(get_ics_validator),
) -> IcsValidationResponse:
    """Fetch the URL once and report whether it can be imported."""
    url = str(body.url)
    valid = await validator(url)
    return IcsValidationResponse(
        url=url,
        valid=valid,
        message="Calendar is valid" if valid else "URL does not serve a readable ICS calendar",
    )
