"""Bookings API router: the internal reservation ledger."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.api.deps import get_db
from villarates.models.booking import Booking
from villarates.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingUpdate,
)
from villarates.services import booking_service

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
) -> Booking:
    """Create a booking if the stay is free.

    Returns 409 when an active booking overlaps the stay or a blocked day
    falls strictly inside it.
    """
    return await booking_service.create_booking(db, body)


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List bookings",
)
async def list_bookings(
    property_id: uuid.UUID | None = Query(None, description="Filter by property"),
    status_filter: str | None = Query(None, alias="status", description="Filter by booking status"),
    check_in_from: date | None = Query(None, description="Bookings with check_in >= this date"),
    check_in_to: date | None = Query(None, description="Bookings with check_in <= this date"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Return a paginated list of bookings, earliest check-in first."""
    filters = []
    if property_id is not None:
        filters.append(Booking.property_id == property_id)
    if status_filter is not None:
        filters.append(Booking.status == status_filter)
    if check_in_from is not None:
        filters.append(Booking.check_in >= check_in_from)
    if check_in_to is not None:
        filters.append(Booking.check_in <= check_in_to)

    total_result = await db.execute(select(func.count()).select_from(Booking).where(*filters))
    total = total_result.scalar_one()

    items_query = select(Booking).where(*filters).order_by(Booking.check_in).offset(skip).limit(limit)
    result = await db.execute(items_query)
    items = list(result.scalars().all())

    return {"items": items, "total": total}


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a booking by ID",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> Booking:
    return await booking_service.get_booking(db, booking_id)


@router.put(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Update a booking",
)
async def update_booking(
    booking_id: uuid.UUID,
    body: BookingUpdate,
    db: AsyncSession = Depends(get_db),
) -> Booking:
    """Partially update a booking; new dates go through the same conflict check."""
    return await booking_service.update_booking(db, booking_id, body)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel a booking",
)
async def cancel_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> Booking:
    """Cancel a booking. Its nights are free again right away."""
    return await booking_service.cancel_booking(db, booking_id)
