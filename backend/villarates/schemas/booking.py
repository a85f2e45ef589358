"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for creating a new booking."""

    property_id: uuid.UUID
    check_in: date
    check_out: date
    guest_name: str = Field(..., min_length=1, max_length=255)
    guest_email: EmailStr
    guest_phone: str | None = Field(None, max_length=50)
    adults: int = Field(1, ge=1)
    children: int = Field(0, ge=0)
    booking_source: str = Field("website", pattern="^(website|admin|channel)$")
    total_price: Decimal | None = Field(None, ge=0)
    notes: str | None = None

    @model_validator(mode="after")
    def check_dates(self) -> "BookingCreate":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class BookingUpdate(BaseModel):
    """Schema for partially updating a booking. All fields optional.

    Cancellation goes through its own endpoint.
    """

    check_in: date | None = None
    check_out: date | None = None
    guest_name: str | None = Field(None, min_length=1, max_length=255)
    guest_email: EmailStr | None = None
    guest_phone: str | None = Field(None, max_length=50)
    adults: int | None = Field(None, ge=1)
    children: int | None = Field(None, ge=0)
    total_price: Decimal | None = Field(None, ge=0)
    notes: str | None = None

    @model_validator(mode="after")
    def check_dates(self) -> "BookingUpdate":
        """If both dates are provided, validate check_out > check_in."""
        if self.check_in is not None and self.check_out is not None and self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Standard booking response returned from CRUD operations."""

    id: uuid.UUID
    property_id: uuid.UUID
    check_in: date
    check_out: date
    status: str
    guest_name: str
    guest_email: str
    guest_phone: str | None = None
    adults: int
    children: int
    booking_source: str
    total_price: Decimal | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int
