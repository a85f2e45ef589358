"""Pydantic v2 request/response schemas for property endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    """Schema for creating a new property."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    location: str | None = Field(None, max_length=255)
    property_type: str = Field(..., pattern="^(villa|apartment|house)$")
    bedrooms: int | None = Field(None, ge=0)
    max_guests: int | None = Field(None, ge=1)
    status: str = Field("draft", pattern="^(draft|published|hidden)$")
    channel_prop_id: str | None = Field(None, max_length=50)
    channel_room_id: str | None = Field(None, max_length=50)
    ics_calendar_url: str | None = Field(None, max_length=1024)


class PropertyUpdate(BaseModel):
    """Schema for partially updating a property. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    location: str | None = Field(None, max_length=255)
    property_type: str | None = Field(None, pattern="^(villa|apartment|house)$")
    bedrooms: int | None = Field(None, ge=0)
    max_guests: int | None = Field(None, ge=1)
    status: str | None = Field(None, pattern="^(draft|published|hidden)$")
    channel_prop_id: str | None = Field(None, max_length=50)
    channel_room_id: str | None = Field(None, max_length=50)
    ics_calendar_url: str | None = Field(None, max_length=1024)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyResponse(BaseModel):
    """Property information returned from the API."""

    id: uuid.UUID
    name: str
    description: str | None = None
    location: str | None = None
    property_type: str
    bedrooms: int | None = None
    max_guests: int | None = None
    status: str
    channel_prop_id: str | None = None
    channel_room_id: str | None = None
    ics_calendar_url: str | None = None
    last_price_sync: datetime | None = None
    last_calendar_sync: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertyListResponse(BaseModel):
    """Paginated list of properties."""

    items: list[PropertyResponse]
    total: int
