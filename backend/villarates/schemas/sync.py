"""Schemas for channel and calendar sync endpoints."""

from pydantic import BaseModel


class SyncResultResponse(BaseModel):
    success: int
    failed: int


class PropertySyncResponse(BaseModel):
    message: str
    count: int
