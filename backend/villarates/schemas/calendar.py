"""Schemas for calendar block endpoints."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, model_validator


class BlockRangeRequest(BaseModel):
    """An inclusive range of days to block or unblock."""

    start: date
    end: date
    reason: str | None = Field(None, max_length=255)

    @model_validator(mode="after")
    def check_dates(self) -> "BlockRangeRequest":
        if self.end < self.start:
            raise ValueError("end must not be before start")
        return self


class CalendarBlockResponse(BaseModel):
    blocked_date: date
    reason: str | None = None
    source: str

    model_config = ConfigDict(from_attributes=True)


class CalendarBlockListResponse(BaseModel):
    items: list[CalendarBlockResponse]
    total: int


class IcsValidationRequest(BaseModel):
    url: HttpUrl


class IcsValidationResponse(BaseModel):
    url: str
    valid: bool
    message: str
