"""Schemas for the public listing search."""

from decimal import Decimal

from pydantic import BaseModel

from villarates.schemas.availability import QuoteResponse
from villarates.schemas.property import PropertyResponse


class ListingResponse(BaseModel):
    property: PropertyResponse
    quote: QuoteResponse


class ListingSearchResponse(BaseModel):
    items: list[ListingResponse]
    total: int
    available_count: int


class AlternativeResponse(BaseModel):
    property: PropertyResponse
    min_price_per_night: Decimal | None = None
