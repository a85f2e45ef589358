"""Public listing search: priced, available properties for a stay."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.api.deps import get_db
from villarates.schemas.availability import QuoteResponse
from villarates.schemas.listing import AlternativeResponse, ListingResponse, ListingSearchResponse
from villarates.schemas.property import PropertyResponse
from villarates.services import listing_service

router = APIRouter(prefix="/api/v1/listings", tags=["listings"])


@router.get(
    "",
    response_model=ListingSearchResponse,
    summary="Search available properties for a stay",
)
async def search_listings(
    check_in: date = Query(...),
    check_out: date = Query(...),
    bedrooms: int | None = Query(None, ge=0, description="Minimum number of bedrooms"),
    search: str | None = Query(None, max_length=255),
    sort: str = Query("price_asc", pattern="^(price_asc|price_desc|newest)$"),
    db: AsyncSession = Depends(get_db),
) -> ListingSearchResponse:
    """Published properties free for the stay, each with its quote.

    Properties with any unpriced night are left out of ``items`` but still
    counted in ``available_count``.
    """
    listings = await listing_service.search_listings(db, check_in, check_out, bedrooms, search, sort)
    available_count = await listing_service.count_available(db, check_in, check_out, bedrooms, search)
    return ListingSearchResponse(
        items=[
            ListingResponse(
                property=PropertyResponse.model_validate(listing.property),
                quote=QuoteResponse.model_validate(listing.quote),
            )
            for listing in listings
        ],
        total=len(listings),
        available_count=available_count,
    )


@router.get(
    "/count",
    summary="Count available properties for a stay",
)
async def count_available(
    check_in: date = Query(...),
    check_out: date = Query(...),
    bedrooms: int | None = Query(None, ge=0),
    search: str | None = Query(None, max_length=255),
    db: AsyncSession = Depends(get_db),
) -> dict[str, int]:
    count = await listing_service.count_available(db, check_in, check_out, bedrooms, search)
    return {"count": count}


@router.get(
    "/{property_id}/alternatives",
    response_model=list[AlternativeResponse],
    summary="Similar properties free for the same stay",
)
async def find_alternatives(
    property_id: uuid.UUID,
    check_in: date = Query(...),
    check_out: date = Query(...),
    db: AsyncSession = Depends(get_db),
) -> list[AlternativeResponse]:
    alternatives = await listing_service.find_alternatives(db, property_id, check_in, check_out)
    return [
        AlternativeResponse(
            property=PropertyResponse.model_validate(alt.property),
            min_price_per_night=alt.min_price_per_night,
        )
        for alt in alternatives
    ]
