"""Season table API: read and wholesale-replace a property's price periods."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.api.deps import get_db
from villarates.schemas.season import SeasonPeriodResponse, SeasonTableReplace, SeasonTableResponse
from villarates.services import season_service

router = APIRouter(prefix="/api/v1/properties/{property_id}/seasons", tags=["seasons"])


@router.get(
    "",
    response_model=SeasonTableResponse,
    summary="Get a property's season table",
)
async def get_season_table(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> SeasonTableResponse:
    periods = await season_service.get_season_table(db, property_id)
    return SeasonTableResponse(periods=[SeasonPeriodResponse.model_validate(p) for p in periods])


@router.put(
    "",
    response_model=SeasonTableResponse,
    summary="Replace a property's season table",
)
async def replace_season_table(
    property_id: uuid.UUID,
    body: SeasonTableReplace,
    db: AsyncSession = Depends(get_db),
) -> SeasonTableResponse:
    """Replace every period at once; periods are matched in the order given.

    Overlapping ranges are rejected with 422 and leave the stored table as it was.
    """
    periods = await season_service.replace_season_table(
        db, property_id, [period.to_record() for period in body.periods]
    )
    return SeasonTableResponse(periods=[SeasonPeriodResponse.model_validate(p) for p in periods])
