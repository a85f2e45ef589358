"""Season table service: read and wholesale-replace a property's periods."""

import logging
import uuid
from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.availability.records import SeasonRecord
from villarates.exceptions import SeasonTableError
from villarates.models.season import SeasonPeriod
from villarates.services.property_service import get_property

logger = logging.getLogger(__name__)


def validate_season_table(records: Sequence[SeasonRecord]) -> None:
    """Reject negative prices, empty minimum stays, and overlapping ranges.

    Ranges must not share a single day-month: with no overlaps, first-match
    lookup in stored order is unambiguous.
    """
    for index, record in enumerate(records):
        if record.price_per_night < 0:
            raise SeasonTableError(f"Period {index + 1}: price_per_night must not be negative")
        if record.minimum_nights < 1:
            raise SeasonTableError(f"Period {index + 1}: minimum_nights must be at least 1")

    for i, first in enumerate(records):
        for j in range(i + 1, len(records)):
            second = records[j]
            if first.day_range.overlaps(second.day_range):
                raise SeasonTableError(
                    f"Period {i + 1} ({first.day_range}) overlaps period {j + 1} ({second.day_range})"
                )


async def get_season_table(db: AsyncSession, property_id: uuid.UUID) -> list[SeasonPeriod]:
    """Return the stored periods of an existing property, in stored order."""
    await get_property(db, property_id)
    result = await db.execute(
        select(SeasonPeriod).where(SeasonPeriod.property_id == property_id).order_by(SeasonPeriod.position)
    )
    return list(result.scalars().all())


async def replace_season_table(
    db: AsyncSession, property_id: uuid.UUID, records: Sequence[SeasonRecord]
) -> list[SeasonPeriod]:
    """Delete every period of the property and insert ``records`` in order.

    Runs inside the caller's transaction; validation happens before anything
    is deleted, so a rejected table leaves the stored one untouched. The
    property row is locked first so concurrent replacements run one after
    the other instead of both inserting.
    """
    await get_property(db, property_id, for_update=True)
    validate_season_table(records)

    await db.execute(delete(SeasonPeriod).where(SeasonPeriod.property_id == property_id))
    rows = [
        SeasonPeriod(
            property_id=property_id,
            position=position,
            season_type=record.season_type.value,
            start_day_month=str(record.day_range.start),
            end_day_month=str(record.day_range.end),
            price_per_night=record.price_per_night,
            source_price_per_night=record.source_price_per_night,
            minimum_nights=record.minimum_nights,
        )
        for position, record in enumerate(records)
    ]
    db.add_all(rows)
    await db.flush()

    logger.info("Replaced season table of property %s with %d periods", property_id, len(rows))
    return rows
