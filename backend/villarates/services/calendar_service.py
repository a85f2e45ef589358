"""Calendar block service: manual blocks and ICS-imported blocks."""

import logging
import uuid
from collections.abc import Mapping
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.availability.spans import ONE_DAY, iter_days
from villarates.exceptions import InvalidSpanError
from villarates.models.calendar_block import CalendarBlock
from villarates.services.property_service import get_property

logger = logging.getLogger(__name__)

SOURCE_MANUAL = "manual"
SOURCE_ICS = "ics"


async def list_blocks(
    db: AsyncSession,
    property_id: uuid.UUID,
    start: date | None = None,
    end: date | None = None,
) -> list[CalendarBlock]:
    """Blocks of a property, optionally limited to ``start``..``end`` inclusive."""
    await get_property(db, property_id)
    query = select(CalendarBlock).where(CalendarBlock.property_id == property_id)
    if start is not None:
        query = query.where(CalendarBlock.blocked_date >= start)
    if end is not None:
        query = query.where(CalendarBlock.blocked_date <= end)
    result = await db.execute(query.order_by(CalendarBlock.blocked_date))
    return list(result.scalars().all())


async def add_manual_blocks(
    db: AsyncSession,
    property_id: uuid.UUID,
    start: date,
    end: date,
    reason: str | None = None,
) -> list[CalendarBlock]:
    """Block every day from ``start`` to ``end`` inclusive.

    Days that are already blocked keep their existing row; a manual block
    takes them over so the next ICS import leaves them alone.
    """
    if end < start:
        raise InvalidSpanError("end must not be before start")
    await get_property(db, property_id)

    result = await db.execute(
        select(CalendarBlock).where(
            CalendarBlock.property_id == property_id,
            CalendarBlock.blocked_date >= start,
            CalendarBlock.blocked_date <= end,
        )
    )
    existing = {block.blocked_date: block for block in result.scalars().all()}

    blocks: list[CalendarBlock] = []
    for day in iter_days(start, end + ONE_DAY):
        block = existing.get(day)
        if block is None:
            block = CalendarBlock(property_id=property_id, blocked_date=day, reason=reason, source=SOURCE_MANUAL)
            db.add(block)
        else:
            block.source = SOURCE_MANUAL
            if reason is not None:
                block.reason = reason
        blocks.append(block)

    await db.flush()
    logger.info("Blocked property %s from %s to %s (%d days)", property_id, start, end, len(blocks))
    return blocks


async def remove_blocks(db: AsyncSession, property_id: uuid.UUID, start: date, end: date) -> int:
    """Unblock ``start``..``end`` inclusive, whatever the block source. Returns the count removed."""
    if end < start:
        raise InvalidSpanError("end must not be before start")
    await get_property(db, property_id)
    result = await db.execute(
        delete(CalendarBlock).where(
            CalendarBlock.property_id == property_id,
            CalendarBlock.blocked_date >= start,
            CalendarBlock.blocked_date <= end,
        )
    )
    logger.info("Unblocked %d days of property %s (%s..%s)", result.rowcount, property_id, start, end)
    return result.rowcount


async def replace_ics_blocks(db: AsyncSession, property_id: uuid.UUID, days: Mapping[date, str]) -> int:
    """Swap the property's ICS blocks for ``days``; returns how many were stored.

    Days already blocked manually are skipped.
    """
    await db.execute(
        delete(CalendarBlock).where(
            CalendarBlock.property_id == property_id,
            CalendarBlock.source == SOURCE_ICS,
        )
    )
    manual_result = await db.execute(
        select(CalendarBlock.blocked_date).where(CalendarBlock.property_id == property_id)
    )
    manual_days = set(manual_result.scalars().all())

    stored = 0
    for day in sorted(days):
        if day in manual_days:
            continue
        db.add(CalendarBlock(property_id=property_id, blocked_date=day, reason=days[day], source=SOURCE_ICS))
        stored += 1

    await db.flush()
    return stored
