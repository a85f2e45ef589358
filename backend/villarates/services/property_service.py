"""Property lookups shared by routers and services."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from villarates.exceptions import PropertyNotFoundError
from villarates.models.property import Property


async def get_property(db: AsyncSession, property_id: uuid.UUID, *, for_update: bool = False) -> Property:
    """Fetch a property or raise ``PropertyNotFoundError``.

    ``for_update`` takes a row lock (``SELECT ... FOR UPDATE``) that serializes
    concurrent writers on the same property until the transaction ends.
    """
    query = select(Property).where(Property.id == property_id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    prop = result.scalar_one_or_none()
    if prop is None:
        raise PropertyNotFoundError(property_id)
    return prop
