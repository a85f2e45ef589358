"""Season period model: recurring, year-agnostic nightly price ranges."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from villarates.database import Base, UUIDPrimaryKeyMixin


class SeasonPeriod(UUIDPrimaryKeyMixin, Base):
    """One row of a property's season table.

    ``start_day_month`` / ``end_day_month`` are zero-padded ``DD-MM`` strings.
    Rows are never patched: the whole table for a property is deleted and
    re-inserted on every update, ``position`` keeping the stored order.
    """

    __tablename__ = "season_periods"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    season_type: Mapped[str] = mapped_column(String(20), nullable=False)  # low, mid, peak, prime, holiday
    start_day_month: Mapped[str] = mapped_column(String(5), nullable=False)
    end_day_month: Mapped[str] = mapped_column(String(5), nullable=False)
    price_per_night: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    source_price_per_night: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    minimum_nights: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    property: Mapped["Property"] = relationship(back_populates="season_periods")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (Index("ix_season_periods_property_position", "property_id", "position"),)

    def __repr__(self) -> str:
        return (
            f"<SeasonPeriod(property_id={self.property_id}, {self.start_day_month}..{self.end_day_month}, "
            f"type={self.season_type}, price={self.price_per_night})>"
        )
