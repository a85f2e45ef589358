"""Calendar block model: externally reported full-day unavailability."""

import uuid
from datetime import date, datetime

from sqlalchemy import Date, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from villarates.database import Base, UUIDPrimaryKeyMixin


class CalendarBlock(UUIDPrimaryKeyMixin, Base):
    """A single blocked day for a property (ICS import or manual block)."""

    __tablename__ = "calendar_blocks"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    blocked_date: Mapped[date] = mapped_column(Date, nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    source: Mapped[str] = mapped_column(String(20), default="manual")  # ics, manual
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    property: Mapped["Property"] = relationship(back_populates="calendar_blocks")  # type: ignore[name-defined]  # noqa: F821

    # One block per day per property
    __table_args__ = (
        UniqueConstraint("property_id", "blocked_date", name="uq_calendar_blocks_property_date"),
    )

    def __repr__(self) -> str:
        return f"<CalendarBlock(property_id={self.property_id}, date={self.blocked_date}, source={self.source})>"
