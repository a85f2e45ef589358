"""Property model: villas, apartments, and houses offered for rent."""

from datetime import datetime

from sqlalchemy import String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from villarates.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A rentable property with its channel-manager and calendar links."""

    __tablename__ = "properties"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    location: Mapped[str | None] = mapped_column(String(255), default=None)
    property_type: Mapped[str] = mapped_column(String(50), nullable=False)  # villa, apartment, house
    bedrooms: Mapped[int | None] = mapped_column(default=None)
    max_guests: Mapped[int | None] = mapped_column(default=None)
    status: Mapped[str] = mapped_column(String(50), server_default="draft")  # draft, published, hidden

    # Channel manager link; both ids are strings in the upstream API
    channel_prop_id: Mapped[str | None] = mapped_column(String(50), default=None)
    channel_room_id: Mapped[str | None] = mapped_column(String(50), default=None)
    last_price_sync: Mapped[datetime | None] = mapped_column(default=None)

    # External ICS calendar
    ics_calendar_url: Mapped[str | None] = mapped_column(String(1024), default=None)
    last_calendar_sync: Mapped[datetime | None] = mapped_column(default=None)

    # Relationships
    season_periods: Mapped[list["SeasonPeriod"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="property",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SeasonPeriod.position",
    )
    bookings: Mapped[list["Booking"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="property", cascade="all, delete-orphan", passive_deletes=True
    )
    calendar_blocks: Mapped[list["CalendarBlock"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="property", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, name={self.name!r}, type={self.property_type!r})>"
