"""Seed the database with sample Bali rentals, season tables, and stays.

Creates the tables if needed, then replaces any previously seeded
properties (matched by name) so the script can be re-run safely.

Run from the backend directory:
    python -m scripts.seed_data
"""

import asyncio
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import delete

from villarates.availability.daymonth import DayMonth, DayMonthRange
from villarates.availability.records import SeasonRecord, SeasonType
from villarates.database import Base, async_session_factory, engine
from villarates.models.booking import Booking
from villarates.models.property import Property
from villarates.services.calendar_service import add_manual_blocks
from villarates.services.season_service import replace_season_table

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

PROPERTIES = [
    {
        "name": "Le Ayu Villa Canggu",
        "description": "Two-bedroom private pool villa in Pererenan, minutes from the Canggu surf breaks.",
        "location": "Canggu, Bali",
        "property_type": "villa",
        "bedrooms": 2,
        "max_guests": 4,
        "status": "published",
    },
    {
        "name": "Da Vinci The Villa",
        "description": "Three-bedroom villa with a 12m pool and rice field views.",
        "location": "Canggu, Bali",
        "property_type": "villa",
        "bedrooms": 3,
        "max_guests": 6,
        "status": "published",
        "ics_calendar_url": "https://example.com/calendars/da-vinci.ics",
    },
    {
        "name": "Umah Anyar Suites",
        "description": "One-bedroom apartment in central Ubud, walking distance to the market.",
        "location": "Ubud, Bali",
        "property_type": "apartment",
        "bedrooms": 1,
        "max_guests": 2,
        "status": "published",
    },
    {
        "name": "Pitu Village House",
        "description": "Family house in the Punggul countryside, still being set up.",
        "location": "Sangeh, Bali",
        "property_type": "house",
        "bedrooms": 4,
        "max_guests": 8,
        "status": "draft",
    },
]

# (season_type, start DD-MM, end DD-MM, multiplier of the base price, minimum nights)
SEASON_TEMPLATE = [
    ("peak", "22-12", "06-01", Decimal("1.80"), 5),
    ("low", "07-01", "31-03", Decimal("1.00"), 2),
    ("mid", "01-04", "30-06", Decimal("1.25"), 3),
    ("prime", "01-07", "31-08", Decimal("1.60"), 5),
    ("mid", "01-09", "31-10", Decimal("1.25"), 3),
    ("low", "01-11", "21-12", Decimal("1.00"), 2),
]

BASE_PRICES = {
    "Le Ayu Villa Canggu": Decimal("129.00"),
    "Da Vinci The Villa": Decimal("350.00"),
    "Umah Anyar Suites": Decimal("163.00"),
    "Pitu Village House": Decimal("220.00"),
}


def _season_table(base_price: Decimal) -> list[SeasonRecord]:
    return [
        SeasonRecord(
            season_type=SeasonType(season_type),
            day_range=DayMonthRange(DayMonth.parse(start), DayMonth.parse(end)),
            price_per_night=(base_price * multiplier).quantize(Decimal("1")),
            minimum_nights=minimum_nights,
        )
        for season_type, start, end, multiplier, minimum_nights in SEASON_TEMPLATE
    ]


def _build_bookings(properties: dict[str, Property], today: date) -> list[Booking]:
    """A handful of stays around today, including a turnover day and a cancellation."""
    ayu = properties["Le Ayu Villa Canggu"]
    vinci = properties["Da Vinci The Villa"]
    anyar = properties["Umah Anyar Suites"]
    return [
        Booking(
            property_id=ayu.id,
            check_in=today - timedelta(days=3),
            check_out=today + timedelta(days=2),
            guest_name="James Wilson",
            guest_email="james.wilson@example.com",
            adults=2,
            booking_source="website",
        ),
        # Turnover day: arrives the day the previous guest leaves
        Booking(
            property_id=ayu.id,
            check_in=today + timedelta(days=2),
            check_out=today + timedelta(days=9),
            guest_name="Chloe Williams",
            guest_email="chloe.williams@example.com",
            adults=2,
            children=1,
            booking_source="channel",
        ),
        Booking(
            property_id=vinci.id,
            check_in=today + timedelta(days=14),
            check_out=today + timedelta(days=21),
            guest_name="Yuki Tanaka",
            guest_email="yuki.tanaka@example.com",
            adults=4,
            booking_source="admin",
            notes="Airport pickup requested",
        ),
        Booking(
            property_id=anyar.id,
            check_in=today + timedelta(days=5),
            check_out=today + timedelta(days=8),
            guest_name="Ahmed Hassan",
            guest_email="ahmed.hassan@example.com",
            adults=1,
            status="cancelled",
        ),
    ]


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Populate the database with sample properties and their calendars."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        names = [prop["name"] for prop in PROPERTIES]
        await session.execute(delete(Property).where(Property.name.in_(names)))
        await session.flush()

        created: dict[str, Property] = {}
        for prop_data in PROPERTIES:
            prop = Property(**prop_data)
            session.add(prop)
            await session.flush()
            created[prop.name] = prop

            base_price = BASE_PRICES[prop.name]
            await replace_season_table(session, prop.id, _season_table(base_price))
            print(f"   🏠 {prop.name} ({prop.location}, from {base_price}/night)")

        today = date.today()
        bookings = _build_bookings(created, today)
        session.add_all(bookings)

        # Owner stay on the apartment, plus maintenance on the big villa
        blocks = await add_manual_blocks(
            session,
            created["Umah Anyar Suites"].id,
            today + timedelta(days=20),
            today + timedelta(days=23),
            reason="Owner stay",
        )
        blocks += await add_manual_blocks(
            session,
            created["Da Vinci The Villa"].id,
            today + timedelta(days=30),
            today + timedelta(days=30),
            reason="Pool maintenance",
        )

        await session.commit()

        print()
        print("=" * 60)
        print("📊 Seed Summary")
        print("=" * 60)
        print(f"   Properties:     {len(created)}")
        print(f"   Season periods: {len(SEASON_TEMPLATE) * len(created)}")
        print(f"   Bookings:       {len(bookings)}")
        print(f"   Blocked days:   {len(blocks)}")
        print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
