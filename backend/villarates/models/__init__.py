"""SQLAlchemy models for Villa Rates.

All models are imported here so that ``Base.metadata`` sees every table
(``create_all`` in tests and the seed script). If you add a new model,
import it in this file.
"""

from villarates.models.booking import Booking
from villarates.models.calendar_block import CalendarBlock
from villarates.models.property import Property
from villarates.models.season import SeasonPeriod

__all__ = [
    "Booking",
    "CalendarBlock",
    "Property",
    "SeasonPeriod",
]
