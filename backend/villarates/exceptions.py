"""Domain exceptions raised by the engine and services.

Each class carries the HTTP status the API maps it to; see the exception
handler registered in ``villarates.main``.
"""

from fastapi import status


class VillaRatesError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class InvalidSpanError(VillaRatesError):
    """A date span, night count, or limit failed validation."""

    status_code = 422


class SeasonTableError(VillaRatesError):
    """A season table cannot be stored (bad day-month, overlap, bad price)."""

    status_code = 422


class PropertyNotFoundError(VillaRatesError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, property_id: object) -> None:
        super().__init__("Property not found")
        self.property_id = property_id


class BookingNotFoundError(VillaRatesError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, booking_id: object) -> None:
        super().__init__("Booking not found")
        self.booking_id = booking_id


class BookingConflictError(VillaRatesError):
    """The requested stay overlaps an active booking or a calendar block."""

    status_code = status.HTTP_409_CONFLICT


class ChannelFeedError(VillaRatesError):
    """The channel manager or ICS source failed, timed out, or sent garbage."""

    status_code = status.HTTP_502_BAD_GATEWAY


class PropertyNotLinkedError(ChannelFeedError):
    """The property has no channel id or ICS URL to sync from."""

    status_code = 422
