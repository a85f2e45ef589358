"""Schemas for reading and replacing a property's season table."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from villarates.availability.daymonth import DayMonth, DayMonthRange
from villarates.availability.records import SeasonRecord, SeasonType


class SeasonPeriodIn(BaseModel):
    """One period of a season table, in the order it should be matched."""

    season_type: SeasonType
    start_day_month: str = Field(..., examples=["22-12"])
    end_day_month: str = Field(..., examples=["06-01"])
    price_per_night: Decimal = Field(..., ge=0)
    minimum_nights: int = Field(1, ge=1)

    @field_validator("start_day_month", "end_day_month")
    @classmethod
    def check_day_month(cls, value: str) -> str:
        """Must be a real zero-padded ``DD-MM`` day (``29-02`` allowed)."""
        DayMonth.parse(value)
        return value

    def to_record(self) -> SeasonRecord:
        return SeasonRecord(
            season_type=self.season_type,
            day_range=DayMonthRange(DayMonth.parse(self.start_day_month), DayMonth.parse(self.end_day_month)),
            price_per_night=self.price_per_night,
            minimum_nights=self.minimum_nights,
        )


class SeasonTableReplace(BaseModel):
    periods: list[SeasonPeriodIn]


class SeasonPeriodResponse(BaseModel):
    position: int
    season_type: str
    start_day_month: str
    end_day_month: str
    price_per_night: Decimal
    source_price_per_night: Decimal | None = None
    minimum_nights: int

    model_config = ConfigDict(from_attributes=True)


class SeasonTableResponse(BaseModel):
    periods: list[SeasonPeriodResponse]
