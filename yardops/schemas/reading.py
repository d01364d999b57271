"""Reading Pydantic schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from yardops.core.clock import UTCDateTime
from yardops.schemas.user import UserSummary


class ReadingCreate(BaseModel):
    """Schema for recording a reading; the date defaults to now."""

    meter_id: int
    value: Decimal = Field(gt=0)
    reading_date: UTCDateTime | None = None
    comment: str | None = Field(default=None, max_length=500)


class ReadingUpdate(BaseModel):
    """Schema for correcting a reading."""

    value: Decimal | None = Field(default=None, gt=0)
    reading_date: UTCDateTime | None = None
    comment: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def check_at_least_one_field(self) -> "ReadingUpdate":
        """Ensure at least one field is provided for update."""
        if all(v is None for v in [self.value, self.reading_date, self.comment]):
            raise ValueError("At least one field must be provided for update")
        return self


class ReadingResponse(BaseModel):
    """Schema for reading response."""

    id: int
    meter_id: int
    user_id: int
    value: Decimal
    reading_date: datetime
    comment: str | None
    created_at: datetime
    updated_at: datetime
    user: UserSummary

    model_config = {"from_attributes": True}


class ReadingFilter(BaseModel):
    """Filters for listing readings. ``meter_type`` matches a type id or name."""

    meter_id: int | None = None
    user_id: int | None = None
    location_id: int | None = None
    meter_type: str | None = None
    start_date: UTCDateTime | None = None
    end_date: UTCDateTime | None = None


class ReadingPage(BaseModel):
    """Schema for a paginated reading list."""

    readings: list[ReadingResponse]
    total: int
    limit: int
    offset: int


class FrequencyBreakdown(BaseModel):
    """Number of meters per reading frequency."""

    daily: int = 0
    weekly: int = 0
    monthly: int = 0
    ad_hoc: int = 0


class ReadingStats(BaseModel):
    """Fleet-wide reading compliance summary."""

    total_readings: int
    total_meters: int
    pending_readings: int
    missed_readings: int
    recent_readings: int
    by_frequency: FrequencyBreakdown
