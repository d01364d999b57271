"""Meter Pydantic schemas for request/response validation."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from yardops.core.clock import UTCDateTime
from yardops.models.enums import ReadingFrequency
from yardops.schemas.location import LocationResponse, MeterTypeResponse
from yardops.schemas.reading import ReadingResponse
from yardops.schemas.user import UserSummary


class MeterCreate(BaseModel):
    """Schema for creating a meter."""

    meter_number: str = Field(min_length=1, max_length=50)
    meter_type_id: int
    location_id: int
    frequency: ReadingFrequency


class MeterUpdate(BaseModel):
    """Schema for updating a meter."""

    meter_number: str | None = Field(default=None, min_length=1, max_length=50)
    meter_type_id: int | None = None
    location_id: int | None = None
    frequency: ReadingFrequency | None = None

    @model_validator(mode="after")
    def check_at_least_one_field(self) -> "MeterUpdate":
        """Ensure at least one field is provided for update."""
        fields = [self.meter_number, self.meter_type_id, self.location_id, self.frequency]
        if all(v is None for v in fields):
            raise ValueError("At least one field must be provided for update")
        return self


class MeterFilter(BaseModel):
    """Query filters for listing meters."""

    location_id: int | None = None
    meter_type_id: int | None = None
    frequency: ReadingFrequency | None = None


class AssignmentResponse(BaseModel):
    """Schema for a meter assignment."""

    id: int
    meter_id: int
    user_id: int
    assigned_at: datetime
    assigned_by_id: int | None
    user: UserSummary

    model_config = {"from_attributes": True}


class MeterResponse(BaseModel):
    """Schema for meter response."""

    id: int
    meter_number: str
    frequency: ReadingFrequency
    meter_type: MeterTypeResponse
    location: LocationResponse
    assignments: list[AssignmentResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AssignmentCreate(BaseModel):
    """Schema for assigning a meter to a reader."""

    user_id: int


class ScheduledReadingCreate(BaseModel):
    """Schema for scheduling an expected reading."""

    scheduled_date: UTCDateTime
    due_date: UTCDateTime

    @model_validator(mode="after")
    def check_due_after_scheduled(self) -> "ScheduledReadingCreate":
        """Ensure the due date does not precede the scheduled date."""
        if self.due_date < self.scheduled_date:
            raise ValueError("due_date must not be before scheduled_date")
        return self


class ScheduledReadingResponse(BaseModel):
    """Schema for scheduled reading response."""

    id: int
    meter_id: int
    scheduled_date: datetime
    due_date: datetime
    created_at: datetime

    model_config = {"from_attributes": True}


class MeterReadingsView(BaseModel):
    """A meter's reading history together with its next due date."""

    meter_id: int
    meter_number: str
    frequency: ReadingFrequency
    location: LocationResponse
    readings: list[ReadingResponse]
    last_reading: ReadingResponse | None
    next_due_date: datetime | None
    is_overdue: bool
