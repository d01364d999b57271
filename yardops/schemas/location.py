"""Location and MeterType Pydantic schemas for request/response validation."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator


class LocationCreate(BaseModel):
    """Schema for creating a location."""

    name: str = Field(min_length=1, max_length=100)
    description: str | None = None


class LocationUpdate(BaseModel):
    """Schema for updating a location."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None

    @model_validator(mode="after")
    def check_at_least_one_field(self) -> "LocationUpdate":
        """Ensure at least one field is provided for update."""
        if all(v is None for v in [self.name, self.description]):
            raise ValueError("At least one field must be provided for update")
        return self


class LocationResponse(BaseModel):
    """Schema for location response."""

    id: int
    name: str
    description: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MeterTypeCreate(BaseModel):
    """Schema for creating a meter type."""

    name: str = Field(min_length=1, max_length=50)
    description: str | None = None


class MeterTypeUpdate(BaseModel):
    """Schema for updating a meter type."""

    name: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = None

    @model_validator(mode="after")
    def check_at_least_one_field(self) -> "MeterTypeUpdate":
        """Ensure at least one field is provided for update."""
        if all(v is None for v in [self.name, self.description]):
            raise ValueError("At least one field must be provided for update")
        return self


class MeterTypeResponse(BaseModel):
    """Schema for meter type response."""

    id: int
    name: str
    description: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
