"""User Pydantic schemas for request/response validation."""

from datetime import datetime

from pydantic import BaseModel, EmailStr

from yardops.models.enums import UserRole


class UserBase(BaseModel):
    """Base user schema."""

    email: EmailStr
    first_name: str
    last_name: str
    role: UserRole = UserRole.READER


class UserCreate(UserBase):
    """Schema for creating a new user."""


class UserUpdate(BaseModel):
    """Schema for updating a user."""

    email: EmailStr | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: UserRole | None = None
    is_active: bool | None = None


class UserResponse(UserBase):
    """Schema for user response."""

    id: int
    full_name: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    """Compact user representation embedded in other responses."""

    id: int
    email: str
    first_name: str
    last_name: str

    model_config = {"from_attributes": True}


class AssignedUser(BaseModel):
    """A user assigned to a meter."""

    id: int
    email: str
    first_name: str
    last_name: str
    role: UserRole
    assigned_at: datetime
