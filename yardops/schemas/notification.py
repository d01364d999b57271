"""Notification Pydantic schemas."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field

from yardops.models.enums import NotificationStatus, NotificationType


class NotificationCreate(BaseModel):
    """Data for creating a notification."""

    user_id: int
    type: NotificationType
    title: str
    message: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class NotificationResponse(BaseModel):
    """Schema for notification response."""

    id: int
    user_id: int
    type: NotificationType
    title: str
    message: str
    status: NotificationStatus
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("meta", "metadata"),
    )
    created_at: datetime
    read_at: datetime | None

    model_config = {"from_attributes": True}


class NotificationStats(BaseModel):
    """Unread and total notification counts for a user."""

    unread_count: int
    total_count: int


class SweepResult(BaseModel):
    """Notifications created by one sweep run."""

    created: int
    notifications: list[NotificationResponse]
