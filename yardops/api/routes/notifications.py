"""Notification API routes, including the sweep triggers."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from yardops.api.dependencies import get_current_user, get_email_sender, require_admin
from yardops.core.database import get_db
from yardops.models.enums import NotificationStatus
from yardops.models.user import User
from yardops.schemas.notification import (
    NotificationCreate,
    NotificationResponse,
    NotificationStats,
    SweepResult,
)
from yardops.services import notification as notification_service
from yardops.services.email import EmailSender

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("", response_model=NotificationResponse, status_code=201)
def create_notification(
    notification_data: NotificationCreate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
    email_sender: EmailSender = Depends(get_email_sender),
) -> NotificationResponse:
    """Send a notification to a user."""
    notification = notification_service.create_notification(
        db, notification_data, email_sender=email_sender
    )
    return NotificationResponse.model_validate(notification)


@router.get("", response_model=list[NotificationResponse])
def list_notifications(
    status: NotificationStatus | None = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[NotificationResponse]:
    """List the acting user's notifications, newest first."""
    notifications, _ = notification_service.get_user_notifications(
        db, user.id, status, limit, offset
    )
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.get("/stats", response_model=NotificationStats)
def notification_stats(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> NotificationStats:
    """Unread and total counts for the acting user."""
    return notification_service.get_notification_stats(db, user.id)


@router.post("/read-all")
def mark_all_read(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> dict[str, int]:
    """Mark all of the acting user's notifications as read."""
    return {"updated": notification_service.mark_all_as_read(db, user.id)}


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> NotificationResponse:
    """Mark one notification as read."""
    notification = notification_service.mark_as_read(db, notification_id, user)
    return NotificationResponse.model_validate(notification)


@router.post("/sweeps/due", response_model=SweepResult)
def run_due_sweep(
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
    email_sender: EmailSender = Depends(get_email_sender),
) -> SweepResult:
    """Notify readers of scheduled readings that are due."""
    created = notification_service.notify_due_readings(db, email_sender=email_sender)
    return SweepResult(
        created=len(created),
        notifications=[NotificationResponse.model_validate(n) for n in created],
    )


@router.post("/sweeps/missed", response_model=SweepResult)
def run_missed_sweep(
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
    email_sender: EmailSender = Depends(get_email_sender),
) -> SweepResult:
    """Notify readers of overdue meters."""
    created = notification_service.notify_missed_readings(db, email_sender=email_sender)
    return SweepResult(
        created=len(created),
        notifications=[NotificationResponse.model_validate(n) for n in created],
    )


@router.delete("/{notification_id}", status_code=204)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> None:
    """Delete one of the acting user's notifications."""
    notification_service.delete_notification(db, notification_id, user)
