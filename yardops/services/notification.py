"""Notification service: in-app notifications and the due/missed reading sweeps.

Sweeps deduplicate on ``(user, type, metadata.meterId)`` within a lookback
window and are serialised per process by ``_sweep_lock``. Run them from a
single scheduled worker (``yardops sweep``) so that two processes cannot both
pass the duplicate check.
"""

import logging
import threading
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from yardops.core.clock import as_utc, to_iso, utc_now
from yardops.core.exceptions import NotFoundError, PermissionDeniedError
from yardops.models.enums import NotificationStatus, NotificationType
from yardops.models.meter_assignment import MeterAssignment
from yardops.models.notification import Notification
from yardops.models.user import User
from yardops.schemas.notification import NotificationCreate, NotificationStats
from yardops.services.compliance import (
    ComplianceStatus,
    classify_meter,
    days_since,
    expected_interval_days,
)
from yardops.services.email import EmailSender, render_email
from yardops.services.meter import list_due_scheduled_readings, list_meter_snapshots
from yardops.services.user import get_user

logger = logging.getLogger(__name__)

DUE_DEDUPE_WINDOW = timedelta(hours=24)
MISSED_DEDUPE_WINDOW = timedelta(days=7)

_sweep_lock = threading.Lock()

_EMAIL_TEMPLATES = {
    NotificationType.NEW_ASSIGNMENT: "new_assignment.html",
    NotificationType.READING_DUE: "reading_due.html",
    NotificationType.READING_MISSED: "reading_missed.html",
}


def _email_context(data: NotificationCreate) -> dict:
    meta = data.metadata
    return {
        "meter_number": meta.get("meterNumber"),
        "location": meta.get("location") or "Unknown Location",
        "due_date": meta.get("dueDate") or "Unknown Date",
        "days_overdue": meta.get("daysOverdue") or 0,
    }


def _send_notification_email(
    email_sender: EmailSender, user: User, data: NotificationCreate
) -> None:
    """Email the user about a notification; failures are logged, never raised."""
    if not data.metadata.get("meterNumber"):
        return

    try:
        html = render_email(_EMAIL_TEMPLATES[data.type], _email_context(data))
        email_sender.send_email(user.email, data.title, html)
    except Exception:
        logger.exception("Failed to send email for notification to user %s", user.id)


def create_notification(
    db: Session,
    data: NotificationCreate,
    now: datetime | None = None,
    email_sender: EmailSender | None = None,
) -> Notification:
    """
    Create a notification and attempt to email its recipient.

    Args:
        db: Database session
        data: Notification content
        now: Creation timestamp, defaults to the current time
        email_sender: Sender for the email copy; no email when None

    Returns:
        Created notification

    Raises:
        NotFoundError: If the target user does not exist

    """
    user = get_user(db, data.user_id)
    if not user:
        raise NotFoundError("User not found")

    notification = Notification(
        user_id=data.user_id,
        type=data.type,
        title=data.title,
        message=data.message,
        status=NotificationStatus.UNREAD,
        meta=dict(data.metadata),
        created_at=now or utc_now(),
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)

    if email_sender is not None:
        _send_notification_email(email_sender, user, data)

    logger.info(
        "Notification created: id=%s user=%s type=%s",
        notification.id,
        data.user_id,
        data.type.value,
    )
    return notification


def notify_new_assignment(
    db: Session,
    assignment: MeterAssignment,
    email_sender: EmailSender | None = None,
) -> Notification:
    """Tell a reader they have been assigned a meter."""
    meter = assignment.meter
    location = meter.location.name
    return create_notification(
        db,
        NotificationCreate(
            user_id=assignment.user_id,
            type=NotificationType.NEW_ASSIGNMENT,
            title=f"New Meter Assignment: {meter.meter_number}",
            message=(
                f"You have been assigned to read meter {meter.meter_number} at {location}."
            ),
            metadata={
                "meterId": meter.id,
                "meterNumber": meter.meter_number,
                "location": location,
            },
        ),
        email_sender=email_sender,
    )


def get_user_notifications(
    db: Session,
    user_id: int,
    status: NotificationStatus | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Notification], int]:
    """List a user's notifications newest first, with the total count."""
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if status is not None:
        query = query.filter(Notification.status == status)
    total = query.count()
    notifications = (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return notifications, total


def get_notification_stats(db: Session, user_id: int) -> NotificationStats:
    """Count a user's unread and total notifications."""
    query = db.query(Notification).filter(Notification.user_id == user_id)
    return NotificationStats(
        unread_count=query.filter(Notification.status == NotificationStatus.UNREAD).count(),
        total_count=query.count(),
    )


def mark_as_read(
    db: Session,
    notification_id: int,
    acting_user: User,
    now: datetime | None = None,
) -> Notification:
    """
    Mark a notification as read.

    Marking an already read notification is a no-op that keeps the original
    ``read_at``.

    Raises:
        NotFoundError: If the notification does not exist
        PermissionDeniedError: If the user neither owns it nor is an admin

    """
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        raise NotFoundError("Notification not found")
    if notification.user_id != acting_user.id and not acting_user.get_is_admin():
        raise PermissionDeniedError("You do not have permission to update this notification")

    if notification.status == NotificationStatus.READ:
        return notification

    notification.status = NotificationStatus.READ
    notification.read_at = now or utc_now()
    db.commit()
    db.refresh(notification)
    logger.info("Notification marked as read: id=%s", notification_id)
    return notification


def mark_all_as_read(db: Session, user_id: int, now: datetime | None = None) -> int:
    """Mark every unread notification of a user as read; returns how many changed."""
    updated = (
        db.query(Notification)
        .filter(
            Notification.user_id == user_id,
            Notification.status == NotificationStatus.UNREAD,
        )
        .update(
            {Notification.status: NotificationStatus.READ, Notification.read_at: now or utc_now()},
            synchronize_session=False,
        )
    )
    db.commit()
    logger.info("All notifications marked as read: user=%s count=%s", user_id, updated)
    return updated


def delete_notification(db: Session, notification_id: int, acting_user: User) -> None:
    """
    Delete a notification. Only its recipient may delete it.

    Raises:
        NotFoundError: If the notification does not exist
        PermissionDeniedError: If the user is not the recipient

    """
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        raise NotFoundError("Notification not found")
    if notification.user_id != acting_user.id:
        raise PermissionDeniedError("You do not have permission to delete this notification")

    db.delete(notification)
    db.commit()
    logger.info("Notification deleted: id=%s", notification_id)


def find_recent_notification(
    db: Session,
    user_id: int,
    notification_type: NotificationType,
    meter_id: int,
    created_after: datetime,
) -> Notification | None:
    """Find a notification about ``meter_id`` created at or after ``created_after``."""
    return (
        db.query(Notification)
        .filter(
            Notification.user_id == user_id,
            Notification.type == notification_type,
            Notification.meta["meterId"].as_integer() == meter_id,
            Notification.created_at >= created_after,
        )
        .first()
    )


def notify_due_readings(
    db: Session,
    now: datetime | None = None,
    email_sender: EmailSender | None = None,
) -> list[Notification]:
    """
    Notify assigned readers of scheduled readings that are due.

    Each (user, meter) pair gets at most one READING_DUE notification per
    24 hours. A failure for one pair is logged and does not stop the sweep.

    Returns:
        Notifications created by this run

    """
    now = as_utc(now) if now is not None else utc_now()
    created: list[Notification] = []

    with _sweep_lock:
        for scheduled in list_due_scheduled_readings(db, now):
            meter = scheduled.meter
            due_date = to_iso(scheduled.due_date)
            for user_id in [a.user_id for a in meter.assignments]:
                try:
                    if find_recent_notification(
                        db,
                        user_id,
                        NotificationType.READING_DUE,
                        meter.id,
                        now - DUE_DEDUPE_WINDOW,
                    ):
                        continue
                    created.append(
                        create_notification(
                            db,
                            NotificationCreate(
                                user_id=user_id,
                                type=NotificationType.READING_DUE,
                                title=f"Reading Due: {meter.meter_number}",
                                message=f"The reading for meter {meter.meter_number} is due.",
                                metadata={
                                    "meterId": meter.id,
                                    "meterNumber": meter.meter_number,
                                    "dueDate": due_date,
                                },
                            ),
                            now=now,
                            email_sender=email_sender,
                        )
                    )
                except Exception:
                    db.rollback()
                    logger.exception(
                        "Due-reading notification failed for user %s, meter %s",
                        user_id,
                        meter.id,
                    )

    logger.info("Due-reading sweep created %d notification(s)", len(created))
    return created


def notify_missed_readings(
    db: Session,
    now: datetime | None = None,
    email_sender: EmailSender | None = None,
) -> list[Notification]:
    """
    Notify assigned readers of meters whose reading is overdue.

    Meters that were never read are skipped. Each (user, meter) pair gets at
    most one READING_MISSED notification per 7 days, carrying ``daysOverdue``.

    Returns:
        Notifications created by this run

    """
    now = as_utc(now) if now is not None else utc_now()
    created: list[Notification] = []

    with _sweep_lock:
        for snapshot in list_meter_snapshots(db, assigned_only=True):
            status = classify_meter(
                snapshot.frequency,
                snapshot.last_reading_date,
                now,
                treat_missing_as_overdue=False,
            )
            if status != ComplianceStatus.OVERDUE:
                continue

            days_overdue = days_since(snapshot.last_reading_date, now) - expected_interval_days(
                snapshot.frequency
            )
            for user_id in snapshot.assignee_ids:
                try:
                    if find_recent_notification(
                        db,
                        user_id,
                        NotificationType.READING_MISSED,
                        snapshot.meter_id,
                        now - MISSED_DEDUPE_WINDOW,
                    ):
                        continue
                    created.append(
                        create_notification(
                            db,
                            NotificationCreate(
                                user_id=user_id,
                                type=NotificationType.READING_MISSED,
                                title=f"Overdue Reading: {snapshot.meter_number}",
                                message=(
                                    f"The reading for meter {snapshot.meter_number} "
                                    f"is {days_overdue} days overdue."
                                ),
                                metadata={
                                    "meterId": snapshot.meter_id,
                                    "meterNumber": snapshot.meter_number,
                                    "daysOverdue": days_overdue,
                                },
                            ),
                            now=now,
                            email_sender=email_sender,
                        )
                    )
                except Exception:
                    db.rollback()
                    logger.exception(
                        "Missed-reading notification failed for user %s, meter %s",
                        user_id,
                        snapshot.meter_id,
                    )

    logger.info("Missed-reading sweep created %d notification(s)", len(created))
    return created
