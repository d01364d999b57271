"""Tests for notification creation, read state and the due/missed sweeps."""

from datetime import timedelta

import pytest
from sqlalchemy.orm import Session

from tests.conftest import NOW, add_reading, add_schedule, assign, make_meter, make_user
from yardops.core.exceptions import NotFoundError, PermissionDeniedError
from yardops.models.enums import NotificationStatus, NotificationType, ReadingFrequency, UserRole
from yardops.models.notification import Notification
from yardops.schemas.notification import NotificationCreate
from yardops.services import notification as notification_service
from yardops.services.email import EmailDeliveryError


class RecordingSender:
    """Email sender double that keeps every message."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    def send_email(self, to: str, subject: str, html_body: str) -> bool:
        self.sent.append((to, subject, html_body))
        return True


class FailingSender:
    def send_email(self, to: str, subject: str, html_body: str) -> bool:
        raise EmailDeliveryError("SMTP unavailable")


class BrokenSender:
    """Fails the way smtplib does on a non-ASCII password."""

    def send_email(self, to: str, subject: str, html_body: str) -> bool:
        "\u00e9".encode("ascii")
        return True


def _notifications(db: Session, notification_type: NotificationType) -> list[Notification]:
    return db.query(Notification).filter(Notification.type == notification_type).all()


def _seed_notification(
    db: Session, user_id: int, notification_type: NotificationType, meter_id: int, created_at
) -> Notification:
    return notification_service.create_notification(
        db,
        NotificationCreate(
            user_id=user_id,
            type=notification_type,
            title="Earlier",
            message="Earlier notification",
            metadata={"meterId": meter_id},
        ),
        now=created_at,
    )


@pytest.fixture
def overdue_meter(db: Session):
    """A weekly meter last read 11 days before NOW, assigned to one reader."""
    reader = make_user(db)
    meter = make_meter(db, "WTR-001", ReadingFrequency.WEEKLY)
    assign(db, meter, reader)
    add_reading(db, meter, reader, NOW - timedelta(days=11))
    return meter, reader


@pytest.fixture
def due_meter(db: Session):
    """A meter with a scheduled reading due an hour before NOW."""
    reader = make_user(db, email="due@example.com")
    meter = make_meter(db, "ELC-001", ReadingFrequency.DAILY, type_name="ELECTRIC")
    assign(db, meter, reader)
    add_schedule(db, meter, NOW - timedelta(hours=1))
    return meter, reader


class TestCreateNotification:
    def test_unknown_user(self, db: Session) -> None:
        data = NotificationCreate(
            user_id=999, type=NotificationType.READING_DUE, title="t", message="m"
        )
        with pytest.raises(NotFoundError):
            notification_service.create_notification(db, data)

    def test_email_failure_is_swallowed(self, db: Session, overdue_meter) -> None:
        created = notification_service.notify_missed_readings(
            db, now=NOW, email_sender=FailingSender()
        )
        assert len(created) == 1
        assert created[0].status == NotificationStatus.UNREAD

    def test_unexpected_email_error_is_swallowed(self, db: Session) -> None:
        reader = make_user(db)
        meter = make_meter(db)
        assignment = assign(db, meter, reader)

        notification = notification_service.notify_new_assignment(
            db, assignment, BrokenSender()
        )

        assert notification.id is not None
        assert len(_notifications(db, NotificationType.NEW_ASSIGNMENT)) == 1

    def test_sweep_keeps_notification_when_email_breaks(
        self, db: Session, overdue_meter
    ) -> None:
        created = notification_service.notify_missed_readings(
            db, now=NOW, email_sender=BrokenSender()
        )
        assert len(created) == 1
        assert len(_notifications(db, NotificationType.READING_MISSED)) == 1

    def test_email_uses_template(self, db: Session, overdue_meter) -> None:
        sender = RecordingSender()
        notification_service.notify_missed_readings(db, now=NOW, email_sender=sender)

        assert len(sender.sent) == 1
        to, subject, body = sender.sent[0]
        assert to == "reader@example.com"
        assert subject == "Overdue Reading: WTR-001"
        assert "WTR-001" in body
        assert "4 days" in body

    def test_new_assignment(self, db: Session) -> None:
        reader = make_user(db)
        meter = make_meter(db)
        assignment = assign(db, meter, reader)
        sender = RecordingSender()

        notification = notification_service.notify_new_assignment(db, assignment, sender)

        assert notification.type == NotificationType.NEW_ASSIGNMENT
        assert notification.meta["meterId"] == meter.id
        assert notification.meta["location"] == "Dock A"
        assert "Dock A" in notification.message
        assert len(sender.sent) == 1


class TestMissedSweep:
    def test_creates_notification_with_days_overdue(self, db: Session, overdue_meter) -> None:
        meter, reader = overdue_meter
        created = notification_service.notify_missed_readings(db, now=NOW)

        assert len(created) == 1
        notification = created[0]
        assert notification.user_id == reader.id
        assert notification.type == NotificationType.READING_MISSED
        assert notification.title == "Overdue Reading: WTR-001"
        assert notification.message == "The reading for meter WTR-001 is 4 days overdue."
        assert notification.meta == {
            "meterId": meter.id,
            "meterNumber": "WTR-001",
            "daysOverdue": 4,
        }

    def test_is_idempotent(self, db: Session, overdue_meter) -> None:
        notification_service.notify_missed_readings(db, now=NOW)
        second = notification_service.notify_missed_readings(db, now=NOW)

        assert second == []
        assert len(_notifications(db, NotificationType.READING_MISSED)) == 1

    def test_recent_notification_blocks(self, db: Session, overdue_meter) -> None:
        meter, reader = overdue_meter
        _seed_notification(
            db, reader.id, NotificationType.READING_MISSED, meter.id, NOW - timedelta(hours=1)
        )
        assert notification_service.notify_missed_readings(db, now=NOW) == []

    def test_notification_outside_window_does_not_block(
        self, db: Session, overdue_meter
    ) -> None:
        meter, reader = overdue_meter
        _seed_notification(
            db, reader.id, NotificationType.READING_MISSED, meter.id, NOW - timedelta(days=8)
        )
        assert len(notification_service.notify_missed_readings(db, now=NOW)) == 1

    def test_other_type_does_not_block(self, db: Session, overdue_meter) -> None:
        meter, reader = overdue_meter
        _seed_notification(
            db, reader.id, NotificationType.READING_DUE, meter.id, NOW - timedelta(hours=1)
        )
        assert len(notification_service.notify_missed_readings(db, now=NOW)) == 1

    def test_never_read_meter_is_skipped(self, db: Session) -> None:
        reader = make_user(db)
        meter = make_meter(db, "NEW-001", ReadingFrequency.DAILY)
        assign(db, meter, reader)

        assert notification_service.notify_missed_readings(db, now=NOW) == []

    def test_skips_current_pending_and_unassigned(self, db: Session) -> None:
        reader = make_user(db)
        current = make_meter(db, "CUR-001", ReadingFrequency.WEEKLY)
        pending = make_meter(db, "PEN-001", ReadingFrequency.WEEKLY)
        unassigned = make_meter(db, "UNA-001", ReadingFrequency.DAILY)
        ad_hoc = make_meter(db, "ADH-001", ReadingFrequency.AD_HOC)
        for meter in (current, pending, ad_hoc):
            assign(db, meter, reader)
        add_reading(db, current, reader, NOW - timedelta(days=2))
        add_reading(db, pending, reader, NOW - timedelta(days=9))
        add_reading(db, unassigned, reader, NOW - timedelta(days=30))
        add_reading(db, ad_hoc, reader, NOW - timedelta(days=300))

        assert notification_service.notify_missed_readings(db, now=NOW) == []

    def test_notifies_every_assignee(self, db: Session, overdue_meter) -> None:
        meter, _ = overdue_meter
        assign(db, meter, make_user(db, email="second@example.com"))

        created = notification_service.notify_missed_readings(db, now=NOW)
        assert len(created) == 2

    def test_failure_for_one_pair_does_not_stop_sweep(
        self, db: Session, overdue_meter, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        meter, first = overdue_meter
        second = make_user(db, email="second@example.com")
        assign(db, meter, second)
        original = notification_service.create_notification

        def flaky_create(db, data, now=None, email_sender=None):
            if data.user_id == first.id:
                raise RuntimeError("boom")
            return original(db, data, now=now, email_sender=email_sender)

        monkeypatch.setattr(notification_service, "create_notification", flaky_create)

        created = notification_service.notify_missed_readings(db, now=NOW)
        assert [n.user_id for n in created] == [second.id]


class TestDueSweep:
    def test_creates_notification(self, db: Session, due_meter) -> None:
        meter, reader = due_meter
        created = notification_service.notify_due_readings(db, now=NOW)

        assert len(created) == 1
        notification = created[0]
        assert notification.user_id == reader.id
        assert notification.title == "Reading Due: ELC-001"
        assert notification.message == "The reading for meter ELC-001 is due."
        assert notification.meta["meterId"] == meter.id
        assert notification.meta["dueDate"] == "2024-06-15T11:00:00.000Z"

    def test_future_schedule_is_ignored(self, db: Session) -> None:
        reader = make_user(db)
        meter = make_meter(db)
        assign(db, meter, reader)
        add_schedule(db, meter, NOW + timedelta(days=1))

        assert notification_service.notify_due_readings(db, now=NOW) == []

    def test_is_idempotent(self, db: Session, due_meter) -> None:
        notification_service.notify_due_readings(db, now=NOW)
        assert notification_service.notify_due_readings(db, now=NOW) == []
        assert len(_notifications(db, NotificationType.READING_DUE)) == 1

    def test_recent_notification_blocks(self, db: Session, due_meter) -> None:
        meter, reader = due_meter
        _seed_notification(
            db, reader.id, NotificationType.READING_DUE, meter.id, NOW - timedelta(hours=1)
        )
        assert notification_service.notify_due_readings(db, now=NOW) == []

    def test_notification_after_window_does_not_block(self, db: Session, due_meter) -> None:
        meter, reader = due_meter
        _seed_notification(
            db, reader.id, NotificationType.READING_DUE, meter.id, NOW - timedelta(hours=25)
        )
        assert len(notification_service.notify_due_readings(db, now=NOW)) == 1


class TestReadState:
    def test_mark_as_read_is_idempotent(self, db: Session, overdue_meter) -> None:
        _, reader = overdue_meter
        notification = notification_service.notify_missed_readings(db, now=NOW)[0]

        first = notification_service.mark_as_read(db, notification.id, reader, now=NOW)
        read_at = first.read_at
        second = notification_service.mark_as_read(
            db, notification.id, reader, now=NOW + timedelta(hours=1)
        )

        assert second.status == NotificationStatus.READ
        assert second.read_at == read_at

    def test_other_reader_cannot_mark(self, db: Session, overdue_meter) -> None:
        notification = notification_service.notify_missed_readings(db, now=NOW)[0]
        stranger = make_user(db, email="stranger@example.com")

        with pytest.raises(PermissionDeniedError):
            notification_service.mark_as_read(db, notification.id, stranger)

    def test_admin_can_mark(self, db: Session, overdue_meter) -> None:
        notification = notification_service.notify_missed_readings(db, now=NOW)[0]
        admin = make_user(db, email="admin@example.com", role=UserRole.ADMIN)

        updated = notification_service.mark_as_read(db, notification.id, admin)
        assert updated.status == NotificationStatus.READ

    def test_missing_notification(self, db: Session, overdue_meter) -> None:
        _, reader = overdue_meter
        with pytest.raises(NotFoundError):
            notification_service.mark_as_read(db, 12345, reader)

    def test_mark_all_and_stats(self, db: Session, overdue_meter, due_meter) -> None:
        _, reader = overdue_meter
        notification_service.notify_missed_readings(db, now=NOW)
        due_reader = due_meter[1]
        notification_service.notify_due_readings(db, now=NOW)

        stats = notification_service.get_notification_stats(db, reader.id)
        assert (stats.unread_count, stats.total_count) == (1, 1)

        assert notification_service.mark_all_as_read(db, reader.id, now=NOW) == 1
        assert notification_service.mark_all_as_read(db, reader.id, now=NOW) == 0

        stats = notification_service.get_notification_stats(db, reader.id)
        assert (stats.unread_count, stats.total_count) == (0, 1)
        assert notification_service.get_notification_stats(db, due_reader.id).unread_count == 1


class TestDeleteNotification:
    def test_recipient_can_delete(self, db: Session, overdue_meter) -> None:
        _, reader = overdue_meter
        notification = notification_service.notify_missed_readings(db, now=NOW)[0]

        notification_service.delete_notification(db, notification.id, reader)

        assert _notifications(db, NotificationType.READING_MISSED) == []

    def test_only_recipient_can_delete(self, db: Session, overdue_meter) -> None:
        notification = notification_service.notify_missed_readings(db, now=NOW)[0]
        admin = make_user(db, email="admin@example.com", role=UserRole.ADMIN)

        with pytest.raises(PermissionDeniedError):
            notification_service.delete_notification(db, notification.id, admin)
        assert len(_notifications(db, NotificationType.READING_MISSED)) == 1

    def test_missing_notification(self, db: Session, overdue_meter) -> None:
        _, reader = overdue_meter
        with pytest.raises(NotFoundError):
            notification_service.delete_notification(db, 12345, reader)

    def test_deleted_notification_no_longer_blocks_sweep(
        self, db: Session, overdue_meter
    ) -> None:
        _, reader = overdue_meter
        notification = notification_service.notify_missed_readings(db, now=NOW)[0]
        notification_service.delete_notification(db, notification.id, reader)

        assert len(notification_service.notify_missed_readings(db, now=NOW)) == 1
