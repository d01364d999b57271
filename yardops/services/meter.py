"""Meter service: meter CRUD, assignments, schedules and compliance snapshots."""

import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from yardops.core.exceptions import ConflictError, NotFoundError
from yardops.models.meter import Meter
from yardops.models.meter_assignment import MeterAssignment
from yardops.models.reading import Reading
from yardops.models.scheduled_reading import ScheduledReading
from yardops.schemas.meter import MeterCreate, MeterFilter, MeterUpdate, ScheduledReadingCreate
from yardops.services.compliance import MeterSnapshot
from yardops.services.location import get_location
from yardops.services.meter_type import get_meter_type
from yardops.services.user import get_user

logger = logging.getLogger(__name__)


def get_meter(db: Session, meter_id: int) -> Meter | None:
    """
    Get a meter by ID.

    Args:
        db: Database session
        meter_id: Meter ID

    Returns:
        Meter or None if not found

    """
    return db.query(Meter).filter(Meter.id == meter_id).first()


def get_meters(
    db: Session,
    filters: MeterFilter | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[Meter], int]:
    """
    List meters ordered by meter number.

    Args:
        db: Database session
        filters: Optional location/type/frequency filters
        skip: Number of records to skip
        limit: Maximum number of records to return

    Returns:
        (meters, total matching count)

    """
    query = db.query(Meter)
    if filters is not None:
        if filters.location_id is not None:
            query = query.filter(Meter.location_id == filters.location_id)
        if filters.meter_type_id is not None:
            query = query.filter(Meter.meter_type_id == filters.meter_type_id)
        if filters.frequency is not None:
            query = query.filter(Meter.frequency == filters.frequency)

    total = query.count()
    meters = query.order_by(Meter.meter_number).offset(skip).limit(limit).all()
    return meters, total


def get_meters_for_user(db: Session, user_id: int) -> list[Meter]:
    """Get the meters a reader is assigned to."""
    return (
        db.query(Meter)
        .join(MeterAssignment, MeterAssignment.meter_id == Meter.id)
        .filter(MeterAssignment.user_id == user_id)
        .order_by(Meter.meter_number)
        .all()
    )


def _validate_references(db: Session, meter_type_id: int | None, location_id: int | None) -> None:
    if meter_type_id is not None and not get_meter_type(db, meter_type_id):
        raise NotFoundError("Meter type not found")
    if location_id is not None and not get_location(db, location_id):
        raise NotFoundError("Location not found")


def create_meter(db: Session, meter_data: MeterCreate) -> Meter:
    """
    Create a new meter.

    Args:
        db: Database session
        meter_data: Meter creation data

    Returns:
        Created meter

    Raises:
        ConflictError: If the meter number already exists
        NotFoundError: If the meter type or location does not exist

    """
    if db.query(Meter).filter(Meter.meter_number == meter_data.meter_number).first():
        raise ConflictError("Meter with this number already exists")
    _validate_references(db, meter_data.meter_type_id, meter_data.location_id)

    meter = Meter(
        meter_number=meter_data.meter_number,
        meter_type_id=meter_data.meter_type_id,
        location_id=meter_data.location_id,
        frequency=meter_data.frequency,
    )
    db.add(meter)
    db.commit()
    db.refresh(meter)
    logger.info("Meter created: %s (id=%s)", meter.meter_number, meter.id)
    return meter


def update_meter(db: Session, meter_id: int, meter_data: MeterUpdate) -> Meter:
    """Update a meter."""
    meter = get_meter(db, meter_id)
    if not meter:
        raise NotFoundError("Meter not found")

    update_data = meter_data.model_dump(exclude_unset=True)
    new_number = update_data.get("meter_number")
    if new_number and new_number != meter.meter_number:
        if db.query(Meter).filter(Meter.meter_number == new_number).first():
            raise ConflictError("Meter with this number already exists")
    _validate_references(db, update_data.get("meter_type_id"), update_data.get("location_id"))

    for field, value in update_data.items():
        if value is not None:
            setattr(meter, field, value)

    db.commit()
    db.refresh(meter)
    logger.info("Meter updated: id=%s", meter_id)
    return meter


def delete_meter(db: Session, meter_id: int) -> None:
    """Delete a meter together with its readings, assignments and schedules."""
    meter = get_meter(db, meter_id)
    if not meter:
        raise NotFoundError("Meter not found")

    db.delete(meter)
    db.commit()
    logger.info("Meter deleted: id=%s", meter_id)


def get_assignment(db: Session, meter_id: int, user_id: int) -> MeterAssignment | None:
    """Get the assignment linking a meter and a user."""
    return (
        db.query(MeterAssignment)
        .filter(MeterAssignment.meter_id == meter_id, MeterAssignment.user_id == user_id)
        .first()
    )


def assign_meter(
    db: Session,
    meter_id: int,
    user_id: int,
    assigned_by_id: int | None = None,
) -> MeterAssignment:
    """
    Assign a meter to a reader.

    Args:
        db: Database session
        meter_id: Meter ID
        user_id: Reader ID
        assigned_by_id: Administrator making the assignment

    Returns:
        Created assignment

    Raises:
        NotFoundError: If the meter or user does not exist
        ConflictError: If the meter is already assigned to the user

    """
    if not get_meter(db, meter_id):
        raise NotFoundError("Meter not found")
    if not get_user(db, user_id):
        raise NotFoundError("User not found")
    if get_assignment(db, meter_id, user_id):
        raise ConflictError("Meter is already assigned to this user")

    assignment = MeterAssignment(
        meter_id=meter_id,
        user_id=user_id,
        assigned_by_id=assigned_by_id,
    )
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    logger.info("Meter %s assigned to user %s", meter_id, user_id)
    return assignment


def unassign_meter(db: Session, meter_id: int, user_id: int) -> None:
    """Remove a reader's assignment to a meter."""
    assignment = get_assignment(db, meter_id, user_id)
    if not assignment:
        raise NotFoundError("Assignment not found")

    db.delete(assignment)
    db.commit()
    logger.info("Meter %s unassigned from user %s", meter_id, user_id)


def schedule_reading(
    db: Session, meter_id: int, schedule_data: ScheduledReadingCreate
) -> ScheduledReading:
    """Create a scheduled reading for a meter."""
    if not get_meter(db, meter_id):
        raise NotFoundError("Meter not found")

    scheduled = ScheduledReading(
        meter_id=meter_id,
        scheduled_date=schedule_data.scheduled_date,
        due_date=schedule_data.due_date,
    )
    db.add(scheduled)
    db.commit()
    db.refresh(scheduled)
    logger.info("Reading scheduled for meter %s, due %s", meter_id, scheduled.due_date)
    return scheduled


def list_due_scheduled_readings(db: Session, now: datetime) -> list[ScheduledReading]:
    """Scheduled readings whose due date is at or before ``now``."""
    return (
        db.query(ScheduledReading)
        .options(selectinload(ScheduledReading.meter).selectinload(Meter.assignments))
        .filter(ScheduledReading.due_date <= now)
        .order_by(ScheduledReading.due_date, ScheduledReading.id)
        .all()
    )


def list_meter_snapshots(db: Session, assigned_only: bool = False) -> list[MeterSnapshot]:
    """
    Load every meter with its assignees and most recent reading date.

    Args:
        db: Database session
        assigned_only: Skip meters that nobody is assigned to

    Returns:
        One snapshot per meter, ordered by meter ID

    """
    latest = dict(
        db.query(Reading.meter_id, func.max(Reading.reading_date))
        .group_by(Reading.meter_id)
        .all()
    )

    query = db.query(Meter).options(selectinload(Meter.assignments))
    if assigned_only:
        query = query.filter(Meter.assignments.any())

    snapshots = []
    for meter in query.order_by(Meter.id).all():
        snapshots.append(
            MeterSnapshot(
                meter_id=meter.id,
                meter_number=meter.meter_number,
                frequency=meter.frequency,
                assignee_ids=tuple(sorted(a.user_id for a in meter.assignments)),
                last_reading_date=latest.get(meter.id),
            )
        )
    return snapshots
