"""Reading service for business logic - recording and reviewing readings."""

import logging
from datetime import datetime

from sqlalchemy import ColumnElement, or_
from sqlalchemy.orm import Query, Session

from yardops.core.clock import as_utc, utc_now
from yardops.core.exceptions import NotFoundError, PermissionDeniedError
from yardops.models.meter import Meter
from yardops.models.meter_type import MeterType
from yardops.models.reading import Reading
from yardops.models.user import User
from yardops.schemas.location import LocationResponse
from yardops.schemas.meter import MeterReadingsView
from yardops.schemas.reading import ReadingCreate, ReadingFilter, ReadingResponse, ReadingUpdate
from yardops.services.compliance import next_due_date
from yardops.services.meter import get_assignment, get_meter

logger = logging.getLogger(__name__)


def meter_type_condition(meter_type: str) -> ColumnElement[bool]:
    """Match a meter type given either its ID or its name."""
    condition = MeterType.name == meter_type
    if meter_type.isdigit():
        condition = or_(condition, Meter.meter_type_id == int(meter_type))
    return condition


def get_reading(db: Session, reading_id: int) -> Reading | None:
    """Get a reading by ID."""
    return db.query(Reading).filter(Reading.id == reading_id).first()


def _filtered_query(db: Session, filters: ReadingFilter | None) -> Query[Reading]:
    query = db.query(Reading).join(Meter, Reading.meter_id == Meter.id)
    if filters is None:
        return query

    if filters.meter_id is not None:
        query = query.filter(Reading.meter_id == filters.meter_id)
    if filters.user_id is not None:
        query = query.filter(Reading.user_id == filters.user_id)
    if filters.location_id is not None:
        query = query.filter(Meter.location_id == filters.location_id)
    if filters.meter_type:
        query = query.join(MeterType, Meter.meter_type_id == MeterType.id).filter(
            meter_type_condition(filters.meter_type)
        )
    if filters.start_date is not None:
        query = query.filter(Reading.reading_date >= as_utc(filters.start_date))
    if filters.end_date is not None:
        query = query.filter(Reading.reading_date <= as_utc(filters.end_date))
    return query


def get_readings(
    db: Session,
    filters: ReadingFilter | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[Reading], int]:
    """List readings newest first, with the total matching count."""
    query = _filtered_query(db, filters)
    total = query.count()
    readings = (
        query.order_by(Reading.reading_date.desc(), Reading.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return readings, total


def count_readings(
    db: Session,
    start: datetime | None = None,
    end: datetime | None = None,
) -> int:
    """Count readings whose date falls in the optional ``[start, end]`` window."""
    return _filtered_query(db, ReadingFilter(start_date=start, end_date=end)).count()


def create_reading(
    db: Session,
    reading_data: ReadingCreate,
    user: User,
    now: datetime | None = None,
) -> Reading:
    """
    Record a reading for a meter the user is assigned to.

    Args:
        db: Database session
        reading_data: Reading creation data
        user: Reader recording the value
        now: Reading date used when the request omits one

    Returns:
        Created reading

    Raises:
        NotFoundError: If the meter does not exist
        PermissionDeniedError: If the user is not assigned to the meter

    """
    if not get_meter(db, reading_data.meter_id):
        raise NotFoundError("Meter not found")
    if not get_assignment(db, reading_data.meter_id, user.id):
        raise PermissionDeniedError("You are not assigned to this meter")

    reading = Reading(
        meter_id=reading_data.meter_id,
        user_id=user.id,
        value=reading_data.value,
        reading_date=reading_data.reading_date or (as_utc(now) if now else utc_now()),
        comment=reading_data.comment,
    )
    db.add(reading)
    db.commit()
    db.refresh(reading)
    logger.info(
        "Reading created: id=%s meter=%s user=%s", reading.id, reading.meter_id, user.id
    )
    return reading


def update_reading(
    db: Session,
    reading_id: int,
    reading_data: ReadingUpdate,
    acting_user: User,
) -> Reading:
    """Correct a reading; only its creator or an administrator may do so."""
    reading = get_reading(db, reading_id)
    if not reading:
        raise NotFoundError("Reading not found")
    if reading.user_id != acting_user.id and not acting_user.get_is_admin():
        raise PermissionDeniedError("You do not have permission to update this reading")

    update_data = reading_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if field == "comment" or value is not None:
            setattr(reading, field, value)

    db.commit()
    db.refresh(reading)
    logger.info("Reading updated: id=%s by user=%s", reading_id, acting_user.id)
    return reading


def delete_reading(db: Session, reading_id: int) -> None:
    """Delete a reading."""
    reading = get_reading(db, reading_id)
    if not reading:
        raise NotFoundError("Reading not found")

    db.delete(reading)
    db.commit()
    logger.info("Reading deleted: id=%s", reading_id)


def get_meter_readings(
    db: Session,
    meter_id: int,
    now: datetime | None = None,
) -> MeterReadingsView:
    """Get a meter's reading history, its next due date and whether it is overdue."""
    meter = get_meter(db, meter_id)
    if not meter:
        raise NotFoundError("Meter not found")

    readings, _ = get_readings(db, ReadingFilter(meter_id=meter_id), limit=1000)
    last_reading = readings[0] if readings else None
    due = next_due_date(meter.frequency, last_reading.reading_date if last_reading else None)
    now = as_utc(now) if now is not None else utc_now()

    return MeterReadingsView(
        meter_id=meter.id,
        meter_number=meter.meter_number,
        frequency=meter.frequency,
        location=LocationResponse.model_validate(meter.location),
        readings=[ReadingResponse.model_validate(r) for r in readings],
        last_reading=ReadingResponse.model_validate(last_reading) if last_reading else None,
        next_due_date=due,
        is_overdue=due is not None and due < now,
    )
