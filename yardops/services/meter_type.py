"""MeterType service for business logic."""

import logging

from sqlalchemy.orm import Session

from yardops.core.exceptions import ConflictError, NotFoundError
from yardops.models.meter import Meter
from yardops.models.meter_type import MeterType
from yardops.schemas.location import MeterTypeCreate, MeterTypeUpdate

logger = logging.getLogger(__name__)


def get_meter_type(db: Session, meter_type_id: int) -> MeterType | None:
    """Get a meter type by ID."""
    return db.query(MeterType).filter(MeterType.id == meter_type_id).first()


def get_meter_types(db: Session, skip: int = 0, limit: int = 100) -> list[MeterType]:
    """List meter types ordered by name."""
    return db.query(MeterType).order_by(MeterType.name).offset(skip).limit(limit).all()


def _ensure_unique_name(db: Session, name: str, exclude_id: int | None = None) -> None:
    query = db.query(MeterType).filter(MeterType.name == name)
    if exclude_id is not None:
        query = query.filter(MeterType.id != exclude_id)
    if query.first():
        raise ConflictError(f"Meter type '{name}' already exists")


def create_meter_type(db: Session, meter_type_data: MeterTypeCreate) -> MeterType:
    """Create a new meter type."""
    _ensure_unique_name(db, meter_type_data.name)

    meter_type = MeterType(name=meter_type_data.name, description=meter_type_data.description)
    db.add(meter_type)
    db.commit()
    db.refresh(meter_type)
    logger.info("Meter type created: %s (id=%s)", meter_type.name, meter_type.id)
    return meter_type


def update_meter_type(
    db: Session, meter_type_id: int, meter_type_data: MeterTypeUpdate
) -> MeterType:
    """Update a meter type."""
    meter_type = get_meter_type(db, meter_type_id)
    if not meter_type:
        raise NotFoundError("Meter type not found")

    update_data = meter_type_data.model_dump(exclude_unset=True)
    if update_data.get("name"):
        _ensure_unique_name(db, update_data["name"], exclude_id=meter_type_id)

    for field, value in update_data.items():
        setattr(meter_type, field, value)

    db.commit()
    db.refresh(meter_type)
    return meter_type


def delete_meter_type(db: Session, meter_type_id: int) -> None:
    """Delete a meter type that no meter uses."""
    meter_type = get_meter_type(db, meter_type_id)
    if not meter_type:
        raise NotFoundError("Meter type not found")

    if db.query(Meter).filter(Meter.meter_type_id == meter_type_id).count():
        raise ConflictError("Cannot delete a meter type that is in use")

    db.delete(meter_type)
    db.commit()
    logger.info("Meter type deleted: id=%s", meter_type_id)
