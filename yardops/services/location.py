"""Location service for business logic."""

import logging

from sqlalchemy.orm import Session

from yardops.core.exceptions import ConflictError, NotFoundError
from yardops.models.location import Location
from yardops.models.meter import Meter
from yardops.schemas.location import LocationCreate, LocationUpdate

logger = logging.getLogger(__name__)


def get_location(db: Session, location_id: int) -> Location | None:
    """Get a location by ID."""
    return db.query(Location).filter(Location.id == location_id).first()


def get_locations(db: Session, skip: int = 0, limit: int = 100) -> list[Location]:
    """List locations ordered by name."""
    return db.query(Location).order_by(Location.name).offset(skip).limit(limit).all()


def _ensure_unique_name(db: Session, name: str, exclude_id: int | None = None) -> None:
    query = db.query(Location).filter(Location.name == name)
    if exclude_id is not None:
        query = query.filter(Location.id != exclude_id)
    if query.first():
        raise ConflictError(f"Location with name '{name}' already exists")


def create_location(db: Session, location_data: LocationCreate) -> Location:
    """Create a new location."""
    _ensure_unique_name(db, location_data.name)

    location = Location(name=location_data.name, description=location_data.description)
    db.add(location)
    db.commit()
    db.refresh(location)
    logger.info("Location created: %s (id=%s)", location.name, location.id)
    return location


def update_location(db: Session, location_id: int, location_data: LocationUpdate) -> Location:
    """Update a location."""
    location = get_location(db, location_id)
    if not location:
        raise NotFoundError("Location not found")

    update_data = location_data.model_dump(exclude_unset=True)
    if update_data.get("name"):
        _ensure_unique_name(db, update_data["name"], exclude_id=location_id)

    for field, value in update_data.items():
        setattr(location, field, value)

    db.commit()
    db.refresh(location)
    return location


def delete_location(db: Session, location_id: int) -> None:
    """Delete a location that has no meters."""
    location = get_location(db, location_id)
    if not location:
        raise NotFoundError("Location not found")

    if db.query(Meter).filter(Meter.location_id == location_id).count():
        raise ConflictError("Cannot delete a location that still has meters")

    db.delete(location)
    db.commit()
    logger.info("Location deleted: id=%s", location_id)
