"""Location API routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from yardops.api.dependencies import require_admin
from yardops.core.database import get_db
from yardops.models.user import User
from yardops.schemas.location import LocationCreate, LocationResponse, LocationUpdate
from yardops.services import location as location_service

router = APIRouter(prefix="/locations", tags=["locations"])


@router.post("", response_model=LocationResponse, status_code=201)
def create_location(
    location_data: LocationCreate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> LocationResponse:
    """Create a new location."""
    location = location_service.create_location(db, location_data)
    return LocationResponse.model_validate(location)


@router.get("", response_model=list[LocationResponse])
def list_locations(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
) -> list[LocationResponse]:
    """List all locations."""
    locations = location_service.get_locations(db, skip, limit)
    return [LocationResponse.model_validate(loc) for loc in locations]


@router.get("/{location_id}", response_model=LocationResponse)
def get_location(
    location_id: int,
    db: Session = Depends(get_db),
) -> LocationResponse:
    """Get a location by ID."""
    location = location_service.get_location(db, location_id)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    return LocationResponse.model_validate(location)


@router.patch("/{location_id}", response_model=LocationResponse)
def update_location(
    location_id: int,
    location_data: LocationUpdate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> LocationResponse:
    """Update a location."""
    location = location_service.update_location(db, location_id, location_data)
    return LocationResponse.model_validate(location)


@router.delete("/{location_id}", status_code=204)
def delete_location(
    location_id: int,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> None:
    """Delete a location."""
    location_service.delete_location(db, location_id)
