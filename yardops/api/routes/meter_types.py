"""MeterType API routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from yardops.api.dependencies import require_admin
from yardops.core.database import get_db
from yardops.models.user import User
from yardops.schemas.location import MeterTypeCreate, MeterTypeResponse, MeterTypeUpdate
from yardops.services import meter_type as meter_type_service

router = APIRouter(prefix="/meter-types", tags=["meter-types"])


@router.post("", response_model=MeterTypeResponse, status_code=201)
def create_meter_type(
    meter_type_data: MeterTypeCreate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> MeterTypeResponse:
    """Create a new meter type."""
    meter_type = meter_type_service.create_meter_type(db, meter_type_data)
    return MeterTypeResponse.model_validate(meter_type)


@router.get("", response_model=list[MeterTypeResponse])
def list_meter_types(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
) -> list[MeterTypeResponse]:
    """List all meter types."""
    meter_types = meter_type_service.get_meter_types(db, skip, limit)
    return [MeterTypeResponse.model_validate(mt) for mt in meter_types]


@router.get("/{meter_type_id}", response_model=MeterTypeResponse)
def get_meter_type(
    meter_type_id: int,
    db: Session = Depends(get_db),
) -> MeterTypeResponse:
    """Get a meter type by ID."""
    meter_type = meter_type_service.get_meter_type(db, meter_type_id)
    if not meter_type:
        raise HTTPException(status_code=404, detail="Meter type not found")
    return MeterTypeResponse.model_validate(meter_type)


@router.patch("/{meter_type_id}", response_model=MeterTypeResponse)
def update_meter_type(
    meter_type_id: int,
    meter_type_data: MeterTypeUpdate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> MeterTypeResponse:
    """Update a meter type."""
    meter_type = meter_type_service.update_meter_type(db, meter_type_id, meter_type_data)
    return MeterTypeResponse.model_validate(meter_type)


@router.delete("/{meter_type_id}", status_code=204)
def delete_meter_type(
    meter_type_id: int,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> None:
    """Delete a meter type."""
    meter_type_service.delete_meter_type(db, meter_type_id)
