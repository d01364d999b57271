"""Meter API routes: CRUD, assignments, schedules and reading history."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from yardops.api.dependencies import get_current_user, get_email_sender, require_admin
from yardops.core.database import get_db
from yardops.models.user import User
from yardops.schemas.meter import (
    AssignmentCreate,
    AssignmentResponse,
    MeterCreate,
    MeterFilter,
    MeterReadingsView,
    MeterResponse,
    MeterUpdate,
    ScheduledReadingCreate,
    ScheduledReadingResponse,
)
from yardops.schemas.user import AssignedUser
from yardops.services import meter as meter_service
from yardops.services import notification as notification_service
from yardops.services import reading as reading_service
from yardops.services import user as user_service
from yardops.services.email import EmailSender

router = APIRouter(prefix="/meters", tags=["meters"])


@router.post("", response_model=MeterResponse, status_code=201)
def create_meter(
    meter_data: MeterCreate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> MeterResponse:
    """Create a new meter."""
    meter = meter_service.create_meter(db, meter_data)
    return MeterResponse.model_validate(meter)


@router.get("", response_model=list[MeterResponse])
def list_meters(
    filters: MeterFilter = Depends(),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[MeterResponse]:
    """List meters, optionally filtered by location, type or frequency."""
    meters, _ = meter_service.get_meters(db, filters, skip, limit)
    return [MeterResponse.model_validate(m) for m in meters]


@router.get("/{meter_id}", response_model=MeterResponse)
def get_meter(
    meter_id: int,
    db: Session = Depends(get_db),
) -> MeterResponse:
    """Get a meter by ID."""
    meter = meter_service.get_meter(db, meter_id)
    if not meter:
        raise HTTPException(status_code=404, detail="Meter not found")
    return MeterResponse.model_validate(meter)


@router.patch("/{meter_id}", response_model=MeterResponse)
def update_meter(
    meter_id: int,
    meter_data: MeterUpdate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> MeterResponse:
    """Update a meter."""
    meter = meter_service.update_meter(db, meter_id, meter_data)
    return MeterResponse.model_validate(meter)


@router.delete("/{meter_id}", status_code=204)
def delete_meter(
    meter_id: int,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> None:
    """Delete a meter and everything recorded against it."""
    meter_service.delete_meter(db, meter_id)


@router.post("/{meter_id}/assignments", response_model=AssignmentResponse, status_code=201)
def assign_meter(
    meter_id: int,
    assignment_data: AssignmentCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
    email_sender: EmailSender = Depends(get_email_sender),
) -> AssignmentResponse:
    """Assign a meter to a reader and notify them."""
    assignment = meter_service.assign_meter(
        db, meter_id, assignment_data.user_id, assigned_by_id=admin.id
    )
    notification_service.notify_new_assignment(db, assignment, email_sender)
    return AssignmentResponse.model_validate(assignment)


@router.delete("/{meter_id}/assignments/{user_id}", status_code=204)
def unassign_meter(
    meter_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> None:
    """Remove a reader from a meter."""
    meter_service.unassign_meter(db, meter_id, user_id)


@router.post(
    "/{meter_id}/schedules",
    response_model=ScheduledReadingResponse,
    status_code=201,
)
def schedule_reading(
    meter_id: int,
    schedule_data: ScheduledReadingCreate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> ScheduledReadingResponse:
    """Schedule an expected reading for a meter."""
    scheduled = meter_service.schedule_reading(db, meter_id, schedule_data)
    return ScheduledReadingResponse.model_validate(scheduled)


@router.get("/{meter_id}/readings", response_model=MeterReadingsView)
def get_meter_readings(
    meter_id: int,
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user),
) -> MeterReadingsView:
    """Get a meter's readings, next due date and overdue flag."""
    return reading_service.get_meter_readings(db, meter_id)


@router.get("/{meter_id}/users", response_model=list[AssignedUser])
def list_meter_users(
    meter_id: int,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[AssignedUser]:
    """List the readers assigned to a meter."""
    return user_service.get_users_by_meter(db, meter_id)
