"""Reading API routes."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from yardops.api.dependencies import get_current_user, require_admin
from yardops.core.database import get_db
from yardops.models.user import User
from yardops.schemas.reading import (
    ReadingCreate,
    ReadingFilter,
    ReadingPage,
    ReadingResponse,
    ReadingStats,
    ReadingUpdate,
)
from yardops.services import reading as reading_service
from yardops.services.statistics import get_reading_stats

router = APIRouter(prefix="/readings", tags=["readings"])


@router.post("", response_model=ReadingResponse, status_code=status.HTTP_201_CREATED)
def create_reading(
    reading_data: ReadingCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReadingResponse:
    """Record a reading for a meter assigned to the acting user."""
    reading = reading_service.create_reading(db, reading_data, user)
    return ReadingResponse.model_validate(reading)


@router.get("", response_model=ReadingPage)
def list_readings(
    filters: ReadingFilter = Depends(),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReadingPage:
    """List readings newest first; readers only see their own."""
    if not user.get_is_admin():
        filters = filters.model_copy(update={"user_id": user.id})
    readings, total = reading_service.get_readings(db, filters, limit, offset)
    return ReadingPage(
        readings=[ReadingResponse.model_validate(r) for r in readings],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/stats", response_model=ReadingStats)
def reading_stats(
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> ReadingStats:
    """Fleet-wide compliance summary for the dashboard."""
    return get_reading_stats(db)


@router.get("/{reading_id}", response_model=ReadingResponse)
def get_reading(
    reading_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReadingResponse:
    """Get a reading by ID."""
    reading = reading_service.get_reading(db, reading_id)
    if not reading or (reading.user_id != user.id and not user.get_is_admin()):
        raise HTTPException(status_code=404, detail="Reading not found")
    return ReadingResponse.model_validate(reading)


@router.patch("/{reading_id}", response_model=ReadingResponse)
def update_reading(
    reading_id: int,
    reading_data: ReadingUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReadingResponse:
    """Correct a reading (its creator or an administrator)."""
    reading = reading_service.update_reading(db, reading_id, reading_data, user)
    return ReadingResponse.model_validate(reading)


@router.delete("/{reading_id}", status_code=204)
def delete_reading(
    reading_id: int,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> None:
    """Delete a reading."""
    reading_service.delete_reading(db, reading_id)
