"""User API routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from yardops.api.dependencies import get_current_user, require_admin
from yardops.core.database import get_db
from yardops.models.enums import UserRole
from yardops.models.user import User
from yardops.schemas.meter import MeterResponse
from yardops.schemas.user import UserCreate, UserResponse, UserUpdate
from yardops.services import meter as meter_service
from yardops.services import user as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=201)
def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserResponse:
    """Create a new user."""
    user = user_service.create_user(db, user_data)
    return UserResponse.model_validate(user)


@router.get("", response_model=list[UserResponse])
def list_users(
    role: UserRole | None = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[UserResponse]:
    """List users, optionally filtered by role."""
    users = user_service.get_users(db, role, skip, limit)
    return [UserResponse.model_validate(u) for u in users]


@router.get("/me/meters", response_model=list[MeterResponse])
def list_my_meters(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[MeterResponse]:
    """List the meters assigned to the acting user."""
    meters = meter_service.get_meters_for_user(db, user.id)
    return [MeterResponse.model_validate(m) for m in meters]


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserResponse:
    """Get a user by ID."""
    user = user_service.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> UserResponse:
    """Update a user."""
    user = user_service.update_user(db, user_id, user_data)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=204)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> None:
    """Delete a user who has not recorded any readings."""
    user_service.delete_user(db, user_id)
