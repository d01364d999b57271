"""User service for business logic."""

import logging

from sqlalchemy.orm import Session

from yardops.core.exceptions import ConflictError, NotFoundError
from yardops.models.enums import UserRole
from yardops.models.meter import Meter
from yardops.models.meter_assignment import MeterAssignment
from yardops.models.reading import Reading
from yardops.models.user import User
from yardops.schemas.user import AssignedUser, UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User | None:
    """Get a user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email address."""
    return db.query(User).filter(User.email == email).first()


def get_users(
    db: Session,
    role: UserRole | None = None,
    skip: int = 0,
    limit: int = 100,
) -> list[User]:
    """List users, optionally restricted to one role."""
    query = db.query(User)
    if role is not None:
        query = query.filter(User.role == role)
    return query.order_by(User.last_name, User.first_name).offset(skip).limit(limit).all()


def create_user(db: Session, user_data: UserCreate) -> User:
    """
    Create a new user.

    Args:
        db: Database session
        user_data: User creation data

    Returns:
        Created user

    Raises:
        ConflictError: If the email is already registered

    """
    if get_user_by_email(db, user_data.email):
        raise ConflictError("Email already registered")

    user = User(
        email=user_data.email,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        role=user_data.role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User created: id=%s role=%s", user.id, user.role.value)
    return user


def update_user(db: Session, user_id: int, user_data: UserUpdate) -> User:
    """Update a user."""
    user = get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    update_data = user_data.model_dump(exclude_unset=True)
    if update_data.get("email") and update_data["email"] != user.email:
        if get_user_by_email(db, update_data["email"]):
            raise ConflictError("Email already registered")

    for field, value in update_data.items():
        setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: int) -> None:
    """
    Delete a user together with their assignments and notifications.

    Raises:
        NotFoundError: If the user does not exist
        ConflictError: If the user has recorded readings

    """
    user = get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    if db.query(Reading).filter(Reading.user_id == user_id).count():
        raise ConflictError("Cannot delete a user who has recorded readings")

    db.query(MeterAssignment).filter(MeterAssignment.assigned_by_id == user_id).update(
        {MeterAssignment.assigned_by_id: None},
        synchronize_session=False,
    )
    db.delete(user)
    db.commit()
    logger.info("User deleted: id=%s", user_id)


def get_users_by_meter(db: Session, meter_id: int) -> list[AssignedUser]:
    """List the users assigned to a meter, with when they were assigned."""
    if not db.query(Meter).filter(Meter.id == meter_id).first():
        raise NotFoundError("Meter not found")

    assignments = (
        db.query(MeterAssignment)
        .filter(MeterAssignment.meter_id == meter_id)
        .order_by(MeterAssignment.assigned_at, MeterAssignment.id)
        .all()
    )
    return [
        AssignedUser(
            id=a.user.id,
            email=a.user.email,
            first_name=a.user.first_name,
            last_name=a.user.last_name,
            role=a.user.role,
            assigned_at=a.assigned_at,
        )
        for a in assignments
    ]
