"""Request dependencies: acting user, role checks and the email sender."""

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from yardops.core.database import get_db
from yardops.models.user import User
from yardops.services.email import EmailSender
from yardops.services.user import get_user


def get_current_user(
    x_user_id: int = Header(..., description="ID of the acting user"),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the acting user from the ``X-User-Id`` header."""
    user = get_user(db, x_user_id)
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown or inactive user",
        )
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Require the acting user to be an administrator."""
    if not user.get_is_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator role required",
        )
    return user


def get_email_sender(request: Request) -> EmailSender:
    """Email sender built at application startup."""
    return request.app.state.email_sender
