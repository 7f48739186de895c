from fastapi import BackgroundTasks, Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

import app.db.models  # noqa: F401  (registers every mapper)
from app.core.security import decode_token
from app.db import SessionLocal
from app.db.models.user import User
from app.errors import ForbiddenError, UnauthorizedError
from app.services.activity import ActivityLedger, ActivityRecorder

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_activity_ledger() -> ActivityLedger:
    """Ledger writing through its own sessions, separate from the request session."""
    return ActivityLedger(SessionLocal)


def get_activity_recorder(
    background_tasks: BackgroundTasks,
    ledger: ActivityLedger = Depends(get_activity_ledger),
) -> ActivityRecorder:
    """Record activities after the response is sent; failures are only logged."""
    return ActivityRecorder(ledger, background_tasks)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Get the current authenticated user from JWT token."""
    payload = decode_token(token)
    if payload is None:
        raise UnauthorizedError("Could not validate credentials")

    # Validate token type - must be an "access" token
    if payload.get("type") != "access":
        raise UnauthorizedError("Could not validate credentials")

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise UnauthorizedError("Could not validate credentials")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise UnauthorizedError("User not found")

    if not user.is_active:
        raise UnauthorizedError("Account is deactivated")

    return user


def require_roles(*role_names: str):
    """
    Create a dependency that requires the current user to have one of the specified roles.

    Args:
        *role_names: Variable number of role name strings to allow

    Returns:
        A dependency function that checks if the user has one of the required roles

    Example:
        Depends(require_roles("admin"))
        Depends(require_roles("admin", "manager"))
    """
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role.name not in role_names:
            raise ForbiddenError("Not enough permissions")
        return current_user

    return role_checker
