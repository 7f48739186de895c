from sqlalchemy.orm import Session

import app.repositories.role as role_repo
import app.repositories.user as user_repo
from app.core.security import get_password_hash, validate_password
from app.db.models.user import User as UserModel
from app.domain.farm_access import Actor
from app.errors import DomainValidationError, DuplicateResourceError, ForbiddenError, NotFoundError
from app.schemas.user import UserCreate, UserUpdate

DEFAULT_ROLE = "worker"


def create_user(db: Session, user_data: UserCreate) -> UserModel:
    """
    Create a new user with business logic validation.

    - Validates email uniqueness
    - Validates password requirements
    - Validates role_id exists (if provided)
    - Defaults to "worker" role if role_id not provided
    """
    # Check if email already exists
    existing_user = user_repo.get_user_by_email(db, user_data.email)
    if existing_user:
        raise DuplicateResourceError("Email already registered")

    # Validate password
    is_valid, error_message = validate_password(user_data.password)
    if not is_valid:
        raise DomainValidationError(error_message)

    # Handle role assignment
    if user_data.role_id is None:
        role = role_repo.get_role_by_name(db, DEFAULT_ROLE)
        if not role:
            raise NotFoundError("Worker role not found")
    else:
        role = role_repo.get_role_by_id(db, user_data.role_id)
        if not role:
            raise NotFoundError(f"Role with id {user_data.role_id} not found")

    # Use repository for actual database operation (pure data access)
    return user_repo.create_user(
        db,
        email=user_data.email,
        name=user_data.name,
        password_hash=get_password_hash(user_data.password),
        role_id=role.id,
    )


def get_user(db: Session, user_id: int, current_user: UserModel) -> UserModel:
    """
    Get a user by ID with authorization checks.

    - Admin can get any user
    - Managers and workers can only get themselves

    Raises:
        NotFoundError: If user doesn't exist
        ForbiddenError: If a non-admin tries to access another user
    """
    user = user_repo.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    if not Actor.from_user(current_user).is_admin and current_user.id != user_id:
        raise ForbiddenError("You can only access your own user information")

    return user


def update_user(
    db: Session,
    user_id: int,
    user_data: UserUpdate,
    current_user: UserModel,
) -> UserModel:
    """
    Update a user with authorization checks and business logic validation.

    - Admin can update any user (email, name, role, active flag), but cannot
      change their own role or deactivate themselves
    - Managers and workers can only update themselves (email, name)

    Raises:
        NotFoundError: If user or role doesn't exist
        ForbiddenError: If a non-admin targets another user or a privileged field
        DuplicateResourceError: If email is already taken by another user
        DomainValidationError: If a user tries to change their own role or deactivate themselves
    """
    user = user_repo.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    is_admin = Actor.from_user(current_user).is_admin
    if not is_admin and current_user.id != user_id:
        raise ForbiddenError("You can only update your own user information")

    if not is_admin and (user_data.role_id is not None or user_data.is_active is not None):
        raise ForbiddenError("You cannot modify your role or account status")

    if current_user.id == user_id and user_data.role_id is not None:
        raise DomainValidationError("You cannot change your own role")

    if current_user.id == user_id and user_data.is_active is False:
        raise DomainValidationError("You cannot deactivate your own account")

    # Validate email uniqueness if email is being updated
    if user_data.email is not None and user_data.email != user.email:
        if user_repo.get_user_by_email(db, user_data.email):
            raise DuplicateResourceError("Email already registered")

    if user_data.role_id is not None and not role_repo.get_role_by_id(db, user_data.role_id):
        raise NotFoundError(f"Role with id {user_data.role_id} not found")

    return user_repo.update_user(
        db,
        user_id=user_id,
        email=user_data.email,
        name=user_data.name,
        role_id=user_data.role_id,
        is_active=user_data.is_active,
    )


def get_all_users(
    db: Session, limit: int = 100, offset: int = 0, name: str | None = None
) -> tuple[list[UserModel], int]:
    """
    Get all users with pagination.

    Admin-only functionality; authorization is handled at the controller level.
    """
    return user_repo.get_all_users_paginated(db, limit=limit, offset=offset, name=name)


def deactivate_user(db: Session, user_id: int, current_user: UserModel) -> None:
    """
    Deactivate a user. Users are never hard-deleted because farms, tasks and
    activities keep referencing them.

    Raises:
        NotFoundError: If user doesn't exist
        DomainValidationError: If the admin targets their own account
    """
    user = user_repo.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    if user.id == current_user.id:
        raise DomainValidationError("You cannot deactivate your own account")

    user_repo.update_user(db, user_id=user_id, is_active=False)
