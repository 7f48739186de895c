"""Auth service: registration, login, profile and password updates."""

import logging

from sqlalchemy.orm import Session

import app.repositories.role as role_repo
import app.repositories.user as user_repo
from app.core.security import (
    create_access_token,
    get_password_hash,
    validate_password,
    verify_password,
)
from app.db.base import utcnow
from app.db.models.user import User as UserModel
from app.errors import DomainValidationError, DuplicateResourceError, NotFoundError, UnauthorizedError
from app.schemas.user import PasswordUpdate, Token, User, UserDetailsUpdate, UserRegister

logger = logging.getLogger(__name__)


def _token_for(user: UserModel) -> Token:
    access_token = create_access_token(data={"sub": user.id})
    return Token(
        access_token=access_token,
        token_type="bearer",
        user=User.model_validate(user),
    )


def register(db: Session, data: UserRegister) -> Token:
    """
    Self-register a manager or worker account and return a token for it.

    Raises:
        DuplicateResourceError: If the email is already registered
        DomainValidationError: If the password is invalid
    """
    if user_repo.get_user_by_email(db, data.email):
        raise DuplicateResourceError("Email already registered")

    is_valid, error_message = validate_password(data.password)
    if not is_valid:
        raise DomainValidationError(error_message)

    role = role_repo.get_role_by_name(db, data.role)
    if not role:
        raise NotFoundError(f"Role {data.role} not found")

    user = user_repo.create_user(
        db,
        email=data.email,
        name=data.name,
        password_hash=get_password_hash(data.password),
        role_id=role.id,
    )
    logger.info("Registered user %s with role %s", user.id, role.name)
    return _token_for(user)


def login(db: Session, email: str, password: str) -> Token:
    """
    Authenticate user by email and password, return JWT access token.

    Raises:
        UnauthorizedError: If credentials are wrong or the account is deactivated.
    """
    user = user_repo.get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise UnauthorizedError("Invalid credentials")

    if not user.is_active:
        raise UnauthorizedError("Account is deactivated")

    user = user_repo.set_last_login(db, user.id, utcnow())
    return _token_for(user)


def update_details(db: Session, current_user: UserModel, data: UserDetailsUpdate) -> UserModel:
    """
    Update the current user's name and email.

    Raises:
        DuplicateResourceError: If the new email belongs to another user
    """
    if data.email is not None and data.email != current_user.email:
        if user_repo.get_user_by_email(db, data.email):
            raise DuplicateResourceError("Email already registered")

    return user_repo.update_user(db, current_user.id, email=data.email, name=data.name)


def update_password(db: Session, current_user: UserModel, data: PasswordUpdate) -> Token:
    """
    Change the current user's password and issue a fresh token.

    Raises:
        UnauthorizedError: If the current password is wrong
        DomainValidationError: If the new password is invalid
    """
    if not verify_password(data.current_password, current_user.password_hash):
        raise UnauthorizedError("Password is incorrect")

    is_valid, error_message = validate_password(data.new_password)
    if not is_valid:
        raise DomainValidationError(error_message)

    user = user_repo.update_user_password(db, current_user.id, get_password_hash(data.new_password))
    return _token_for(user)
