from datetime import datetime

from sqlalchemy.orm import Session

from app.db.models.user import User as UserModel
from app.errors import NotFoundError


def get_user_by_email(db: Session, email: str) -> UserModel | None:
    """Get a user by email (emails are stored lower-cased)."""
    return db.query(UserModel).filter(UserModel.email == email.strip().lower()).first()


def get_user_by_id(db: Session, user_id: int) -> UserModel | None:
    """Get a user by ID."""
    return db.query(UserModel).filter(UserModel.id == user_id).first()


def get_users_by_ids(db: Session, user_ids: list[int]) -> list[UserModel]:
    """Get all users whose id is in ``user_ids`` (missing ids are simply absent)."""
    if not user_ids:
        return []
    return db.query(UserModel).filter(UserModel.id.in_(user_ids)).all()


def create_user(
    db: Session,
    email: str,
    name: str,
    password_hash: str,
    role_id: int,
) -> UserModel:
    """Create a new user in the database. Pure data access - no business logic."""
    db_user = UserModel(
        email=email,
        name=name,
        password_hash=password_hash,
        role_id=role_id,
        is_active=True,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def update_user_password(db: Session, user_id: int, password_hash: str) -> UserModel:
    """Update a user's password."""
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    user.password_hash = password_hash
    db.commit()
    db.refresh(user)
    return user


def set_last_login(db: Session, user_id: int, when: datetime) -> UserModel:
    """Record a successful login."""
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    user.last_login = when
    db.commit()
    db.refresh(user)
    return user


def update_user(
    db: Session,
    user_id: int,
    email: str | None = None,
    name: str | None = None,
    role_id: int | None = None,
    is_active: bool | None = None,
) -> UserModel:
    """Update user fields. Only provided fields will be updated."""
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    if email is not None:
        user.email = email
    if name is not None:
        user.name = name
    if role_id is not None:
        user.role_id = role_id
    if is_active is not None:
        user.is_active = is_active

    db.commit()
    db.refresh(user)
    return user


def get_all_users_paginated(
    db: Session, limit: int = 100, offset: int = 0, name: str | None = None
) -> tuple[list[UserModel], int]:
    """
    Get all users with pagination, sorted by name for stable pagination.

    Args:
        limit: Maximum number of users returned
        offset: Number of users skipped
        name: Optional case-insensitive partial match on name

    Returns:
        Tuple of (list of users, total count)
    """
    query = db.query(UserModel)
    if name:
        query = query.filter(UserModel.name.ilike(f"%{name}%"))
    total = query.count()
    users = query.order_by(UserModel.name, UserModel.id).offset(offset).limit(limit).all()
    return users, total
