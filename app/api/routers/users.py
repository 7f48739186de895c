from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_roles
from app.db.models.user import User as UserModel
from app.schemas.pagination import ApiResponse, PaginatedResponse, Pagination
from app.schemas.user import User, UserCreate, UserUpdate
from app.services.user import create_user, deactivate_user, get_all_users, get_user, update_user

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=ApiResponse[User], status_code=status.HTTP_201_CREATED)
def create_new_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles("admin")),
):
    """
    Create a new user. Only admin users can create users.

    If role_id is not provided, the user will be assigned the "worker" role by default.
    """
    user = create_user(db, user_data)
    return ApiResponse(data=User.model_validate(user))


@router.get("", response_model=PaginatedResponse[User])
def get_all_users_paginated(
    limit: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    offset: int = Query(0, ge=0, description="Number of items skipped"),
    name: str | None = Query(None, description="Filter users by name (partial match)"),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles("admin")),
):
    """
    Get all users with pagination. Only admin users can access this endpoint.
    """
    users, total = get_all_users(db, limit=limit, offset=offset, name=name)
    return PaginatedResponse(
        data=[User.model_validate(user) for user in users],
        pagination=Pagination(total=total, limit=limit, offset=offset),
    )


@router.get("/{user_id}", response_model=ApiResponse[User])
def get_user_by_id(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    Get a user by ID.

    - Admin can get any user
    - Managers and workers can only get themselves
    """
    user = get_user(db, user_id, current_user)
    return ApiResponse(data=User.model_validate(user))


@router.put("/{user_id}", response_model=ApiResponse[User])
def update_user_by_id(
    user_id: int,
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    Update a user by ID.

    - Admin can update any user (email, name, role, active flag), but cannot change their own role
    - Managers and workers can only update themselves (email, name)
    """
    user = update_user(db, user_id, user_data, current_user)
    return ApiResponse(data=User.model_validate(user))


@router.delete("/{user_id}", response_model=ApiResponse[dict])
def deactivate_user_by_id(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles("admin")),
):
    """
    Deactivate a user by ID. Only admin users can deactivate users.
    """
    deactivate_user(db, user_id, current_user)
    return ApiResponse(data={})
