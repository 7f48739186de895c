from fastapi import APIRouter, Depends, Form, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.db.models.user import User as UserModel
from app.schemas.pagination import ApiResponse
from app.schemas.user import PasswordUpdate, Token, User, UserDetailsUpdate, UserRegister
from app.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(data: UserRegister, db: Session = Depends(get_db)):
    """
    Register a new account. Self-registration may pick "manager" or "worker"
    (default); admin accounts are only created by other admins.
    """
    return auth_service.register(db, data)


@router.post("/login", response_model=Token)
def login(
    username: str = Form(...),  # OAuth2 uses "username", but we treat it as email
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    """
    Login endpoint - returns JWT token.
    Uses form data for OAuth2 compatibility (Swagger UI authorization).
    The 'username' field should contain the user's email address.
    """
    return auth_service.login(db, username, password)


@router.get("/me", response_model=ApiResponse[User])
def get_current_user_info(current_user: UserModel = Depends(get_current_user)):
    """Get current authenticated user information."""
    return ApiResponse(data=User.model_validate(current_user))


@router.put("/updatedetails", response_model=ApiResponse[User])
def update_details(
    data: UserDetailsUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Update the current user's name and/or email."""
    user = auth_service.update_details(db, current_user, data)
    return ApiResponse(data=User.model_validate(user))


@router.put("/updatepassword", response_model=Token)
def update_password(
    data: PasswordUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Change the current user's password. Returns a fresh token."""
    return auth_service.update_password(db, current_user, data)
