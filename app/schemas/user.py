from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.schemas.role import Role


def _normalize_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role_id: int
    role: Role
    is_active: bool
    last_login: datetime | None = None


class UserSummary(BaseModel):
    """Compact user reference embedded in farm, task and activity payloads."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class UserCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=6)
    role_id: int | None = None  # If not provided, defaults to "worker"

    _normalize_email = field_validator("email", mode="before")(_normalize_email)


class UserRegister(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=6)
    # Self-registration can never grant the admin role
    role: Literal["manager", "worker"] = "worker"

    _normalize_email = field_validator("email", mode="before")(_normalize_email)


class UserUpdate(BaseModel):
    email: EmailStr | None = None
    name: str | None = Field(None, min_length=1, max_length=50)
    role_id: int | None = None
    is_active: bool | None = None

    _normalize_email = field_validator("email", mode="before")(_normalize_email)


class UserDetailsUpdate(BaseModel):
    email: EmailStr | None = None
    name: str | None = Field(None, min_length=1, max_length=50)

    _normalize_email = field_validator("email", mode="before")(_normalize_email)


class PasswordUpdate(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class Token(BaseModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    user: User
