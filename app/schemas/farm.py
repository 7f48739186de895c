from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.user import UserSummary

FarmType = Literal["dairy", "poultry", "crop", "mixed", "livestock", "organic"]


class FarmRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class Farm(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    owner_id: int
    owner: UserSummary
    managers: list[UserSummary] = []
    workers: list[UserSummary] = []
    address: str
    latitude: float
    longitude: float
    size: float
    types: list[FarmType] = []
    is_active: bool
    created_at: datetime
    updated_at: datetime


class FarmCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    size: float = Field(..., ge=0, description="Farm size in acres (must be >= 0)")
    types: list[FarmType] = []


class FarmUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    address: str | None = Field(None, min_length=1)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    size: float | None = Field(None, ge=0)
    types: list[FarmType] | None = None


class FarmMemberAdd(BaseModel):
    user_id: int
    membership: Literal["manager", "worker"]
