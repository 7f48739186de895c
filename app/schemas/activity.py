from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.domain.activity_types import ActivityEntityType, ActivityType
from app.schemas.farm import FarmRef
from app.schemas.user import UserSummary


class Activity(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: ActivityType
    action: str
    description: str
    entity_type: ActivityEntityType
    entity_id: int
    entity_name: str | None = None
    user_id: int
    user: UserSummary | None = None
    farm_id: int
    farm: FarmRef | None = None
    # ORM attribute is metadata_ ("metadata" is reserved by SQLAlchemy)
    metadata: dict[str, Any] | None = Field(
        None, validation_alias=AliasChoices("metadata_", "metadata")
    )
    created_at: datetime


class ActivityCreate(BaseModel):
    """A record to append to the activity ledger."""

    type: ActivityType
    action: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    entity_type: ActivityEntityType
    entity_id: int
    entity_name: str | None = None
    user_id: int
    farm_id: int
    metadata: dict[str, Any] | None = None


class ActivityTypeCount(BaseModel):
    type: ActivityType
    count: int


class ActivityPeriod(BaseModel):
    start: datetime
    end: datetime
    days: int


class ActivityStats(BaseModel):
    success: bool = True
    stats: list[ActivityTypeCount]
    period: ActivityPeriod
