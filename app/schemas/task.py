from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.user import UserSummary

TaskCategory = Literal["feeding", "cleaning", "health", "maintenance", "harvest", "other"]
TaskPriority = Literal["low", "medium", "high", "urgent"]
TaskStatusName = Literal["pending", "in-progress", "completed", "cancelled"]
RecurringFrequency = Literal["daily", "weekly", "monthly"]


class Task(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    farm_id: int
    title: str
    description: str
    category: TaskCategory
    priority: TaskPriority
    status: TaskStatusName
    assignees: list[UserSummary] = []
    due_date: datetime
    completed_at: datetime | None = None
    completed_by: UserSummary | None = None
    recurring_frequency: RecurringFrequency | None = None
    recurring_end_date: date | None = None
    notes: str | None = None
    created_by: UserSummary
    created_at: datetime
    updated_at: datetime


class TaskCreate(BaseModel):
    farm_id: int
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=1000)
    category: TaskCategory
    priority: TaskPriority = "medium"
    due_date: datetime
    assignee_ids: list[int] = []
    recurring_frequency: RecurringFrequency | None = None
    recurring_end_date: date | None = None
    notes: str | None = Field(None, max_length=500)


class TaskUpdate(BaseModel):
    # Accepted only so that an attempted reassignment can be rejected explicitly
    farm_id: int | None = None
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=1000)
    category: TaskCategory | None = None
    priority: TaskPriority | None = None
    status: TaskStatusName | None = None
    due_date: datetime | None = None
    assignee_ids: list[int] | None = None
    recurring_frequency: RecurringFrequency | None = None
    recurring_end_date: date | None = None
    notes: str | None = Field(None, max_length=500)


class TodayTaskStats(BaseModel):
    total: int
    completed: int
    pending: int


class TaskStats(BaseModel):
    today: TodayTaskStats
