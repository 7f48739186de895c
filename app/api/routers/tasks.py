from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_activity_recorder, get_current_user, get_db
from app.db.models.user import User as UserModel
from app.schemas.pagination import ApiResponse, ListResponse
from app.schemas.task import (
    Task,
    TaskCategory,
    TaskCreate,
    TaskPriority,
    TaskStats,
    TaskStatusName,
    TaskUpdate,
)
from app.services import task as task_service
from app.services.activity import ActivityRecorder

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("/farms/{farm_id}", response_model=ListResponse[Task])
def list_farm_tasks(
    farm_id: int,
    task_status: TaskStatusName | None = Query(None, alias="status"),
    category: TaskCategory | None = Query(None),
    priority: TaskPriority | None = Query(None),
    assigned_to: int | None = Query(None, description="Only tasks assigned to this user"),
    date_from: datetime | None = Query(None, description="Due on or after"),
    date_to: datetime | None = Query(None, description="Due on or before"),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """List a farm's tasks sorted by due date, then priority (most urgent first)."""
    tasks = task_service.list_tasks(
        db,
        farm_id,
        current_user,
        status=task_status,
        category=category,
        priority=priority,
        assigned_to=assigned_to,
        date_from=date_from,
        date_to=date_to,
    )
    return ListResponse(count=len(tasks), data=[Task.model_validate(task) for task in tasks])


@router.get("/farms/{farm_id}/today", response_model=ListResponse[Task])
def list_today_tasks(
    farm_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    tasks = task_service.list_today_tasks(db, farm_id, current_user)
    return ListResponse(count=len(tasks), data=[Task.model_validate(task) for task in tasks])


@router.get("/farms/{farm_id}/stats", response_model=ApiResponse[TaskStats])
def get_task_stats(
    farm_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    stats = task_service.get_task_stats(db, farm_id, current_user)
    return ApiResponse(data=TaskStats(**stats))


@router.get("/{task_id}", response_model=ApiResponse[Task])
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    task = task_service.get_task(db, task_id, current_user)
    return ApiResponse(data=Task.model_validate(task))


@router.post("", response_model=ApiResponse[Task], status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    record_activity: ActivityRecorder = Depends(get_activity_recorder),
):
    """Create a task. Farm owner, managers or admin."""
    task = task_service.create_task(db, task_data, current_user, record_activity)
    return ApiResponse(data=Task.model_validate(task))


@router.put("/{task_id}", response_model=ApiResponse[Task])
def update_task(
    task_id: int,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    record_activity: ActivityRecorder = Depends(get_activity_recorder),
):
    """Update a task. Farm owner, managers or admin."""
    task = task_service.update_task(db, task_id, task_data, current_user, record_activity)
    return ApiResponse(data=Task.model_validate(task))


@router.patch("/{task_id}/complete", response_model=ApiResponse[Task])
def complete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    record_activity: ActivityRecorder = Depends(get_activity_recorder),
):
    """Mark a task completed. Farm owner, managers, assignees or admin."""
    task = task_service.complete_task(db, task_id, current_user, record_activity)
    return ApiResponse(data=Task.model_validate(task))


@router.patch("/{task_id}/uncomplete", response_model=ApiResponse[Task])
def uncomplete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Reopen a completed task. Farm owner, managers, assignees or admin."""
    task = task_service.uncomplete_task(db, task_id, current_user)
    return ApiResponse(data=Task.model_validate(task))


@router.delete("/{task_id}", response_model=ApiResponse[dict])
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Delete a task. Farm owner or admin only."""
    task_service.delete_task(db, task_id, current_user)
    return ApiResponse(data={})
