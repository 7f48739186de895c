from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

import app.repositories.task as task_repo
import app.repositories.user as user_repo
from app.db.models.task import Task as TaskModel
from app.db.models.user import User as UserModel
from app.domain.activity_types import ActivityEntityType, ActivityType
from app.domain.farm_access import FarmAction
from app.domain.task_status import TaskStatus, can_transition, is_completion, is_reopening
from app.errors import DomainValidationError, NotFoundError
from app.schemas.activity import ActivityCreate
from app.schemas.task import TaskCreate, TaskUpdate
from app.services.access import require_farm_access
from app.services.activity import RecordActivity

_REQUIRED_FIELDS = ("title", "description", "category", "priority", "status", "due_date")


def _today_bounds() -> tuple[datetime, datetime]:
    start = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def _resolve_assignees(db: Session, assignee_ids: list[int]) -> list[UserModel]:
    unique_ids = list(dict.fromkeys(assignee_ids))
    users = user_repo.get_users_by_ids(db, unique_ids)
    missing = sorted(set(unique_ids) - {user.id for user in users})
    if missing:
        raise DomainValidationError(
            f"Invalid user ID in assignees: {', '.join(str(user_id) for user_id in missing)}"
        )
    return users


def _get_task_or_404(db: Session, task_id: int) -> TaskModel:
    task = task_repo.get_task_by_id(db, task_id)
    if not task:
        raise NotFoundError("Task not found")
    return task


def _completion_activity(task: TaskModel, current_user: UserModel) -> ActivityCreate:
    return ActivityCreate(
        type=ActivityType.TASK_COMPLETED,
        action="completed",
        description=f"Completed task: {task.title}",
        entity_type=ActivityEntityType.TASK,
        entity_id=task.id,
        entity_name=task.title,
        user_id=current_user.id,
        farm_id=task.farm_id,
        metadata={"category": task.category, "priority": task.priority},
    )


def create_task(
    db: Session,
    task_data: TaskCreate,
    current_user: UserModel,
    record_activity: RecordActivity,
) -> TaskModel:
    """
    Create a task on a farm. New tasks always start as pending.

    Raises:
        NotFoundError: If the farm doesn't exist
        ForbiddenError: If the user is not the owner, a manager or an admin
        DomainValidationError: If an assignee doesn't exist
    """
    farm = require_farm_access(
        db,
        task_data.farm_id,
        current_user,
        FarmAction.CREATE,
        "Not authorized to create tasks for this farm",
    )
    assignees = _resolve_assignees(db, task_data.assignee_ids)

    fields = task_data.model_dump(exclude={"farm_id", "assignee_ids"})
    task = task_repo.create_task(
        db,
        farm_id=farm.id,
        created_by_id=current_user.id,
        assignees=assignees,
        status=TaskStatus.PENDING.value,
        **fields,
    )

    # Creation shares the task_completed type; the action tells them apart
    record_activity(
        ActivityCreate(
            type=ActivityType.TASK_COMPLETED,
            action="created",
            description=f"Created task: {task.title}",
            entity_type=ActivityEntityType.TASK,
            entity_id=task.id,
            entity_name=task.title,
            user_id=current_user.id,
            farm_id=farm.id,
            metadata={
                "category": task.category,
                "priority": task.priority,
                "due_date": task_data.due_date.isoformat(),
            },
        )
    )
    return task


def list_tasks(
    db: Session,
    farm_id: int,
    current_user: UserModel,
    status: str | None = None,
    category: str | None = None,
    priority: str | None = None,
    assigned_to: int | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list[TaskModel]:
    """List a farm's tasks with optional filters. Any farm member may read them."""
    require_farm_access(
        db, farm_id, current_user, FarmAction.VIEW, "Not authorized to view tasks for this farm"
    )
    return task_repo.get_tasks_by_farm(
        db,
        farm_id,
        status=status,
        category=category,
        priority=priority,
        assigned_to=assigned_to,
        date_from=date_from,
        date_to=date_to,
    )


def list_today_tasks(db: Session, farm_id: int, current_user: UserModel) -> list[TaskModel]:
    """Tasks of a farm due today (UTC)."""
    require_farm_access(
        db, farm_id, current_user, FarmAction.VIEW, "Not authorized to view tasks for this farm"
    )
    start, end = _today_bounds()
    return task_repo.get_tasks_due_between(db, farm_id, start, end)


def get_task_stats(db: Session, farm_id: int, current_user: UserModel) -> dict:
    """Counts of today's tasks: total, completed, and still open (pending or in progress)."""
    require_farm_access(
        db,
        farm_id,
        current_user,
        FarmAction.VIEW,
        "Not authorized to view task stats for this farm",
    )
    start, end = _today_bounds()
    tasks = task_repo.get_tasks_due_between(db, farm_id, start, end)
    open_statuses = (TaskStatus.PENDING.value, TaskStatus.IN_PROGRESS.value)
    return {
        "today": {
            "total": len(tasks),
            "completed": sum(1 for task in tasks if task.status == TaskStatus.COMPLETED.value),
            "pending": sum(1 for task in tasks if task.status in open_statuses),
        }
    }


def get_task(db: Session, task_id: int, current_user: UserModel) -> TaskModel:
    task = _get_task_or_404(db, task_id)
    require_farm_access(
        db,
        task.farm_id,
        current_user,
        FarmAction.VIEW,
        "Not authorized to view this task",
        not_found_message="Associated farm not found",
    )
    return task


def update_task(
    db: Session,
    task_id: int,
    task_data: TaskUpdate,
    current_user: UserModel,
    record_activity: RecordActivity,
) -> TaskModel:
    """
    Update a task's fields and, optionally, its status.

    - Only the farm owner, its managers or an admin may update
    - The owning farm can never change
    - Status changes follow the task state machine; entering completed stamps
      completed_by/completed_at and is logged, leaving completed clears them

    Raises:
        NotFoundError: If the task or its farm doesn't exist
        ForbiddenError: If the user may not update tasks of the farm
        DomainValidationError: On farm reassignment, invalid transition,
                               unknown assignee or clearing a required field
    """
    task = _get_task_or_404(db, task_id)
    require_farm_access(
        db,
        task.farm_id,
        current_user,
        FarmAction.UPDATE,
        "Not authorized to update this task",
        not_found_message="Associated farm not found",
    )

    update_fields = task_data.model_dump(exclude_unset=True)
    if "farm_id" in update_fields:
        if update_fields.pop("farm_id") not in (None, task.farm_id):
            raise DomainValidationError("A task cannot be moved to another farm")

    for field in _REQUIRED_FIELDS:
        if field in update_fields and update_fields[field] is None:
            raise DomainValidationError(f"{field} cannot be empty")

    assignees = None
    if "assignee_ids" in update_fields:
        assignees = _resolve_assignees(db, update_fields.pop("assignee_ids") or [])

    completing = False
    if "status" in update_fields:
        current, target = task.status, update_fields["status"]
        if not can_transition(current, target):
            raise DomainValidationError(f"Cannot change task status from {current} to {target}")
        completing = is_completion(current, target)
        if completing:
            update_fields["completed_by_id"] = current_user.id
            update_fields["completed_at"] = datetime.now(timezone.utc)
        elif is_reopening(current, target):
            update_fields["completed_by_id"] = None
            update_fields["completed_at"] = None

    updated = task_repo.update_task(db, task.id, assignees=assignees, **update_fields)

    if completing:
        record_activity(_completion_activity(updated, current_user))
    return updated


def complete_task(
    db: Session,
    task_id: int,
    current_user: UserModel,
    record_activity: RecordActivity,
) -> TaskModel:
    """
    Mark a task completed.

    Allowed for the farm owner, its managers, admins, and any user the task is
    assigned to. Completing an already completed task changes nothing.
    """
    task = _get_task_or_404(db, task_id)
    require_farm_access(
        db,
        task.farm_id,
        current_user,
        FarmAction.COMPLETE,
        "Not authorized to complete this task",
        assignee_ids=[user.id for user in task.assignees],
        not_found_message="Associated farm not found",
    )

    if task.status == TaskStatus.COMPLETED.value:
        return task
    if not can_transition(task.status, TaskStatus.COMPLETED):
        raise DomainValidationError(f"Cannot complete a {task.status} task")

    updated = task_repo.update_task(
        db,
        task.id,
        status=TaskStatus.COMPLETED.value,
        completed_by_id=current_user.id,
        completed_at=datetime.now(timezone.utc),
    )
    record_activity(_completion_activity(updated, current_user))
    return updated


def uncomplete_task(db: Session, task_id: int, current_user: UserModel) -> TaskModel:
    """
    Move a task back to pending, clearing its completion stamp.

    The earlier task_completed activity stays in the ledger.
    """
    task = _get_task_or_404(db, task_id)
    require_farm_access(
        db,
        task.farm_id,
        current_user,
        FarmAction.COMPLETE,
        "Not authorized to modify this task",
        assignee_ids=[user.id for user in task.assignees],
        not_found_message="Associated farm not found",
    )

    if not can_transition(task.status, TaskStatus.PENDING):
        raise DomainValidationError(f"Cannot reopen a {task.status} task")

    return task_repo.update_task(
        db,
        task.id,
        status=TaskStatus.PENDING.value,
        completed_by_id=None,
        completed_at=None,
    )


def delete_task(db: Session, task_id: int, current_user: UserModel) -> None:
    """Delete a task. Only the farm owner or an admin may delete."""
    task = _get_task_or_404(db, task_id)
    require_farm_access(
        db,
        task.farm_id,
        current_user,
        FarmAction.DELETE,
        "Only farm owner or admin can delete tasks",
        not_found_message="Associated farm not found",
    )
    task_repo.delete_task(db, task.id)
