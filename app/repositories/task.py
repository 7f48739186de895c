from datetime import datetime

from sqlalchemy import case
from sqlalchemy.orm import Session

from app.db.models.task import Task as TaskModel
from app.db.models.task import task_assignees
from app.db.models.user import User as UserModel
from app.errors import NotFoundError

# Higher rank sorts first when ordering by priority descending
PRIORITY_RANK = {"low": 0, "medium": 1, "high": 2, "urgent": 3}

_priority_order = case(PRIORITY_RANK, value=TaskModel.priority, else_=-1)

_UPDATABLE_FIELDS = (
    "title",
    "description",
    "category",
    "priority",
    "status",
    "due_date",
    "completed_at",
    "completed_by_id",
    "recurring_frequency",
    "recurring_end_date",
    "notes",
)


def get_task_by_id(db: Session, task_id: int) -> TaskModel | None:
    """Get a task by ID."""
    return db.query(TaskModel).filter(TaskModel.id == task_id).first()


def get_tasks_by_farm(
    db: Session,
    farm_id: int,
    status: str | None = None,
    category: str | None = None,
    priority: str | None = None,
    assigned_to: int | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list[TaskModel]:
    """Get tasks of a farm sorted by due date, then priority (most urgent first)."""
    query = db.query(TaskModel).filter(TaskModel.farm_id == farm_id)
    if status is not None:
        query = query.filter(TaskModel.status == status)
    if category is not None:
        query = query.filter(TaskModel.category == category)
    if priority is not None:
        query = query.filter(TaskModel.priority == priority)
    if assigned_to is not None:
        assigned = db.query(task_assignees.c.task_id).filter(
            task_assignees.c.user_id == assigned_to
        )
        query = query.filter(TaskModel.id.in_(assigned))
    if date_from is not None:
        query = query.filter(TaskModel.due_date >= date_from)
    if date_to is not None:
        query = query.filter(TaskModel.due_date <= date_to)
    return query.order_by(TaskModel.due_date, _priority_order.desc(), TaskModel.id).all()


def get_tasks_due_between(
    db: Session, farm_id: int, start: datetime, end: datetime
) -> list[TaskModel]:
    """Get tasks of a farm due in [start, end), most urgent first."""
    return (
        db.query(TaskModel)
        .filter(
            TaskModel.farm_id == farm_id,
            TaskModel.due_date >= start,
            TaskModel.due_date < end,
        )
        .order_by(_priority_order.desc(), TaskModel.status, TaskModel.id)
        .all()
    )


def create_task(
    db: Session,
    farm_id: int,
    created_by_id: int,
    assignees: list[UserModel],
    **fields,
) -> TaskModel:
    """Create a new task in the database. Pure data access - no business logic."""
    db_task = TaskModel(farm_id=farm_id, created_by_id=created_by_id, **fields)
    db_task.assignees = list(assignees)
    db.add(db_task)
    db.commit()
    db.refresh(db_task)
    return db_task


def update_task(
    db: Session,
    task_id: int,
    assignees: list[UserModel] | None = None,
    **kwargs,
) -> TaskModel:
    """
    Update a task. Only updates fields that are explicitly provided.

    To clear a nullable field (set to None), explicitly pass it with None value.
    """
    task = get_task_by_id(db, task_id)
    if not task:
        raise NotFoundError("Task not found")

    for field in _UPDATABLE_FIELDS:
        if field in kwargs:
            setattr(task, field, kwargs[field])
    if assignees is not None:
        task.assignees = list(assignees)

    db.commit()
    db.refresh(task)
    return task


def delete_task(db: Session, task_id: int) -> None:
    """Delete a task from the database. Pure data access - no business logic."""
    task = get_task_by_id(db, task_id)
    if not task:
        raise NotFoundError("Task not found")

    db.delete(task)
    db.commit()
