from __future__ import annotations

from enum import Enum


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Re-asserting the current status is always allowed and is not listed here.
_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset(
        {TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED, TaskStatus.CANCELLED}
    ),
    TaskStatus.IN_PROGRESS: frozenset(
        {TaskStatus.PENDING, TaskStatus.COMPLETED, TaskStatus.CANCELLED}
    ),
    TaskStatus.COMPLETED: frozenset({TaskStatus.PENDING}),
    TaskStatus.CANCELLED: frozenset(),
}


def can_transition(current: str | TaskStatus, target: str | TaskStatus) -> bool:
    current = TaskStatus(current)
    target = TaskStatus(target)
    if current is target:
        return True
    return target in _TRANSITIONS[current]


def is_completion(current: str | TaskStatus, target: str | TaskStatus) -> bool:
    """True when moving *into* completed from any other status."""
    return TaskStatus(target) is TaskStatus.COMPLETED and TaskStatus(current) is not TaskStatus.COMPLETED


def is_reopening(current: str | TaskStatus, target: str | TaskStatus) -> bool:
    """True when moving *out of* completed."""
    return TaskStatus(current) is TaskStatus.COMPLETED and TaskStatus(target) is not TaskStatus.COMPLETED
