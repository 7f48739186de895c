import pytest

from app.domain.task_status import TaskStatus, can_transition, is_completion, is_reopening


@pytest.mark.parametrize(
    "current,target",
    [
        ("pending", "in-progress"),
        ("pending", "completed"),
        ("pending", "cancelled"),
        ("in-progress", "completed"),
        ("in-progress", "pending"),
        ("in-progress", "cancelled"),
        ("completed", "pending"),
    ],
)
def test_allowed_transitions(current, target):
    assert can_transition(current, target)


@pytest.mark.parametrize(
    "current,target",
    [
        ("completed", "in-progress"),
        ("completed", "cancelled"),
        ("cancelled", "pending"),
        ("cancelled", "in-progress"),
        ("cancelled", "completed"),
    ],
)
def test_rejected_transitions(current, target):
    assert not can_transition(current, target)


@pytest.mark.parametrize("status", list(TaskStatus))
def test_same_status_is_a_no_op(status):
    assert can_transition(status, status)


def test_unknown_status_raises():
    with pytest.raises(ValueError):
        can_transition("pending", "archived")


def test_completion_and_reopening():
    assert is_completion("in-progress", "completed")
    assert not is_completion("completed", "completed")
    assert is_reopening("completed", "pending")
    assert not is_reopening("pending", "in-progress")
