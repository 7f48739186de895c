"""Activity ledger: append-only audit trail of farm state changes."""

import logging
from datetime import datetime, timedelta
from typing import Callable

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

import app.repositories.activity as activity_repo
from app.db.base import utcnow
from app.db.models.activity import Activity as ActivityModel
from app.db.models.user import User as UserModel
from app.domain.farm_access import FarmAction
from app.schemas.activity import ActivityCreate
from app.services.access import require_farm_access

logger = logging.getLogger(__name__)


class ActivityLedger:
    """Writes activity records through its own sessions.

    The session factory is supplied by the caller so the ledger never shares
    the request session and never reaches for a process-wide connection.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def append(self, entry: ActivityCreate) -> ActivityModel:
        """Durably store ``entry``. Raises whatever the data store raises."""
        db = self._session_factory()
        try:
            return activity_repo.create_activity(db, **entry.model_dump(mode="json"))
        finally:
            db.close()

    def record(self, entry: ActivityCreate) -> None:
        """Best-effort append: a failure is logged and never propagated."""
        try:
            self.append(entry)
        except Exception:
            logger.exception(
                "Failed to log %s activity for %s %s on farm %s",
                entry.type.value,
                entry.entity_type.value,
                entry.entity_id,
                entry.farm_id,
            )


class ActivityRecorder:
    """Schedules ledger appends to run after the response has been sent."""

    def __init__(self, ledger: ActivityLedger, background_tasks: BackgroundTasks):
        self._ledger = ledger
        self._background_tasks = background_tasks

    def __call__(self, entry: ActivityCreate) -> None:
        self._background_tasks.add_task(self._ledger.record, entry)


RecordActivity = Callable[[ActivityCreate], None]


def list_farm_activities(
    db: Session,
    farm_id: int,
    current_user: UserModel,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[ActivityModel], int]:
    """Newest-first page of a farm's activities. Any farm member may read them."""
    require_farm_access(
        db,
        farm_id,
        current_user,
        FarmAction.VIEW,
        "Not authorized to view activities for this farm",
    )
    return activity_repo.get_activities_by_farm(db, farm_id, limit=limit, offset=offset)


def list_user_activities(
    db: Session, current_user: UserModel, limit: int = 10, offset: int = 0
) -> tuple[list[ActivityModel], int]:
    """Newest-first page of the activities the current user performed."""
    return activity_repo.get_activities_by_user(
        db, current_user.id, limit=limit, offset=offset
    )


def get_activity_stats(
    db: Session, farm_id: int, current_user: UserModel, days: int = 7
) -> tuple[list[tuple[str, int]], datetime, datetime]:
    """
    Count a farm's activities per type over the trailing ``days`` window.

    Returns:
        Tuple of (list of (type, count), window start, window end)
    """
    require_farm_access(
        db,
        farm_id,
        current_user,
        FarmAction.VIEW,
        "Not authorized to view activity stats for this farm",
    )
    end = utcnow()
    start = end - timedelta(days=days)
    return activity_repo.count_activities_by_type(db, farm_id, since=start), start, end
