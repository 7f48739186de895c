from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.db.models.activity import Activity as ActivityModel


def create_activity(
    db: Session,
    type: str,
    action: str,
    description: str,
    entity_type: str,
    entity_id: int,
    user_id: int,
    farm_id: int,
    entity_name: str | None = None,
    metadata: dict | None = None,
) -> ActivityModel:
    """Insert an activity record. Identity and timestamp are assigned here, never by callers."""
    db_activity = ActivityModel(
        type=type,
        action=action,
        description=description,
        entity_type=entity_type,
        entity_id=entity_id,
        entity_name=entity_name,
        user_id=user_id,
        farm_id=farm_id,
        metadata_=metadata,
    )
    db.add(db_activity)
    db.commit()
    db.refresh(db_activity)
    return db_activity


def _newest_first(query):
    # id breaks ties between records sharing a timestamp
    return query.order_by(ActivityModel.created_at.desc(), ActivityModel.id.desc())


def get_activities_by_farm(
    db: Session, farm_id: int, limit: int = 10, offset: int = 0
) -> tuple[list[ActivityModel], int]:
    """Get a page of a farm's activities, newest first, plus the total count."""
    query = db.query(ActivityModel).filter(ActivityModel.farm_id == farm_id)
    total = query.count()
    activities = _newest_first(query).offset(offset).limit(limit).all()
    return activities, total


def get_activities_by_user(
    db: Session, user_id: int, limit: int = 10, offset: int = 0
) -> tuple[list[ActivityModel], int]:
    """Get a page of the activities performed by a user, newest first, plus the total count."""
    query = db.query(ActivityModel).filter(ActivityModel.user_id == user_id)
    total = query.count()
    activities = _newest_first(query).offset(offset).limit(limit).all()
    return activities, total


def count_activities_by_type(
    db: Session, farm_id: int, since: datetime
) -> list[tuple[str, int]]:
    """Count a farm's activities per type, created at or after ``since``."""
    rows = (
        db.query(ActivityModel.type, func.count(ActivityModel.id))
        .filter(ActivityModel.farm_id == farm_id, ActivityModel.created_at >= since)
        .group_by(ActivityModel.type)
        .order_by(ActivityModel.type)
        .all()
    )
    return [(activity_type, count) for activity_type, count in rows]
