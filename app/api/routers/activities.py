from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.db.models.user import User as UserModel
from app.schemas.activity import Activity, ActivityPeriod, ActivityStats, ActivityTypeCount
from app.schemas.pagination import PaginatedResponse, Pagination
from app.services import activity as activity_service

router = APIRouter(prefix="/activities", tags=["activities"])


@router.get("/farms/{farm_id}/activities", response_model=PaginatedResponse[Activity])
def list_farm_activities(
    farm_id: int,
    limit: int = Query(10, ge=1, le=100, description="Number of items per page"),
    offset: int = Query(0, ge=0, description="Number of items skipped"),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Recent activity on a farm, newest first. Any farm member."""
    activities, total = activity_service.list_farm_activities(
        db, farm_id, current_user, limit=limit, offset=offset
    )
    return PaginatedResponse(
        data=[Activity.model_validate(activity) for activity in activities],
        pagination=Pagination(total=total, limit=limit, offset=offset),
    )


@router.get("/user/activities", response_model=PaginatedResponse[Activity])
def list_user_activities(
    limit: int = Query(10, ge=1, le=100, description="Number of items per page"),
    offset: int = Query(0, ge=0, description="Number of items skipped"),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Activities performed by the current user, newest first."""
    activities, total = activity_service.list_user_activities(
        db, current_user, limit=limit, offset=offset
    )
    return PaginatedResponse(
        data=[Activity.model_validate(activity) for activity in activities],
        pagination=Pagination(total=total, limit=limit, offset=offset),
    )


@router.get("/farms/{farm_id}/activities/stats", response_model=ActivityStats)
def get_activity_stats(
    farm_id: int,
    days: int = Query(7, ge=1, le=365, description="Size of the trailing window in days"),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Count a farm's activities per type over the last ``days`` days."""
    counts, start, end = activity_service.get_activity_stats(
        db, farm_id, current_user, days=days
    )
    return ActivityStats(
        stats=[ActivityTypeCount(type=activity_type, count=count) for activity_type, count in counts],
        period=ActivityPeriod(start=start, end=end, days=days),
    )
