from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_activity_recorder, get_current_user, get_db, require_roles
from app.db.models.user import User as UserModel
from app.schemas.farm import Farm, FarmCreate, FarmMemberAdd, FarmUpdate
from app.schemas.pagination import ApiResponse, ListResponse
from app.services import farm as farm_service
from app.services.activity import ActivityRecorder

router = APIRouter(prefix="/farms", tags=["farms"])


@router.post("", response_model=ApiResponse[Farm], status_code=status.HTTP_201_CREATED)
def create_farm(
    farm_data: FarmCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_roles("admin", "manager")),
    record_activity: ActivityRecorder = Depends(get_activity_recorder),
):
    """Create a farm owned by the current user. Admins and managers only."""
    farm = farm_service.create_farm(db, farm_data, current_user, record_activity)
    return ApiResponse(data=Farm.model_validate(farm))


@router.get("", response_model=ListResponse[Farm])
def list_farms(
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    List farms.
    - Admin: every active farm
    - Others: farms they own, manage or work on
    """
    farms = farm_service.list_farms_for_user(db, current_user)
    return ListResponse(count=len(farms), data=[Farm.model_validate(farm) for farm in farms])


@router.get("/{farm_id}", response_model=ApiResponse[Farm])
def get_farm(
    farm_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    farm = farm_service.get_farm(db, farm_id, current_user)
    return ApiResponse(data=Farm.model_validate(farm))


@router.put("/{farm_id}", response_model=ApiResponse[Farm])
def update_farm(
    farm_id: int,
    farm_data: FarmUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Update farm settings. Farm owner or admin only."""
    farm = farm_service.update_farm(db, farm_id, farm_data, current_user)
    return ApiResponse(data=Farm.model_validate(farm))


@router.delete("/{farm_id}", response_model=ApiResponse[dict])
def delete_farm(
    farm_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Deactivate a farm. Farm owner or admin only."""
    farm_service.delete_farm(db, farm_id, current_user)
    return ApiResponse(data={})


@router.post(
    "/{farm_id}/members",
    response_model=ApiResponse[Farm],
    status_code=status.HTTP_201_CREATED,
)
def add_farm_member(
    farm_id: int,
    member_data: FarmMemberAdd,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    record_activity: ActivityRecorder = Depends(get_activity_recorder),
):
    """Add a user to the farm as manager or worker. Farm owner or admin only."""
    farm = farm_service.add_member(db, farm_id, member_data, current_user, record_activity)
    return ApiResponse(data=Farm.model_validate(farm))


@router.delete("/{farm_id}/members/{user_id}", response_model=ApiResponse[Farm])
def remove_farm_member(
    farm_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Remove a manager or worker from the farm. Farm owner or admin only."""
    farm = farm_service.remove_member(db, farm_id, user_id, current_user)
    return ApiResponse(data=Farm.model_validate(farm))
