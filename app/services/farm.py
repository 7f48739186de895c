from sqlalchemy.orm import Session

import app.repositories.farm as farm_repo
import app.repositories.user as user_repo
from app.db.models.farm import Farm as FarmModel
from app.db.models.user import User as UserModel
from app.domain.activity_types import ActivityEntityType, ActivityType
from app.domain.farm_access import Actor, FarmAction
from app.errors import DomainValidationError, NotFoundError
from app.schemas.activity import ActivityCreate
from app.schemas.farm import FarmCreate, FarmMemberAdd, FarmUpdate
from app.services.access import require_farm_access
from app.services.activity import RecordActivity


def create_farm(
    db: Session,
    farm_data: FarmCreate,
    current_user: UserModel,
    record_activity: RecordActivity,
) -> FarmModel:
    """Create a farm owned by the current user and log a farm_created activity."""
    farm = farm_repo.create_farm(db, owner_id=current_user.id, **farm_data.model_dump())

    record_activity(
        ActivityCreate(
            type=ActivityType.FARM_CREATED,
            action="created",
            description=f"Created farm {farm.name}",
            entity_type=ActivityEntityType.FARM,
            entity_id=farm.id,
            entity_name=farm.name,
            user_id=current_user.id,
            farm_id=farm.id,
            metadata={"size": farm.size, "types": list(farm.types or [])},
        )
    )
    return farm


def list_farms_for_user(db: Session, current_user: UserModel) -> list[FarmModel]:
    """
    List farms visible to the given user.

    - Admin: every active farm
    - Everyone else: farms they own, manage or work on
    """
    if Actor.from_user(current_user).is_admin:
        return farm_repo.get_all_farms(db)
    return farm_repo.get_farms_for_member(db, current_user.id)


def get_farm(db: Session, farm_id: int, current_user: UserModel) -> FarmModel:
    return require_farm_access(
        db, farm_id, current_user, FarmAction.VIEW, "Not authorized to view this farm"
    )


def update_farm(
    db: Session, farm_id: int, farm_data: FarmUpdate, current_user: UserModel
) -> FarmModel:
    """Update farm settings. Only the owner or an admin may do so."""
    require_farm_access(
        db,
        farm_id,
        current_user,
        FarmAction.MANAGE,
        "Only farm owner or admin can update this farm",
    )
    update_fields = farm_data.model_dump(exclude_unset=True)
    for field, value in update_fields.items():
        if value is None:
            raise DomainValidationError(f"{field} cannot be empty")
    return farm_repo.update_farm(db, farm_id, **update_fields)


def delete_farm(db: Session, farm_id: int, current_user: UserModel) -> None:
    """Deactivate a farm. Only the owner or an admin may do so."""
    require_farm_access(
        db,
        farm_id,
        current_user,
        FarmAction.DELETE,
        "Only farm owner or admin can delete this farm",
    )
    farm_repo.deactivate_farm(db, farm_id)


def add_member(
    db: Session,
    farm_id: int,
    member_data: FarmMemberAdd,
    current_user: UserModel,
    record_activity: RecordActivity,
) -> FarmModel:
    """
    Add a user to a farm as manager or worker (moving them if already a member).

    Raises:
        NotFoundError: If the farm or the user doesn't exist
        ForbiddenError: If the current user is not the owner or an admin
        DomainValidationError: If the user is the owner or is deactivated
    """
    farm = require_farm_access(
        db,
        farm_id,
        current_user,
        FarmAction.MANAGE,
        "Only farm owner or admin can manage farm members",
    )
    user = user_repo.get_user_by_id(db, member_data.user_id)
    if not user:
        raise NotFoundError("User not found")
    if user.id == farm.owner_id:
        raise DomainValidationError("The farm owner cannot be added as a member")
    if not user.is_active:
        raise DomainValidationError("Cannot add a deactivated user to a farm")

    farm = farm_repo.add_member(db, farm, user, member_data.membership)

    record_activity(
        ActivityCreate(
            type=ActivityType.USER_JOINED,
            action="joined",
            description=f"{user.name} joined {farm.name} as {member_data.membership}",
            entity_type=ActivityEntityType.USER,
            entity_id=user.id,
            entity_name=user.name,
            user_id=current_user.id,
            farm_id=farm.id,
            metadata={"membership": member_data.membership},
        )
    )
    return farm


def remove_member(
    db: Session, farm_id: int, user_id: int, current_user: UserModel
) -> FarmModel:
    """Remove a manager or worker from a farm."""
    farm = require_farm_access(
        db,
        farm_id,
        current_user,
        FarmAction.MANAGE,
        "Only farm owner or admin can manage farm members",
    )
    user = user_repo.get_user_by_id(db, user_id)
    if not user or (user not in farm.managers and user not in farm.workers):
        raise NotFoundError("User is not a member of this farm")
    return farm_repo.remove_member(db, farm, user)
