"""Farm-scoped access checks shared by every resource service.

Existence is always checked before permission, so an absent farm (404) is
distinguishable from a denied one (403).
"""

from typing import Iterable

from sqlalchemy.orm import Session

import app.repositories.farm as farm_repo
from app.db.models.farm import Farm as FarmModel
from app.db.models.user import User as UserModel
from app.domain.farm_access import Actor, FarmAction, FarmMembership, authorize
from app.errors import ForbiddenError, NotFoundError


def require_farm_access(
    db: Session,
    farm_id: int,
    current_user: UserModel,
    action: FarmAction,
    denied_message: str,
    *,
    assignee_ids: Iterable[int] = (),
    not_found_message: str = "Farm not found",
) -> FarmModel:
    """
    Load a farm and check that ``current_user`` may perform ``action`` on it.

    Raises:
        NotFoundError: If the farm does not exist (or was deactivated)
        ForbiddenError: If the farm exists but the policy denies the action
    """
    farm = farm_repo.get_farm_by_id(db, farm_id)
    if not farm:
        raise NotFoundError(not_found_message)

    allowed = authorize(
        Actor.from_user(current_user),
        FarmMembership.from_farm(farm),
        action,
        assignee_ids,
    )
    if not allowed:
        raise ForbiddenError(denied_message)
    return farm
