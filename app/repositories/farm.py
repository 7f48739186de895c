from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.db.models.farm import Farm as FarmModel
from app.db.models.farm import farm_managers, farm_workers
from app.db.models.user import User as UserModel
from app.errors import NotFoundError


def get_farm_by_id(db: Session, farm_id: int) -> FarmModel | None:
    """Get an active farm by ID. Deactivated farms are treated as absent."""
    return (
        db.query(FarmModel)
        .filter(FarmModel.id == farm_id, FarmModel.is_active.is_(True))
        .first()
    )


def get_all_farms(db: Session) -> list[FarmModel]:
    """Get all active farms."""
    return (
        db.query(FarmModel)
        .filter(FarmModel.is_active.is_(True))
        .order_by(FarmModel.name, FarmModel.id)
        .all()
    )


def get_farms_for_member(db: Session, user_id: int) -> list[FarmModel]:
    """Get active farms where the user is owner, manager or worker."""
    managed = db.query(farm_managers.c.farm_id).filter(farm_managers.c.user_id == user_id)
    worked = db.query(farm_workers.c.farm_id).filter(farm_workers.c.user_id == user_id)
    return (
        db.query(FarmModel)
        .filter(
            FarmModel.is_active.is_(True),
            or_(
                FarmModel.owner_id == user_id,
                FarmModel.id.in_(managed),
                FarmModel.id.in_(worked),
            ),
        )
        .order_by(FarmModel.name, FarmModel.id)
        .all()
    )


def create_farm(
    db: Session,
    name: str,
    owner_id: int,
    address: str,
    latitude: float,
    longitude: float,
    size: float,
    types: list[str],
) -> FarmModel:
    """Create a new farm in the database. Pure data access - no business logic."""
    db_farm = FarmModel(
        name=name,
        owner_id=owner_id,
        address=address,
        latitude=latitude,
        longitude=longitude,
        size=size,
        types=list(types),
        is_active=True,
    )
    db.add(db_farm)
    db.commit()
    db.refresh(db_farm)
    return db_farm


def update_farm(db: Session, farm_id: int, **kwargs) -> FarmModel:
    """
    Update a farm. Only updates fields that are explicitly provided.

    Fields not provided are not updated.
    """
    farm = get_farm_by_id(db, farm_id)
    if not farm:
        raise NotFoundError("Farm not found")

    for field in ("name", "address", "latitude", "longitude", "size"):
        if field in kwargs:
            setattr(farm, field, kwargs[field])
    if "types" in kwargs:
        farm.types = list(kwargs["types"])

    db.commit()
    db.refresh(farm)
    return farm


def deactivate_farm(db: Session, farm_id: int) -> None:
    """Soft-delete a farm; its animals, tasks and activities are kept."""
    farm = get_farm_by_id(db, farm_id)
    if not farm:
        raise NotFoundError("Farm not found")

    farm.is_active = False
    db.commit()


def add_member(db: Session, farm: FarmModel, user: UserModel, membership: str) -> FarmModel:
    """Add a user to the managers or workers set, removing them from the other one."""
    if membership == "manager":
        if user in farm.workers:
            farm.workers.remove(user)
        if user not in farm.managers:
            farm.managers.append(user)
    else:
        if user in farm.managers:
            farm.managers.remove(user)
        if user not in farm.workers:
            farm.workers.append(user)

    db.commit()
    db.refresh(farm)
    return farm


def remove_member(db: Session, farm: FarmModel, user: UserModel) -> FarmModel:
    """Remove a user from both the managers and workers sets."""
    if user in farm.managers:
        farm.managers.remove(user)
    if user in farm.workers:
        farm.workers.remove(user)

    db.commit()
    db.refresh(farm)
    return farm
