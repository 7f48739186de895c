from datetime import datetime, timezone

from sqlalchemy.orm import Session

import app.repositories.animal as animal_repo
from app.db.models.animal import Animal as AnimalModel
from app.db.models.user import User as UserModel
from app.domain.activity_types import ActivityEntityType, ActivityType
from app.domain.farm_access import Actor, FarmAction
from app.errors import DomainValidationError, NotFoundError
from app.schemas.activity import ActivityCreate
from app.schemas.animal import AnimalCreate, AnimalUpdate, HealthRecordCreate
from app.services.access import require_farm_access
from app.services.activity import RecordActivity

# Columns that may not be cleared once set
_REQUIRED_FIELDS = ("tag_number", "type", "breed", "gender", "date_of_birth", "weight", "status")

# Updates to these fields are worth an activity record
_TRACKED_FIELDS = ("weight", "status", "name")


def _label(animal: AnimalModel) -> str:
    if animal.name:
        return f"{animal.name} (#{animal.tag_number})"
    return f"#{animal.tag_number}"


def _validate_parents(
    db: Session, mother_id: int | None, father_id: int | None, animal_id: int | None = None
) -> None:
    for parent_id, label in ((mother_id, "Mother"), (father_id, "Father")):
        if parent_id is None:
            continue
        if animal_id is not None and parent_id == animal_id:
            raise DomainValidationError("An animal cannot be its own parent")
        if not animal_repo.get_animal_by_id(db, parent_id):
            raise DomainValidationError(f"{label} animal with id {parent_id} not found")


def _get_animal_or_404(db: Session, animal_id: int) -> AnimalModel:
    animal = animal_repo.get_animal_by_id(db, animal_id)
    if not animal:
        raise NotFoundError("Animal not found")
    return animal


def create_animal(
    db: Session,
    animal_data: AnimalCreate,
    current_user: UserModel,
    record_activity: RecordActivity,
) -> AnimalModel:
    """
    Add an animal to a farm.

    - Only the farm owner, its managers or an admin may add animals
    - Tag numbers are unique across every farm

    Raises:
        NotFoundError: If the farm doesn't exist
        ForbiddenError: If the user may not add animals to the farm
        DuplicateResourceError: If the tag number is already in use
    """
    farm = require_farm_access(
        db,
        animal_data.farm_id,
        current_user,
        FarmAction.CREATE,
        "Not authorized to add animals to this farm",
    )
    _validate_parents(db, animal_data.mother_id, animal_data.father_id)

    fields = animal_data.model_dump(exclude={"farm_id"})
    animal = animal_repo.create_animal(db, farm_id=farm.id, **fields)

    record_activity(
        ActivityCreate(
            type=ActivityType.ANIMAL_ADDED,
            action="added",
            description=f"Added new animal {_label(animal)}",
            entity_type=ActivityEntityType.ANIMAL,
            entity_id=animal.id,
            entity_name=animal.name,
            user_id=current_user.id,
            farm_id=farm.id,
            metadata={
                "tag_number": animal.tag_number,
                "type": animal.type,
                "breed": animal.breed,
            },
        )
    )
    return animal


def list_animals(
    db: Session,
    current_user: UserModel,
    farm_id: int | None = None,
    animal_type: str | None = None,
    status: str | None = None,
) -> list[AnimalModel]:
    """
    List animals, newest first.

    - With farm_id: any member of the farm (or an admin)
    - Without farm_id: admins get every animal, everyone else must scope to a farm
    """
    if farm_id is not None:
        require_farm_access(
            db,
            farm_id,
            current_user,
            FarmAction.VIEW,
            "Not authorized to view animals from this farm",
        )
    elif not Actor.from_user(current_user).is_admin:
        raise DomainValidationError("Farm ID is required")

    return animal_repo.get_animals(
        db, farm_id=farm_id, animal_type=animal_type, status=status
    )


def get_animal_stats(db: Session, farm_id: int, current_user: UserModel) -> dict:
    """Herd health summary for a farm's dashboard."""
    require_farm_access(
        db,
        farm_id,
        current_user,
        FarmAction.VIEW,
        "Not authorized to view stats for this farm",
    )
    animals = animal_repo.get_animals(db, farm_id=farm_id)

    total = len(animals)
    healthy = sum(1 for animal in animals if animal.status == "healthy")
    sick = sum(1 for animal in animals if animal.status == "sick")
    quarantine = sum(1 for animal in animals if animal.status == "quarantine")

    by_type: dict[str, int] = {}
    for animal in animals:
        by_type[animal.type] = by_type.get(animal.type, 0) + 1

    return {
        "total": total,
        "healthy": healthy,
        "sick": sick,
        "quarantine": quarantine,
        "health_rate": round(healthy / total * 100) if total else 100,
        "by_type": by_type,
        "last_updated": datetime.now(timezone.utc),
    }


def get_animal(db: Session, animal_id: int, current_user: UserModel) -> AnimalModel:
    """Get an animal visible to any member of its farm."""
    animal = _get_animal_or_404(db, animal_id)
    require_farm_access(
        db,
        animal.farm_id,
        current_user,
        FarmAction.VIEW,
        "Not authorized to view this animal",
        not_found_message="Associated farm not found",
    )
    return animal


def update_animal(
    db: Session,
    animal_id: int,
    animal_data: AnimalUpdate,
    current_user: UserModel,
    record_activity: RecordActivity,
) -> AnimalModel:
    """
    Update an animal.

    - Only the farm owner, its managers or an admin may update
    - The owning farm can never change
    - Weight, status or name changes are logged to the activity ledger

    Raises:
        NotFoundError: If the animal or its farm doesn't exist
        ForbiddenError: If the user may not update animals of the farm
        DomainValidationError: On farm reassignment or clearing a required field
        DuplicateResourceError: If the new tag number is already in use
    """
    animal = _get_animal_or_404(db, animal_id)
    farm = require_farm_access(
        db,
        animal.farm_id,
        current_user,
        FarmAction.UPDATE,
        "Not authorized to update this animal",
        not_found_message="Associated farm not found",
    )

    update_fields = animal_data.model_dump(exclude_unset=True)
    if "farm_id" in update_fields:
        if update_fields.pop("farm_id") not in (None, animal.farm_id):
            raise DomainValidationError("An animal cannot be moved to another farm")

    for field in _REQUIRED_FIELDS:
        if field in update_fields and update_fields[field] is None:
            raise DomainValidationError(f"{field} cannot be empty")

    _validate_parents(
        db,
        update_fields.get("mother_id"),
        update_fields.get("father_id"),
        animal_id=animal.id,
    )

    updated = animal_repo.update_animal(db, animal.id, **update_fields)

    if any(field in update_fields for field in _TRACKED_FIELDS):
        description = f"Updated animal {_label(updated)}"
        if "weight" in update_fields:
            description += f" - weight: {update_fields['weight']} kg"
        if "status" in update_fields:
            description += f" - status: {update_fields['status']}"

        record_activity(
            ActivityCreate(
                type=ActivityType.ANIMAL_UPDATED,
                action="updated",
                description=description,
                entity_type=ActivityEntityType.ANIMAL,
                entity_id=updated.id,
                entity_name=updated.name,
                user_id=current_user.id,
                farm_id=farm.id,
                metadata=animal_data.model_dump(
                    mode="json", exclude_unset=True, exclude={"farm_id"}
                ),
            )
        )
    return updated


def delete_animal(db: Session, animal_id: int, current_user: UserModel) -> None:
    """Delete an animal. Only the farm owner or an admin may delete."""
    animal = _get_animal_or_404(db, animal_id)
    require_farm_access(
        db,
        animal.farm_id,
        current_user,
        FarmAction.DELETE,
        "Only farm owner or admin can delete animals",
        not_found_message="Associated farm not found",
    )
    animal_repo.delete_animal(db, animal.id)


def add_health_record(
    db: Session,
    animal_id: int,
    record_data: HealthRecordCreate,
    current_user: UserModel,
    record_activity: RecordActivity,
) -> AnimalModel:
    """Append a health record and log a health_check activity."""
    animal = _get_animal_or_404(db, animal_id)
    farm = require_farm_access(
        db,
        animal.farm_id,
        current_user,
        FarmAction.UPDATE,
        "Not authorized to add health records",
        not_found_message="Associated farm not found",
    )

    animal_repo.add_health_record(db, animal, **record_data.model_dump())

    record_activity(
        ActivityCreate(
            type=ActivityType.HEALTH_CHECK,
            action="recorded",
            description=f"Health check recorded for {_label(animal)} - {record_data.type}",
            entity_type=ActivityEntityType.ANIMAL,
            entity_id=animal.id,
            entity_name=animal.name,
            user_id=current_user.id,
            farm_id=farm.id,
            metadata={
                "health_type": record_data.type,
                "veterinarian": record_data.veterinarian,
                "cost": record_data.cost,
            },
        )
    )
    return animal
