from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models.animal import Animal as AnimalModel
from app.db.models.animal import HealthRecord as HealthRecordModel
from app.errors import DuplicateResourceError, NotFoundError

TAG_NUMBER_EXISTS = "Tag number already exists"

_UPDATABLE_FIELDS = (
    "tag_number",
    "name",
    "type",
    "breed",
    "gender",
    "date_of_birth",
    "weight",
    "status",
    "mother_id",
    "father_id",
    "purchase_date",
    "purchase_price",
    "purchase_supplier",
    "sale_date",
    "sale_price",
    "sale_buyer",
)


def get_animal_by_id(db: Session, animal_id: int) -> AnimalModel | None:
    """Get an animal by ID."""
    return db.query(AnimalModel).filter(AnimalModel.id == animal_id).first()


def get_animal_by_tag_number(
    db: Session, tag_number: str, exclude_id: int | None = None
) -> AnimalModel | None:
    """Get an animal by tag number (unique across all farms)."""
    query = db.query(AnimalModel).filter(AnimalModel.tag_number == tag_number)
    if exclude_id is not None:
        query = query.filter(AnimalModel.id != exclude_id)
    return query.first()


def get_animals(
    db: Session,
    farm_id: int | None = None,
    animal_type: str | None = None,
    status: str | None = None,
) -> list[AnimalModel]:
    """Get animals, newest first, with optional farm/type/status filters."""
    query = db.query(AnimalModel)
    if farm_id is not None:
        query = query.filter(AnimalModel.farm_id == farm_id)
    if animal_type is not None:
        query = query.filter(AnimalModel.type == animal_type)
    if status is not None:
        query = query.filter(AnimalModel.status == status)
    return query.order_by(AnimalModel.created_at.desc(), AnimalModel.id.desc()).all()


def _commit_unique(db: Session) -> None:
    # The pre-insert lookup can race with a concurrent insert; the unique index decides.
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateResourceError(TAG_NUMBER_EXISTS) from exc


def create_animal(db: Session, farm_id: int, tag_number: str, **fields) -> AnimalModel:
    """Create a new animal in the database.

    Raises:
        DuplicateResourceError: If the tag number is already in use
    """
    if get_animal_by_tag_number(db, tag_number):
        raise DuplicateResourceError(TAG_NUMBER_EXISTS)

    db_animal = AnimalModel(farm_id=farm_id, tag_number=tag_number, **fields)
    db.add(db_animal)
    _commit_unique(db)
    db.refresh(db_animal)
    return db_animal


def update_animal(db: Session, animal_id: int, **kwargs) -> AnimalModel:
    """
    Update an animal. Only updates fields that are explicitly provided.

    To clear a nullable field, explicitly pass it with None value.
    The owning farm is never updated here.
    """
    animal = get_animal_by_id(db, animal_id)
    if not animal:
        raise NotFoundError("Animal not found")

    new_tag = kwargs.get("tag_number")
    if new_tag is not None and get_animal_by_tag_number(db, new_tag, exclude_id=animal_id):
        raise DuplicateResourceError(TAG_NUMBER_EXISTS)

    for field in _UPDATABLE_FIELDS:
        if field in kwargs:
            setattr(animal, field, kwargs[field])

    _commit_unique(db)
    db.refresh(animal)
    return animal


def delete_animal(db: Session, animal_id: int) -> None:
    """Delete an animal (and its health records) from the database."""
    animal = get_animal_by_id(db, animal_id)
    if not animal:
        raise NotFoundError("Animal not found")

    db.delete(animal)
    db.commit()


def add_health_record(db: Session, animal: AnimalModel, **fields) -> HealthRecordModel:
    """Append a health record to an animal."""
    record = HealthRecordModel(animal_id=animal.id, **fields)
    db.add(record)
    db.commit()
    db.refresh(record)
    db.refresh(animal)
    return record
