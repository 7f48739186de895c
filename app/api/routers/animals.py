from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_activity_recorder, get_current_user, get_db
from app.db.models.user import User as UserModel
from app.schemas.animal import (
    Animal,
    AnimalCreate,
    AnimalStats,
    AnimalStatus,
    AnimalType,
    AnimalUpdate,
    HealthRecordCreate,
)
from app.schemas.pagination import ApiResponse, ListResponse
from app.services import animal as animal_service
from app.services.activity import ActivityRecorder

router = APIRouter(prefix="/animals", tags=["animals"])


@router.get("", response_model=ListResponse[Animal])
def list_animals(
    farm_id: int | None = Query(None, description="Farm to list animals from"),
    animal_type: AnimalType | None = Query(None, alias="type", description="Filter by animal type"),
    animal_status: AnimalStatus | None = Query(
        None, alias="status", description="Filter by health status"
    ),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """
    List animals, newest first.
    - farm_id given: any member of the farm
    - farm_id omitted: admins only (every farm); others get 400
    """
    animals = animal_service.list_animals(
        db, current_user, farm_id=farm_id, animal_type=animal_type, status=animal_status
    )
    return ListResponse(
        count=len(animals), data=[Animal.model_validate(animal) for animal in animals]
    )


@router.get("/farms/{farm_id}/stats", response_model=ApiResponse[AnimalStats])
def get_animal_stats(
    farm_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    stats = animal_service.get_animal_stats(db, farm_id, current_user)
    return ApiResponse(data=AnimalStats(**stats))


@router.get("/{animal_id}", response_model=ApiResponse[Animal])
def get_animal(
    animal_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    animal = animal_service.get_animal(db, animal_id, current_user)
    return ApiResponse(data=Animal.model_validate(animal))


@router.post("", response_model=ApiResponse[Animal], status_code=status.HTTP_201_CREATED)
def create_animal(
    animal_data: AnimalCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    record_activity: ActivityRecorder = Depends(get_activity_recorder),
):
    """Add an animal to a farm. Farm owner, managers or admin."""
    animal = animal_service.create_animal(db, animal_data, current_user, record_activity)
    return ApiResponse(data=Animal.model_validate(animal))


@router.put("/{animal_id}", response_model=ApiResponse[Animal])
def update_animal(
    animal_id: int,
    animal_data: AnimalUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    record_activity: ActivityRecorder = Depends(get_activity_recorder),
):
    """Update an animal. Farm owner, managers or admin. The farm cannot change."""
    animal = animal_service.update_animal(
        db, animal_id, animal_data, current_user, record_activity
    )
    return ApiResponse(data=Animal.model_validate(animal))


@router.delete("/{animal_id}", response_model=ApiResponse[dict])
def delete_animal(
    animal_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Delete an animal. Farm owner or admin only."""
    animal_service.delete_animal(db, animal_id, current_user)
    return ApiResponse(data={})


@router.post("/{animal_id}/health-records", response_model=ApiResponse[Animal])
def add_health_record(
    animal_id: int,
    record_data: HealthRecordCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    record_activity: ActivityRecorder = Depends(get_activity_recorder),
):
    """Append a health record to an animal. Farm owner, managers or admin."""
    animal = animal_service.add_health_record(
        db, animal_id, record_data, current_user, record_activity
    )
    return ApiResponse(data=Animal.model_validate(animal))
