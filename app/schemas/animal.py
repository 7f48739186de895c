from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.farm import FarmRef

AnimalType = Literal["cattle", "sheep", "goat", "pig", "chicken", "duck", "turkey", "other"]
Gender = Literal["male", "female"]
AnimalStatus = Literal["healthy", "sick", "quarantine", "sold", "deceased"]
HealthRecordType = Literal["vaccination", "treatment", "checkup"]


class AnimalRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tag_number: str
    name: str | None = None


class HealthRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: date
    type: HealthRecordType
    description: str
    veterinarian: str | None = None
    next_due: date | None = None
    cost: float | None = None


class HealthRecordCreate(BaseModel):
    date: date
    type: HealthRecordType
    description: str = Field(..., min_length=1)
    veterinarian: str | None = None
    next_due: date | None = None
    cost: float | None = Field(None, ge=0)


class Animal(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    farm_id: int
    farm: FarmRef
    tag_number: str
    name: str | None = None
    type: AnimalType
    breed: str
    gender: Gender
    date_of_birth: date
    age: int
    weight: float
    status: AnimalStatus
    health_records: list[HealthRecord] = []
    mother: AnimalRef | None = None
    father: AnimalRef | None = None
    purchase_date: date | None = None
    purchase_price: float | None = None
    purchase_supplier: str | None = None
    sale_date: date | None = None
    sale_price: float | None = None
    sale_buyer: str | None = None
    created_at: datetime
    updated_at: datetime


class AnimalCreate(BaseModel):
    farm_id: int
    tag_number: str = Field(..., min_length=1)
    name: str | None = None
    type: AnimalType
    breed: str = Field(..., min_length=1)
    gender: Gender
    date_of_birth: date
    weight: float = Field(..., ge=0, description="Weight in kg (must be >= 0)")
    status: AnimalStatus = "healthy"
    mother_id: int | None = None
    father_id: int | None = None
    purchase_date: date | None = None
    purchase_price: float | None = Field(None, ge=0)
    purchase_supplier: str | None = None
    sale_date: date | None = None
    sale_price: float | None = Field(None, ge=0)
    sale_buyer: str | None = None

    @field_validator("tag_number", "name", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class AnimalUpdate(BaseModel):
    # Accepted only so that an attempted reassignment can be rejected explicitly
    farm_id: int | None = None
    tag_number: str | None = Field(None, min_length=1)
    name: str | None = None
    type: AnimalType | None = None
    breed: str | None = Field(None, min_length=1)
    gender: Gender | None = None
    date_of_birth: date | None = None
    weight: float | None = Field(None, ge=0)
    status: AnimalStatus | None = None
    mother_id: int | None = None
    father_id: int | None = None
    purchase_date: date | None = None
    purchase_price: float | None = Field(None, ge=0)
    purchase_supplier: str | None = None
    sale_date: date | None = None
    sale_price: float | None = Field(None, ge=0)
    sale_buyer: str | None = None

    @field_validator("tag_number", "name", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class AnimalStats(BaseModel):
    total: int
    healthy: int
    sick: int
    quarantine: int
    health_rate: int
    by_type: dict[str, int]
    last_updated: datetime
