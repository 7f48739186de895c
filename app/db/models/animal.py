from datetime import date

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base, utcnow


class Animal(Base):
    __tablename__ = "animals"

    id = Column(Integer, primary_key=True, index=True)
    farm_id = Column(Integer, ForeignKey("farms.id"), nullable=False, index=True)
    tag_number = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=True)
    type = Column(String, nullable=False)
    breed = Column(String, nullable=False)
    gender = Column(String, nullable=False)
    date_of_birth = Column(Date, nullable=False)
    weight = Column(Float, nullable=False)
    status = Column(String, nullable=False, default="healthy")
    mother_id = Column(Integer, ForeignKey("animals.id", ondelete="SET NULL"), nullable=True)
    father_id = Column(Integer, ForeignKey("animals.id", ondelete="SET NULL"), nullable=True)
    purchase_date = Column(Date, nullable=True)
    purchase_price = Column(Float, nullable=True)
    purchase_supplier = Column(String, nullable=True)
    sale_date = Column(Date, nullable=True)
    sale_price = Column(Float, nullable=True)
    sale_buyer = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    farm = relationship("Farm", backref="animals")
    mother = relationship("Animal", remote_side=[id], foreign_keys=[mother_id])
    father = relationship("Animal", remote_side=[id], foreign_keys=[father_id])
    health_records = relationship(
        "HealthRecord",
        back_populates="animal",
        cascade="all, delete-orphan",
        order_by="HealthRecord.date",
    )

    @property
    def age(self) -> int:
        """Age in whole years as of today."""
        today = date.today()
        born = self.date_of_birth
        years = today.year - born.year
        if (today.month, today.day) < (born.month, born.day):
            years -= 1
        return max(years, 0)


class HealthRecord(Base):
    __tablename__ = "health_records"

    id = Column(Integer, primary_key=True, index=True)
    animal_id = Column(
        Integer, ForeignKey("animals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date = Column(Date, nullable=False)
    type = Column(String, nullable=False)
    description = Column(String, nullable=False)
    veterinarian = Column(String, nullable=True)
    next_due = Column(Date, nullable=True)
    cost = Column(Float, nullable=True)

    animal = relationship("Animal", back_populates="health_records")
