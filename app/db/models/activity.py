from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base, utcnow


class Activity(Base):
    """Append-only audit record of a state-changing action on a farm."""

    __tablename__ = "activities"
    __table_args__ = (
        Index("ix_activities_farm_id_created_at", "farm_id", "created_at"),
        Index("ix_activities_user_id_created_at", "user_id", "created_at"),
        Index("ix_activities_entity", "entity_type", "entity_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String, nullable=False)
    action = Column(String, nullable=False)
    description = Column(String, nullable=False)
    entity_type = Column(String, nullable=False)
    entity_id = Column(Integer, nullable=False)
    entity_name = Column(String, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    farm_id = Column(Integer, ForeignKey("farms.id"), nullable=False)
    # "metadata" is reserved on declarative classes
    metadata_ = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    user = relationship("User")
    farm = relationship("Farm")
