"""Activity ORM model: rows shown in the owner's activity feed."""
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, Enum as SAEnum
from rentstays.database import Base


class ActivityType(str, enum.Enum):
    booking_submitted = "booking_submitted"
    booking_status_changed = "booking_status_changed"
    contract_attached = "contract_attached"


class Activity(Base):
    __tablename__ = "activities"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    type = Column(SAEnum(ActivityType), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    booking_id = Column(String(36), nullable=True, index=True)
    property_id = Column(String(36), nullable=True, index=True)
    actor_id = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
