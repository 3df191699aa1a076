"""Property ORM model: the catalog records applicants book against."""
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Float, Enum as SAEnum
from rentstays.database import Base


class PropertyStatus(str, enum.Enum):
    available = "available"
    occupied = "occupied"
    maintenance = "maintenance"
    reserved = "reserved"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Property(Base):
    __tablename__ = "properties"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(36), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    address = Column(String(500), nullable=False)
    city = Column(String(120), nullable=True)
    monthly_price = Column(Float, nullable=False)
    status = Column(SAEnum(PropertyStatus), nullable=False, default=PropertyStatus.available)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
