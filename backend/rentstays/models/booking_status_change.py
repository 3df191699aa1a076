"""BookingStatusChange ORM model: append-only status history of a booking."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum as SAEnum
from rentstays.database import Base
from rentstays.models.booking import BookingStatus


class BookingStatusChange(Base):
    __tablename__ = "booking_status_changes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=False, index=True)
    from_status = Column(SAEnum(BookingStatus), nullable=False)
    to_status = Column(SAEnum(BookingStatus), nullable=False)
    actor_id = Column(String(36), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
