"""BookingRequest ORM model and its closed status enumeration."""
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, Integer, ForeignKey, Index, Enum as SAEnum, text
from sqlalchemy.orm import relationship
from rentstays.database import Base


class BookingStatus(str, enum.Enum):
    under_review = "under_review"
    approved = "approved"
    rejected = "rejected"
    request_additional_details = "request_additional_details"
    confirmed = "confirmed"


TERMINAL_STATUSES = frozenset({BookingStatus.rejected, BookingStatus.confirmed})
ACTIVE_STATUSES = frozenset(set(BookingStatus) - TERMINAL_STATUSES)

# Partial unique index predicate: one active request per (applicant, property).
ACTIVE_STATUS_PREDICATE = text(
    "status IN ('under_review', 'approved', 'request_additional_details')"
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    property_id = Column(String(36), ForeignKey("properties.id"), nullable=False, index=True)
    applicant_id = Column(String(36), nullable=False, index=True)
    status = Column(SAEnum(BookingStatus), nullable=False, default=BookingStatus.under_review)
    duration_description = Column(String(255), nullable=False)
    reason_of_stay = Column(Text, nullable=False)
    university_name = Column(String(255), nullable=False)
    current_address = Column(String(500), nullable=False)
    admin_notes = Column(Text, nullable=True)
    contract_url = Column(String(2048), nullable=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    property = relationship("Property")

    __table_args__ = (
        Index(
            "uq_bookings_active_applicant_property",
            "applicant_id",
            "property_id",
            unique=True,
            sqlite_where=ACTIVE_STATUS_PREDICATE,
            postgresql_where=ACTIVE_STATUS_PREDICATE,
        ),
    )
