"""Activity feed: the notification sink behind the owner dashboard."""
import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from rentstays.config import settings
from rentstays.database import SessionLocal
from rentstays.models.activity import Activity, ActivityType
from rentstays.models.booking import Booking
from rentstays.models.property import Property
from rentstays.services.notifications import (
    BookingEvent,
    BookingStatusChanged,
    BookingSubmitted,
    ContractAttached,
    NotificationSink,
)

logger = logging.getLogger(__name__)


def _humanize(status) -> str:
    return status.value.replace("_", " ")


class ActivityFeedSink(NotificationSink):
    """Persists every event as an Activity row.

    Uses its own session: it runs after the request that produced the event
    has already closed its one.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def publish(self, event: BookingEvent) -> None:
        db = self.session_factory()
        try:
            booking = db.query(Booking).filter(Booking.id == event.booking_id).first()
            property_id = booking.property_id if booking else None
            activity = self._to_activity(event, property_id)
            db.add(activity)
            db.commit()
            logger.info("Recorded %s activity for booking %s", activity.type.value, event.booking_id)
        finally:
            db.close()

    @staticmethod
    def _to_activity(event: BookingEvent, property_id) -> Activity:
        if isinstance(event, BookingSubmitted):
            return Activity(
                type=ActivityType.booking_submitted,
                title="New booking request",
                description=f"Applicant {event.applicant_id} submitted a booking request",
                booking_id=event.booking_id,
                property_id=event.property_id,
                actor_id=event.applicant_id,
                created_at=event.timestamp,
            )
        if isinstance(event, BookingStatusChanged):
            return Activity(
                type=ActivityType.booking_status_changed,
                title=f"Booking {_humanize(event.to_status)}",
                description=f"Status changed from {_humanize(event.from_status)} to {_humanize(event.to_status)}",
                booking_id=event.booking_id,
                property_id=property_id,
                actor_id=event.actor_id,
                created_at=event.timestamp,
            )
        if isinstance(event, ContractAttached):
            return Activity(
                type=ActivityType.contract_attached,
                title="Contract uploaded",
                description=event.contract_url,
                booking_id=event.booking_id,
                property_id=property_id,
                actor_id=event.actor_id,
                created_at=event.timestamp,
            )
        raise TypeError(f"Unsupported event: {type(event).__name__}")


def get_notification_sink() -> NotificationSink:
    """FastAPI dependency: overridden in tests to point at the test database."""
    return ActivityFeedSink(SessionLocal)


def list_for_owner(db: Session, owner_id: str, limit: Optional[int] = None) -> list[Activity]:
    """Newest-first activities on the owner's properties."""
    return (
        db.query(Activity)
        .join(Property, Activity.property_id == Property.id)
        .filter(Property.owner_id == owner_id)
        .order_by(Activity.created_at.desc())
        .limit(limit or settings.ACTIVITY_FEED_LIMIT)
        .all()
    )
