"""Authorization guard.

There is no platform-wide admin: an actor manages a booking only by owning
the booking's property, and reads it only as that owner or as the applicant
who filed it.
"""
import logging

from sqlalchemy.orm import Session

from rentstays.errors import ForbiddenError
from rentstays.models.booking import Booking
from rentstays.services import catalog

logger = logging.getLogger(__name__)


def can_manage(db: Session, actor_id: str, property_id: str) -> bool:
    """True iff ``actor_id`` owns the property.  Unknown properties are never manageable."""
    prop = catalog.get_property(db, property_id)
    return prop is not None and prop.owner_id == actor_id


def ensure_can_manage(db: Session, actor_id: str, property_id: str) -> None:
    if not can_manage(db, actor_id, property_id):
        logger.warning("Actor %s denied management of property %s", actor_id, property_id)
        raise ForbiddenError("Only the property owner may manage this booking")


def ensure_can_read(db: Session, actor_id: str, booking: Booking) -> None:
    if actor_id == booking.applicant_id or can_manage(db, actor_id, booking.property_id):
        return
    logger.warning("Actor %s denied read access to booking %s", actor_id, booking.id)
    raise ForbiddenError("Only the applicant or the property owner may view this booking")


def ensure_same_actor(actor_id: str, subject_id: str) -> None:
    """Listings are scoped to the caller: applicants see their own, owners theirs."""
    if actor_id != subject_id:
        logger.warning("Actor %s tried to list records of %s", actor_id, subject_id)
        raise ForbiddenError("You may only list your own records")
