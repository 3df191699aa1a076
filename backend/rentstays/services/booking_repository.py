"""Booking repository: storage and retrieval of booking requests.

Writes go through a compare-and-swap on ``Booking.version`` so two owners
editing the same booking cannot silently overwrite each other; the loser
gets a ConflictError and must re-fetch.  Transition legality is not checked
here, see ``lifecycle``.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rentstays.errors import ConflictError, NotFoundError, ValidationError
from rentstays.models.booking import Booking, BookingStatus, ACTIVE_STATUSES
from rentstays.models.booking_status_change import BookingStatusChange
from rentstays.models.property import Property, PropertyStatus
from rentstays.services import catalog

logger = logging.getLogger(__name__)

REQUIRED_TEXT_FIELDS = ("duration_description", "reason_of_stay", "university_name", "current_address")
MUTABLE_FIELDS = frozenset({"status", "admin_notes", "contract_url"})


def create(
    db: Session,
    property_id: str,
    applicant_id: str,
    duration_description: str,
    reason_of_stay: str,
    university_name: str,
    current_address: str,
) -> Booking:
    """Persist a new request in ``under_review``."""
    prop = catalog.get_property(db, property_id)
    if not prop or prop.status != PropertyStatus.available:
        raise NotFoundError(f"Property {property_id} not found or not available for booking")

    fields = {
        "duration_description": duration_description,
        "reason_of_stay": reason_of_stay,
        "university_name": university_name,
        "current_address": current_address,
    }
    if not applicant_id or not applicant_id.strip():
        raise ValidationError("'applicant_id' is required")
    blank = [name for name in REQUIRED_TEXT_FIELDS if not fields[name] or not fields[name].strip()]
    if blank:
        raise ValidationError(f"Required fields must not be blank: {', '.join(blank)}")

    existing = (
        db.query(Booking)
        .filter(
            Booking.applicant_id == applicant_id,
            Booking.property_id == property_id,
            Booking.status.in_(list(ACTIVE_STATUSES)),
        )
        .first()
    )
    if existing:
        logger.warning(
            "Applicant %s already has active booking %s for property %s",
            applicant_id, existing.id, property_id,
        )
        raise ConflictError(f"An active booking request ({existing.id}) already exists for this property")

    now = datetime.now(timezone.utc)
    booking = Booking(
        property_id=property_id,
        applicant_id=applicant_id,
        status=BookingStatus.under_review,
        version=1,
        created_at=now,
        updated_at=now,
        **fields,
    )
    db.add(booking)
    try:
        db.commit()
    except IntegrityError:
        # uq_bookings_active_applicant_property: a concurrent request won the race
        db.rollback()
        logger.warning("Concurrent duplicate booking by applicant %s for property %s", applicant_id, property_id)
        raise ConflictError("An active booking request already exists for this property")
    db.refresh(booking)
    logger.info("Created booking %s for property %s by applicant %s", booking.id, property_id, applicant_id)
    return booking


def get_by_id(db: Session, booking_id: str) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise NotFoundError(f"Booking {booking_id} not found")
    return booking


def list_by_applicant(db: Session, applicant_id: str) -> list[Booking]:
    return (
        db.query(Booking)
        .filter(Booking.applicant_id == applicant_id)
        .order_by(Booking.created_at.desc())
        .all()
    )


def list_by_owner_properties(db: Session, owner_id: str) -> list[Booking]:
    return (
        db.query(Booking)
        .join(Property, Booking.property_id == Property.id)
        .filter(Property.owner_id == owner_id)
        .order_by(Booking.created_at.desc())
        .all()
    )


def update(
    db: Session,
    booking_id: str,
    patch: dict[str, Any],
    expected_version: Optional[int] = None,
) -> Booking:
    """Apply a partial mutation and commit it.

    ``expected_version`` defaults to the version just read, which still
    catches a concurrent writer that commits between our read and write.
    """
    unknown = set(patch) - MUTABLE_FIELDS
    if unknown:
        raise ValidationError(f"Fields cannot be modified: {', '.join(sorted(unknown))}")

    booking = get_by_id(db, booking_id)
    if expected_version is None:
        expected_version = booking.version

    values = dict(patch)
    values["version"] = expected_version + 1
    values["updated_at"] = datetime.now(timezone.utc)

    matched = (
        db.query(Booking)
        .filter(Booking.id == booking_id, Booking.version == expected_version)
        .update(values, synchronize_session=False)
    )
    if not matched:
        db.rollback()
        logger.warning("Stale write on booking %s (expected version %s)", booking_id, expected_version)
        raise ConflictError(
            f"Booking {booking_id} was modified concurrently (expected version {expected_version}). Re-fetch and retry."
        )

    db.commit()
    db.refresh(booking)
    logger.info("Updated booking %s to version %d", booking_id, booking.version)
    return booking


def history(db: Session, booking_id: str) -> list[BookingStatusChange]:
    return (
        db.query(BookingStatusChange)
        .filter(BookingStatusChange.booking_id == booking_id)
        .order_by(BookingStatusChange.created_at)
        .all()
    )


def status_counts(db: Session, owner_id: str) -> dict[str, int]:
    """Booking counts per status across an owner's properties, zero-filled."""
    rows = (
        db.query(Booking.status, func.count(Booking.id))
        .join(Property, Booking.property_id == Property.id)
        .filter(Property.owner_id == owner_id)
        .group_by(Booking.status)
        .all()
    )
    counts = {status.value: 0 for status in BookingStatus}
    for status, count in rows:
        counts[status.value] = count
    return counts
