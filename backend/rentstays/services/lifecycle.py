"""Booking lifecycle engine: the only place booking status changes.

Flow per call: load -> authorize -> check transition -> persist (with a
history row) -> emit event.  Events go out after the commit and their
delivery can never undo it.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from rentstays.errors import InvalidTransitionError, ValidationError
from rentstays.models.booking import Booking, BookingStatus, TERMINAL_STATUSES
from rentstays.models.booking_status_change import BookingStatusChange
from rentstays.services import authorization, booking_repository
from rentstays.services.notifications import (
    BookingStatusChanged,
    BookingSubmitted,
    ContractAttached,
    NotificationSink,
    deliver,
)

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.under_review: frozenset({
        BookingStatus.approved,
        BookingStatus.rejected,
        BookingStatus.request_additional_details,
    }),
    BookingStatus.request_additional_details: frozenset({
        BookingStatus.approved,
        BookingStatus.rejected,
        BookingStatus.confirmed,
    }),
    BookingStatus.approved: frozenset({BookingStatus.confirmed}),
    BookingStatus.rejected: frozenset(),
    BookingStatus.confirmed: frozenset(),
}

_HTTP_URL = TypeAdapter(AnyHttpUrl)


def is_allowed(current: BookingStatus, target: BookingStatus) -> bool:
    """Table lookup only; same-status no-ops are handled by ``transition``."""
    return target in ALLOWED_TRANSITIONS[current]


def parse_status(value) -> BookingStatus:
    try:
        return BookingStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown booking status: {value!r}")


def submit_booking(
    db: Session,
    property_id: str,
    applicant_id: str,
    duration_description: str,
    reason_of_stay: str,
    university_name: str,
    current_address: str,
    sink: Optional[NotificationSink] = None,
) -> Booking:
    """Create a request in ``under_review`` and announce it."""
    booking = booking_repository.create(
        db,
        property_id=property_id,
        applicant_id=applicant_id,
        duration_description=duration_description,
        reason_of_stay=reason_of_stay,
        university_name=university_name,
        current_address=current_address,
    )
    deliver(sink, BookingSubmitted(
        booking_id=booking.id,
        property_id=booking.property_id,
        applicant_id=booking.applicant_id,
        timestamp=datetime.now(timezone.utc),
    ))
    return booking


def transition(
    db: Session,
    booking_id: str,
    actor_id: str,
    target_status,
    notes: Optional[str] = None,
    version: Optional[int] = None,
    sink: Optional[NotificationSink] = None,
) -> Booking:
    """Move a booking to ``target_status`` on behalf of the property owner.

    Re-setting the current status of a non-terminal booking is a no-op: the
    record comes back untouched and nothing is emitted.  ``notes`` are
    required for ``request_additional_details`` and stored as the booking's
    admin notes; for other targets they only go into the history row.
    """
    booking = booking_repository.get_by_id(db, booking_id)
    authorization.ensure_can_manage(db, actor_id, booking.property_id)

    target = parse_status(target_status)
    current = booking.status

    if target == current and current not in TERMINAL_STATUSES:
        logger.info("Booking %s already %s, nothing to do", booking_id, current.value)
        return booking

    if not is_allowed(current, target):
        logger.warning("Rejected transition %s -> %s on booking %s", current.value, target.value, booking_id)
        raise InvalidTransitionError(current.value, target.value)

    patch = {"status": target}
    if target == BookingStatus.request_additional_details:
        if not notes or not notes.strip():
            raise ValidationError("Notes for the applicant are required when requesting additional details")
        patch["admin_notes"] = notes

    db.add(BookingStatusChange(
        booking_id=booking.id,
        from_status=current,
        to_status=target,
        actor_id=actor_id,
        notes=notes,
    ))
    updated = booking_repository.update(db, booking.id, patch, expected_version=version)
    logger.info("Booking %s moved %s -> %s by %s", booking_id, current.value, target.value, actor_id)

    deliver(sink, BookingStatusChanged(
        booking_id=updated.id,
        from_status=current,
        to_status=target,
        actor_id=actor_id,
        timestamp=datetime.now(timezone.utc),
    ))
    return updated


def attach_contract(
    db: Session,
    booking_id: str,
    actor_id: str,
    url: str,
    version: Optional[int] = None,
    sink: Optional[NotificationSink] = None,
) -> Booking:
    """Set or replace the contract URL.  Allowed at any status, owner only."""
    booking = booking_repository.get_by_id(db, booking_id)
    authorization.ensure_can_manage(db, actor_id, booking.property_id)

    candidate = (url or "").strip()
    if not candidate:
        raise ValidationError("A contract URL is required")
    try:
        _HTTP_URL.validate_python(candidate)
    except PydanticValidationError:
        raise ValidationError(f"Invalid contract URL: {url!r}")

    updated = booking_repository.update(db, booking.id, {"contract_url": candidate}, expected_version=version)
    logger.info("Contract attached to booking %s by %s", booking_id, actor_id)

    deliver(sink, ContractAttached(
        booking_id=updated.id,
        contract_url=candidate,
        actor_id=actor_id,
        timestamp=datetime.now(timezone.utc),
    ))
    return updated
