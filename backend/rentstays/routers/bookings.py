"""Booking API routes: thin wrappers over the lifecycle engine and repository."""
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from rentstays.database import get_db
from rentstays.errors import ValidationError
from rentstays.schemas.booking import (
    BookingContractUpdate,
    BookingCreate,
    BookingOut,
    BookingStats,
    BookingStatusChangeOut,
    BookingStatusUpdate,
)
from rentstays.services import authorization, booking_repository, catalog, lifecycle
from rentstays.services.activity_feed import get_notification_sink
from rentstays.services.notifications import BackgroundNotificationSink, NotificationSink

router = APIRouter()


def _deferred(background_tasks: BackgroundTasks, sink: NotificationSink) -> NotificationSink:
    return BackgroundNotificationSink(background_tasks, sink)


@router.post("/", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
):
    """Submit a booking request.  It starts out under review."""
    return lifecycle.submit_booking(
        db=db,
        sink=_deferred(background_tasks, sink),
        **payload.model_dump(),
    )


@router.get("/", response_model=list[BookingOut])
def list_bookings(
    actor_id: str = Query(..., description="ID of the user asking"),
    applicant_id: Optional[str] = Query(None),
    owner_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """List an applicant's own requests, or the requests against an owner's properties."""
    if bool(applicant_id) == bool(owner_id):
        raise ValidationError("Pass exactly one of 'applicant_id' or 'owner_id'")
    if applicant_id:
        authorization.ensure_same_actor(actor_id, applicant_id)
        return booking_repository.list_by_applicant(db, applicant_id)
    authorization.ensure_same_actor(actor_id, owner_id)
    return booking_repository.list_by_owner_properties(db, owner_id)


@router.get("/stats", response_model=BookingStats)
def booking_stats(
    owner_id: str = Query(...),
    actor_id: str = Query(...),
    db: Session = Depends(get_db),
):
    """Per-status booking counts and property occupancy for the owner dashboard."""
    authorization.ensure_same_actor(actor_id, owner_id)
    counts = booking_repository.status_counts(db, owner_id)
    return BookingStats(total=sum(counts.values()), by_status=counts, **catalog.occupancy(db, owner_id))


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: str, actor_id: str = Query(...), db: Session = Depends(get_db)):
    booking = booking_repository.get_by_id(db, booking_id)
    authorization.ensure_can_read(db, actor_id, booking)
    return booking


@router.get("/{booking_id}/history", response_model=list[BookingStatusChangeOut])
def get_booking_history(booking_id: str, actor_id: str = Query(...), db: Session = Depends(get_db)):
    """Status changes of a booking, oldest first."""
    booking = booking_repository.get_by_id(db, booking_id)
    authorization.ensure_can_read(db, actor_id, booking)
    return booking_repository.history(db, booking_id)


@router.patch("/{booking_id}/status", response_model=BookingOut)
def update_booking_status(
    booking_id: str,
    payload: BookingStatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
):
    """Approve, reject, request details or confirm (property owner only)."""
    return lifecycle.transition(
        db=db,
        booking_id=booking_id,
        actor_id=payload.actor_id,
        target_status=payload.status,
        notes=payload.notes,
        version=payload.version,
        sink=_deferred(background_tasks, sink),
    )


@router.patch("/{booking_id}/contract", response_model=BookingOut)
def attach_contract(
    booking_id: str,
    payload: BookingContractUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
):
    """Attach or replace the lease contract URL (property owner only)."""
    return lifecycle.attach_contract(
        db=db,
        booking_id=booking_id,
        actor_id=payload.actor_id,
        url=payload.contract_url,
        version=payload.version,
        sink=_deferred(background_tasks, sink),
    )
