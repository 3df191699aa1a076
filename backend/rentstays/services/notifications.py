"""Lifecycle event contract and the sink plumbing around it.

Delivery is at-most-once and best effort: a sink that blows up is logged
and ignored, the booking change it describes stays committed.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from fastapi import BackgroundTasks

from rentstays.models.booking import BookingStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingSubmitted:
    booking_id: str
    property_id: str
    applicant_id: str
    timestamp: datetime


@dataclass(frozen=True)
class BookingStatusChanged:
    booking_id: str
    from_status: BookingStatus
    to_status: BookingStatus
    actor_id: str
    timestamp: datetime


@dataclass(frozen=True)
class ContractAttached:
    booking_id: str
    contract_url: str
    actor_id: str
    timestamp: datetime


BookingEvent = Union[BookingSubmitted, BookingStatusChanged, ContractAttached]


class NotificationSink:
    """Receives booking lifecycle events."""

    def publish(self, event: BookingEvent) -> None:
        raise NotImplementedError


class BackgroundNotificationSink(NotificationSink):
    """Defers delivery to a wrapped sink until after the HTTP response is sent."""

    def __init__(self, background_tasks: BackgroundTasks, delegate: NotificationSink):
        self.background_tasks = background_tasks
        self.delegate = delegate

    def publish(self, event: BookingEvent) -> None:
        self.background_tasks.add_task(deliver, self.delegate, event)


def deliver(sink: Optional[NotificationSink], event: BookingEvent) -> None:
    """Hand ``event`` to ``sink``, swallowing (and logging) any failure."""
    if sink is None:
        return
    try:
        sink.publish(event)
    except Exception:
        logger.exception("Failed to deliver %s for booking %s", type(event).__name__, event.booking_id)
