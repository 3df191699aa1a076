"""Pydantic schemas for Bookings."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from rentstays.models.booking import BookingStatus


class BookingCreate(BaseModel):
    property_id: str
    applicant_id: str
    duration_description: str
    reason_of_stay: str
    university_name: str
    current_address: str


class BookingStatusUpdate(BaseModel):
    actor_id: str
    status: str  # validated against BookingStatus by the lifecycle engine
    notes: Optional[str] = None
    version: Optional[int] = None  # optimistic locking, optional


class BookingContractUpdate(BaseModel):
    actor_id: str
    contract_url: str
    version: Optional[int] = None


class PropertySummary(BaseModel):
    id: str
    title: str
    address: str
    monthly_price: float

    model_config = {"from_attributes": True}


class BookingOut(BaseModel):
    id: str
    property_id: str
    applicant_id: str
    status: BookingStatus
    duration_description: str
    reason_of_stay: str
    university_name: str
    current_address: str
    admin_notes: Optional[str] = None
    contract_url: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: datetime
    property: Optional[PropertySummary] = None

    model_config = {"from_attributes": True}


class BookingStatusChangeOut(BaseModel):
    id: str
    booking_id: str
    from_status: BookingStatus
    to_status: BookingStatus
    actor_id: str
    notes: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingStats(BaseModel):
    total: int
    by_status: dict[str, int]
    total_properties: int
    occupied_properties: int
    occupancy_rate: int
