"""Pydantic schemas for Properties."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from rentstays.models.property import PropertyStatus


class PropertyCreate(BaseModel):
    owner_id: str
    title: str
    address: str
    city: Optional[str] = None
    monthly_price: float
    status: PropertyStatus = PropertyStatus.available


class PropertyStatusUpdate(BaseModel):
    actor_id: str
    status: PropertyStatus


class PropertyOut(BaseModel):
    id: str
    owner_id: str
    title: str
    address: str
    city: Optional[str] = None
    monthly_price: float
    status: PropertyStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
