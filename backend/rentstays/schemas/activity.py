"""Pydantic schemas for the activity feed."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from rentstays.models.activity import ActivityType


class ActivityOut(BaseModel):
    id: str
    type: ActivityType
    title: str
    description: Optional[str] = None
    booking_id: Optional[str] = None
    property_id: Optional[str] = None
    actor_id: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
