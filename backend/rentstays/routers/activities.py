"""Activity feed API routes."""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rentstays.database import get_db
from rentstays.schemas.activity import ActivityOut
from rentstays.services import activity_feed, authorization

router = APIRouter()


@router.get("/", response_model=list[ActivityOut])
def list_activities(
    owner_id: str = Query(...),
    actor_id: str = Query(...),
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Recent booking activity on the owner's properties, newest first."""
    authorization.ensure_same_actor(actor_id, owner_id)
    return activity_feed.list_for_owner(db, owner_id, limit=limit)
