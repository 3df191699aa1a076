"""Property catalog API routes."""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rentstays.database import get_db
from rentstays.models.property import PropertyStatus
from rentstays.schemas.property import PropertyCreate, PropertyOut, PropertyStatusUpdate
from rentstays.services import authorization, catalog

router = APIRouter()


@router.post("/", response_model=PropertyOut, status_code=status.HTTP_201_CREATED)
def create_property(payload: PropertyCreate, db: Session = Depends(get_db)):
    """List a new property under the given owner."""
    return catalog.create_property(db=db, **payload.model_dump())


@router.get("/", response_model=list[PropertyOut])
def list_properties(
    owner_id: Optional[str] = Query(None),
    status_filter: Optional[PropertyStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    """List properties, optionally filtered by owner or availability."""
    return catalog.list_properties(db, owner_id=owner_id, status=status_filter)


@router.get("/{property_id}", response_model=PropertyOut)
def get_property(property_id: str, db: Session = Depends(get_db)):
    return catalog.require_property(db, property_id)


@router.patch("/{property_id}/status", response_model=PropertyOut)
def update_property_status(property_id: str, payload: PropertyStatusUpdate, db: Session = Depends(get_db)):
    """Change availability (owner only)."""
    prop = catalog.require_property(db, property_id)
    authorization.ensure_can_manage(db, payload.actor_id, property_id)
    return catalog.set_property_status(db, prop, payload.status)
