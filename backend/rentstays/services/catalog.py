"""Property catalog store.

The lifecycle engine only reads from here (ownership for authorization,
availability for new bookings).  The write helpers back the small property
management surface owners use to list their rooms.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from rentstays.errors import NotFoundError, ValidationError
from rentstays.models.property import Property, PropertyStatus

logger = logging.getLogger(__name__)


def get_property(db: Session, property_id: str) -> Optional[Property]:
    return db.query(Property).filter(Property.id == property_id).first()


def require_property(db: Session, property_id: str) -> Property:
    prop = get_property(db, property_id)
    if not prop:
        raise NotFoundError(f"Property {property_id} not found")
    return prop


def list_properties(
    db: Session,
    owner_id: Optional[str] = None,
    status: Optional[PropertyStatus] = None,
) -> list[Property]:
    query = db.query(Property)
    if owner_id:
        query = query.filter(Property.owner_id == owner_id)
    if status:
        query = query.filter(Property.status == status)
    return query.order_by(Property.created_at.desc()).all()


def create_property(
    db: Session,
    owner_id: str,
    title: str,
    address: str,
    monthly_price: float,
    city: Optional[str] = None,
    status: PropertyStatus = PropertyStatus.available,
) -> Property:
    """Add a property to the catalog on behalf of its owner."""
    for name, value in (("owner_id", owner_id), ("title", title), ("address", address)):
        if not value or not value.strip():
            raise ValidationError(f"'{name}' must not be blank")
    if monthly_price < 0:
        raise ValidationError("'monthly_price' must not be negative")

    prop = Property(
        owner_id=owner_id,
        title=title,
        address=address,
        city=city,
        monthly_price=monthly_price,
        status=status,
    )
    db.add(prop)
    db.commit()
    db.refresh(prop)
    logger.info("Created property '%s' (%s) for owner %s", title, prop.id, owner_id)
    return prop


def set_property_status(db: Session, prop: Property, status: PropertyStatus) -> Property:
    """Change availability.  Callers check ownership first."""
    prop.status = status
    prop.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(prop)
    logger.info("Property %s is now %s", prop.id, status.value)
    return prop


def occupancy(db: Session, owner_id: str) -> dict[str, int]:
    """Portfolio figures for the owner dashboard.

    ``occupancy_rate`` is the whole-number percentage of occupied properties,
    rounded half up, and 0 for an owner with no properties.
    """
    total = db.query(func.count(Property.id)).filter(Property.owner_id == owner_id).scalar() or 0
    occupied = (
        db.query(func.count(Property.id))
        .filter(Property.owner_id == owner_id, Property.status == PropertyStatus.occupied)
        .scalar()
        or 0
    )
    rate = math.floor(occupied * 100 / total + 0.5) if total else 0
    return {"total_properties": total, "occupied_properties": occupied, "occupancy_rate": rate}
