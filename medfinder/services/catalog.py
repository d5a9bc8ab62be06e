"""Medicine and pharmacy lookups against the catalog tables."""
from __future__ import annotations

from typing import Any, NamedTuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from medfinder import db as db_module
from medfinder.config import Settings
from medfinder.exceptions import NotFoundError, ValidationError
from medfinder.models import Medicine, MedicineInventory, Pharmacy
from medfinder.models.base import utcnow

settings = Settings()


class Location(NamedTuple):
    lat: float
    lng: float


def make_location(lat: float | None, lng: float | None) -> Location | None:
    """Both coordinates or neither."""
    if lat is None and lng is None:
        return None
    if lat is None or lng is None:
        raise ValidationError("lat and lng must be provided together")
    return Location(float(lat), float(lng))


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _squared_distance(location: Location):
    # Planar approximation; good enough to rank nearby stores.
    dlat = Pharmacy.latitude - location.lat
    dlng = Pharmacy.longitude - location.lng
    return dlat * dlat + dlng * dlng


def _order_by_distance(query, location: Location | None):
    if location is None:
        return query
    return query.order_by(
        Pharmacy.latitude.is_(None),
        Pharmacy.longitude.is_(None),
        _squared_distance(location),
    )


def search_medicines_sync(query: str, limit: int | None = None) -> list[Medicine]:
    pattern = _like_pattern(query)
    limit = limit or settings.medicine_result_limit
    with db_module.SessionLocal() as db:
        return (
            db.query(Medicine)
            .filter(
                or_(
                    Medicine.name.ilike(pattern, escape="\\"),
                    Medicine.category.ilike(pattern, escape="\\"),
                    Medicine.manufacturer.ilike(pattern, escape="\\"),
                    Medicine.description.ilike(pattern, escape="\\"),
                )
            )
            .limit(limit)
            .all()
        )


def search_pharmacies_sync(
    query: str,
    location: Location | None = None,
    limit: int | None = None,
) -> list[Pharmacy]:
    """Substring match over name/address; an empty query matches every store."""
    limit = limit or settings.pharmacy_result_limit
    with db_module.SessionLocal() as db:
        q = db.query(Pharmacy)
        if query:
            pattern = _like_pattern(query)
            q = q.filter(
                or_(
                    Pharmacy.name.ilike(pattern, escape="\\"),
                    Pharmacy.address.ilike(pattern, escape="\\"),
                )
            )
        return _order_by_distance(q, location).limit(limit).all()


def get_medicine_sync(medicine_id: str) -> Medicine:
    with db_module.SessionLocal() as db:
        medicine = db.get(Medicine, medicine_id)
    if medicine is None:
        raise NotFoundError("Medicine not found")
    return medicine


def get_pharmacy_sync(pharmacy_id: str) -> Pharmacy:
    with db_module.SessionLocal() as db:
        pharmacy = db.get(Pharmacy, pharmacy_id)
    if pharmacy is None:
        raise NotFoundError("Pharmacy not found")
    return pharmacy


def medicine_availability_sync(
    medicine_id: str,
    location: Location | None = None,
    limit: int | None = None,
) -> list[tuple[MedicineInventory, Pharmacy, Medicine]]:
    """In-stock inventory rows for one medicine, nearest pharmacy first."""
    limit = limit or settings.pharmacy_result_limit
    with db_module.SessionLocal() as db:
        if db.get(Medicine, medicine_id) is None:
            raise NotFoundError("Medicine not found")
        q = (
            db.query(MedicineInventory, Pharmacy, Medicine)
            .join(Pharmacy, MedicineInventory.pharmacy_id == Pharmacy.id)
            .join(Medicine, MedicineInventory.medicine_id == Medicine.id)
            .filter(MedicineInventory.medicine_id == medicine_id, MedicineInventory.stock > 0)
        )
        return [tuple(row) for row in _order_by_distance(q, location).limit(limit).all()]


def create_medicine(db: Session, **fields: Any) -> Medicine:
    medicine = Medicine(**fields)
    db.add(medicine)
    db.flush()
    return medicine


def create_pharmacy(db: Session, **fields: Any) -> Pharmacy:
    pharmacy = Pharmacy(**fields)
    db.add(pharmacy)
    db.flush()
    return pharmacy


def update_inventory(
    db: Session,
    *,
    medicine_id: str,
    pharmacy_id: str,
    price: float,
    stock: int,
) -> MedicineInventory:
    """Create or overwrite the price/stock pair for a medicine at a pharmacy."""
    row = (
        db.query(MedicineInventory)
        .filter_by(medicine_id=medicine_id, pharmacy_id=pharmacy_id)
        .first()
    )
    if row is None:
        row = MedicineInventory(medicine_id=medicine_id, pharmacy_id=pharmacy_id)
        db.add(row)
    row.price = price
    row.stock = stock
    row.last_updated = utcnow()
    db.flush()
    return row


__all__ = [
    "Location",
    "make_location",
    "search_medicines_sync",
    "search_pharmacies_sync",
    "get_medicine_sync",
    "get_pharmacy_sync",
    "medicine_availability_sync",
    "create_medicine",
    "create_pharmacy",
    "update_inventory",
]
