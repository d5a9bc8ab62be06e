"""Response bodies shared by several routers (camelCase on the wire)."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MedicineOut(CamelModel):
    id: str
    name: str
    generic_name: str | None = None
    category: str
    description: str | None = None
    dosage: str | None = None
    manufacturer: str | None = None
    created_at: datetime | None = None


class PharmacyOut(CamelModel):
    id: str
    name: str
    address: str
    phone: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    rating: float | None = None
    review_count: int | None = None
    is_open: bool | None = None
    open_time: str | None = None
    close_time: str | None = None
    delivery_available: bool | None = None
    created_at: datetime | None = None


class AvailabilityOut(CamelModel):
    id: str
    medicine_id: str
    pharmacy_id: str
    price: float
    stock: int
    last_updated: datetime | None = None
    pharmacy: PharmacyOut
    medicine: MedicineOut


class ChatMessageOut(CamelModel):
    id: str
    user_id: str | None = None
    session_id: str | None = None
    message: str
    is_from_bot: bool
    created_at: datetime


class QuotaOut(CamelModel):
    unlimited: bool
    remaining_chats: int | None = None
    is_limit_reached: bool
    week_start: datetime | None = None
