from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import Base, new_id, utcnow


class Pharmacy(Base):
    __tablename__ = "pharmacies"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    address = Column(Text, nullable=False)
    phone = Column(String)
    latitude = Column(Float)
    longitude = Column(Float)
    rating = Column(Float)
    review_count = Column(Integer, default=0)
    is_open = Column(Boolean, default=True)
    open_time = Column(String)
    close_time = Column(String)
    delivery_available = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    inventory = relationship("MedicineInventory", back_populates="pharmacy")


__all__ = ["Pharmacy"]
