from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from .base import Base, new_id, utcnow


class Medicine(Base):
    __tablename__ = "medicines"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    generic_name = Column(String)
    category = Column(String, nullable=False)
    description = Column(Text)
    dosage = Column(String)
    manufacturer = Column(String)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    inventory = relationship("MedicineInventory", back_populates="medicine")


__all__ = ["Medicine"]
