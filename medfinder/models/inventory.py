from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import Base, new_id, utcnow


class MedicineInventory(Base):
    """Stock and price of one medicine at one pharmacy."""

    __tablename__ = "medicine_inventory"
    __table_args__ = (
        UniqueConstraint("medicine_id", "pharmacy_id", name="uq_inventory_medicine_pharmacy"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    medicine_id = Column(String(36), ForeignKey("medicines.id"), nullable=False, index=True)
    pharmacy_id = Column(String(36), ForeignKey("pharmacies.id"), nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    stock = Column(Integer, nullable=False, server_default="0")
    last_updated = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    medicine = relationship("Medicine", back_populates="inventory")
    pharmacy = relationship("Pharmacy", back_populates="inventory")


__all__ = ["MedicineInventory"]
