# medstock/models/item.py

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from medstock.database import Base


class MedicalItem(Base):
    __tablename__ = "medical_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    # Category is referenced by name, not by foreign key
    category = Column(String, nullable=False, index=True)

    expiry_date = Column(Date, nullable=True)
    alert_email = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)

    is_discontinued = Column(Boolean, default=False, nullable=False)
    replacement_item_id = Column(
        Integer,
        ForeignKey("medical_items.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    locations = relationship(
        "ItemLocation",
        back_populates="item",
        cascade="all, delete-orphan",
    )

    supply_requests = relationship(
        "SupplyRequest",
        back_populates="item",
        cascade="all, delete-orphan",
    )
