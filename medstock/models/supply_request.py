# medstock/models/supply_request.py

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from medstock.database import Base


class SupplyRequest(Base):
    """Receipt of a sent restock email. Rows are never updated."""

    __tablename__ = "supply_requests"

    id = Column(Integer, primary_key=True, index=True)

    item_id = Column(
        Integer,
        ForeignKey("medical_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # None for item-level warning emails
    item_location_id = Column(
        Integer,
        ForeignKey("item_locations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    ambulance_post_id = Column(String(50), nullable=True)

    recipient_email = Column(String, nullable=False)
    stock_status = Column(String(20), nullable=False)

    sent_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    item = relationship("MedicalItem", back_populates="supply_requests")

    __table_args__ = (
        Index("ix_supply_requests_item_post", "item_id", "ambulance_post_id"),
    )
