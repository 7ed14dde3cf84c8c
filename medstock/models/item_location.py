# medstock/models/item_location.py

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from medstock.database import Base


IN_STOCK = "in-stock"
LOW_STOCK = "low-stock"
OUT_OF_STOCK = "out-of-stock"

STOCK_STATUSES = (IN_STOCK, LOW_STOCK, OUT_OF_STOCK)


class ItemLocation(Base):
    __tablename__ = "item_locations"

    id = Column(Integer, primary_key=True, index=True)

    item_id = Column(
        Integer,
        ForeignKey("medical_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    ambulance_post_id = Column(
        String(50),
        ForeignKey("ambulance_posts.id"),
        nullable=False,
        index=True,
    )
    cabinet_id = Column(
        String(10),
        ForeignKey("cabinets.id"),
        nullable=False,
        index=True,
    )
    drawer_id = Column(
        Integer,
        ForeignKey("drawers.id", ondelete="SET NULL"),
        nullable=True,
    )

    stock_status = Column(String(20), nullable=False, default=IN_STOCK)

    contact_person_id = Column(
        Integer,
        ForeignKey("post_contacts.id", ondelete="SET NULL"),
        nullable=True,
    )

    status_changed_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Start of the current low/out-of-stock episode, None while in stock
    supply_episode_started_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    item = relationship("MedicalItem", back_populates="locations")
    ambulance_post = relationship("AmbulancePost")
    cabinet = relationship("Cabinet")
    drawer = relationship("Drawer")
    contact_person = relationship("PostContact")

    __table_args__ = (
        Index("ix_item_locations_post_cabinet", "ambulance_post_id", "cabinet_id"),
        CheckConstraint(
            "stock_status IN ('in-stock', 'low-stock', 'out-of-stock')",
            name="ck_item_location_stock_status_valid",
        ),
    )
