# medstock/models/cabinet.py

from sqlalchemy import CheckConstraint, Column, String, Text
from sqlalchemy.orm import relationship

from medstock.database import Base


class Cabinet(Base):
    __tablename__ = "cabinets"

    id = Column(String(10), primary_key=True)
    name = Column(String(50), nullable=False)
    abbreviation = Column(String(3), nullable=False)
    color = Column(String(20), nullable=False, default="bg-slate-200")
    description = Column(Text, nullable=True)
    location = Column(String, nullable=True)

    drawers = relationship(
        "Drawer",
        back_populates="cabinet",
        cascade="all, delete-orphan",
        order_by="Drawer.id",
    )

    __table_args__ = (
        CheckConstraint("length(abbreviation) <= 3", name="ck_cabinet_abbreviation_length"),
    )
