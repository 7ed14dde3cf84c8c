# medstock/models/drawer.py

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from medstock.database import Base


class Drawer(Base):
    __tablename__ = "drawers"

    id = Column(Integer, primary_key=True, index=True)
    cabinet_id = Column(
        String(10),
        ForeignKey("cabinets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String, nullable=False)

    # "boven", "onder", "links", "rechts", "midden"
    position = Column(String, nullable=True)
    drawer_number = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)

    cabinet = relationship("Cabinet", back_populates="drawers")
