# medstock/models/cabinet_location.py

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint

from medstock.database import Base


class CabinetLocation(Base):
    __tablename__ = "cabinet_locations"

    id = Column(Integer, primary_key=True, index=True)
    cabinet_id = Column(
        String(10),
        ForeignKey("cabinets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    ambulance_post_id = Column(
        String(50),
        ForeignKey("ambulance_posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sub_location = Column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("cabinet_id", "ambulance_post_id", name="uq_cabinet_location_post"),
    )
