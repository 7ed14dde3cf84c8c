# medstock/models/ambulance_post.py

from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from medstock.database import Base


class AmbulancePost(Base):
    __tablename__ = "ambulance_posts"

    # Chosen by the user, e.g. "hilversum"
    id = Column(String(50), primary_key=True)
    name = Column(String, nullable=False)
    location = Column(String, nullable=True)
    description = Column(Text, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    contacts = relationship(
        "PostContact",
        back_populates="ambulance_post",
        cascade="all, delete-orphan",
    )
