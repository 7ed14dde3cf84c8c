# medstock/models/post_contact.py

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from medstock.database import Base


class PostContact(Base):
    __tablename__ = "post_contacts"

    id = Column(Integer, primary_key=True, index=True)
    ambulance_post_id = Column(
        String(50),
        ForeignKey("ambulance_posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    department = Column(String, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    ambulance_post = relationship("AmbulancePost", back_populates="contacts")
