# medstock/models/post_cabinet_order.py

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint

from medstock.database import Base


class PostCabinetOrder(Base):
    """Display order of cabinets per ambulance post."""

    __tablename__ = "post_cabinet_orders"

    id = Column(Integer, primary_key=True, index=True)
    ambulance_post_id = Column(
        String(50),
        ForeignKey("ambulance_posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    cabinet_id = Column(
        String(10),
        ForeignKey("cabinets.id", ondelete="CASCADE"),
        nullable=False,
    )
    position = Column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("ambulance_post_id", "cabinet_id", name="uq_post_cabinet_order"),
    )
