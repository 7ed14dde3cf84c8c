# medstock/models/category.py

from sqlalchemy import Column, Integer, String

from medstock.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    icon = Column(String, nullable=False, default="📦")
