# medstock/schemas/item.py

from datetime import date, datetime
from typing import List

from pydantic import EmailStr, Field

from medstock.schemas.base import RequestModel, ResponseModel
from medstock.schemas.item_location import ItemLocationInput


class ItemCreate(RequestModel):
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    description: str | None = None
    expiry_date: date | None = None
    alert_email: EmailStr | None = None
    photo_url: str | None = None
    is_discontinued: bool = False
    replacement_item_id: int | None = None

    locations: List[ItemLocationInput] = []


class ItemUpdate(RequestModel):
    name: str | None = Field(None, min_length=1)
    category: str | None = Field(None, min_length=1)
    description: str | None = None
    expiry_date: date | None = None
    alert_email: EmailStr | None = None
    photo_url: str | None = None
    is_discontinued: bool | None = None
    replacement_item_id: int | None = None


class ItemResponse(ResponseModel):
    id: int
    name: str
    category: str
    description: str | None
    expiry_date: date | None
    alert_email: str | None
    photo_url: str | None
    is_discontinued: bool
    replacement_item_id: int | None
    created_at: datetime | None
