# medstock/schemas/item_location.py

from datetime import datetime
from typing import Literal

from pydantic import Field

from medstock.schemas.base import RequestModel, ResponseModel


StockStatus = Literal["in-stock", "low-stock", "out-of-stock"]


class ItemLocationInput(RequestModel):
    """A location given inline when creating an item."""

    ambulance_post_id: str = Field(..., min_length=1)
    cabinet_id: str = Field(..., min_length=1, max_length=10)
    drawer_id: int | None = None
    stock_status: StockStatus = "in-stock"
    contact_person_id: int | None = None


class ItemLocationCreate(ItemLocationInput):
    item_id: int


class ItemLocationUpdate(RequestModel):
    cabinet_id: str | None = Field(None, min_length=1, max_length=10)
    drawer_id: int | None = None
    contact_person_id: int | None = None
    stock_status: StockStatus | None = None


class StockStatusUpdate(RequestModel):
    stock_status: StockStatus


class ItemLocationResponse(ResponseModel):
    id: int
    item_id: int
    ambulance_post_id: str
    cabinet_id: str
    drawer_id: int | None
    stock_status: StockStatus
    contact_person_id: int | None
    status_changed_at: datetime | None
    created_at: datetime | None

    needs_supply: bool
    has_contact: bool

    # Latest restock email sent during the current low/out-of-stock episode
    supply_requested_at: datetime | None = None
