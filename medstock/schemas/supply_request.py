# medstock/schemas/supply_request.py

from datetime import datetime

from pydantic import EmailStr

from medstock.schemas.base import RequestModel, ResponseModel
from medstock.schemas.item_location import ItemLocationResponse


class SupplyRequestResponse(ResponseModel):
    id: int
    item_id: int
    item_location_id: int | None
    ambulance_post_id: str | None
    recipient_email: str
    stock_status: str
    sent_at: datetime


class SupplyRequestResult(ResponseModel):
    success: bool
    message: str
    notification: SupplyRequestResponse


class MarkStockRequest(RequestModel):
    """Pick the location by id, or by post when the item has one location there."""

    ambulance_post_id: str | None = None
    location_id: int | None = None


class MarkStockResult(ResponseModel):
    location: ItemLocationResponse
    email_sent: bool
    message: str
    notification: SupplyRequestResponse | None = None


class EmailTestRequest(RequestModel):
    to: EmailStr


class EmailConfigResponse(ResponseModel):
    transport: str
    from_email: str
    from_name: str
    smtp_host: str | None
    smtp_port: int
    relay_configured: bool
