# medstock/routers/supply_requests.py
#
# Restock emails. Every send is rate limited; the transport is injected so
# the configured SMTP / relay / log-only choice stays out of the handlers.

from fastapi import APIRouter, Depends, Query, Request, status

from medstock.core.email import EmailTransport, get_email_transport
from medstock.core.rate_limiter import limiter
from medstock.models.item_location import LOW_STOCK, OUT_OF_STOCK
from medstock.schemas.supply_request import (
    MarkStockRequest,
    MarkStockResult,
    SupplyRequestResponse,
    SupplyRequestResult,
)
from medstock.services import notifications
from medstock.services.storage import InventoryStorage, get_storage

router = APIRouter(prefix="/api", tags=["Supply requests"])


@router.get("/supply-requests", response_model=list[SupplyRequestResponse])
def list_supply_requests(
    item_id: int | None = Query(None, alias="itemId"),
    ambulance_post: str | None = Query(None, alias="ambulancePost"),
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.list_supply_requests(item_id=item_id, ambulance_post_id=ambulance_post)


@router.post(
    "/supply-request/{location_id}",
    response_model=SupplyRequestResult,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("10/minute")
def send_supply_request(
    request: Request,
    location_id: int,
    storage: InventoryStorage = Depends(get_storage),
    transport: EmailTransport = Depends(get_email_transport),
):
    notification = notifications.send_supply_request(storage, transport, location_id)

    return {
        "success": True,
        "message": f"Supply request sent to {notification.recipient_email}",
        "notification": notification,
    }


@router.post(
    "/send-warning-email/{item_id}",
    response_model=SupplyRequestResult,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("10/minute")
def send_warning_email(
    request: Request,
    item_id: int,
    storage: InventoryStorage = Depends(get_storage),
    transport: EmailTransport = Depends(get_email_transport),
):
    notification = notifications.send_item_warning_email(storage, transport, item_id)

    return {
        "success": True,
        "message": f"Warning email sent to {notification.recipient_email}",
        "notification": notification,
    }


def _mark(storage, transport, item_id, stock_status, body: MarkStockRequest | None):
    body = body or MarkStockRequest()

    location, notification = notifications.mark_location_status(
        storage,
        transport,
        item_id,
        stock_status,
        ambulance_post_id=body.ambulance_post_id,
        location_id=body.location_id,
    )

    if notification is None:
        message = "Status updated; no contact person configured, no email sent"
    else:
        message = f"Status updated and supply request sent to {notification.recipient_email}"

    return {
        "location": storage.location_view(location),
        "email_sent": notification is not None,
        "message": message,
        "notification": notification,
    }


@router.post("/items/{item_id}/mark-out-of-stock", response_model=MarkStockResult)
@limiter.limit("10/minute")
def mark_out_of_stock(
    request: Request,
    item_id: int,
    body: MarkStockRequest | None = None,
    storage: InventoryStorage = Depends(get_storage),
    transport: EmailTransport = Depends(get_email_transport),
):
    return _mark(storage, transport, item_id, OUT_OF_STOCK, body)


@router.post("/items/{item_id}/mark-low-stock", response_model=MarkStockResult)
@limiter.limit("10/minute")
def mark_low_stock(
    request: Request,
    item_id: int,
    body: MarkStockRequest | None = None,
    storage: InventoryStorage = Depends(get_storage),
    transport: EmailTransport = Depends(get_email_transport),
):
    return _mark(storage, transport, item_id, LOW_STOCK, body)
