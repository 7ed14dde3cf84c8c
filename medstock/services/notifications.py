"""Restock emails for item locations that are low or out of stock."""
from datetime import datetime
import html
import logging

from medstock.core.email import EmailTransport, OutgoingEmail
from medstock.core.exceptions import DeliveryError, NotFoundError, ValidationError
from medstock.models.item import MedicalItem
from medstock.models.item_location import IN_STOCK, OUT_OF_STOCK, ItemLocation
from medstock.models.supply_request import SupplyRequest
from medstock.services.storage import InventoryStorage, needs_supply, utcnow

logger = logging.getLogger("medstock")


URGENT_COLOR = "#dc2626"
LOW_COLOR = "#f59e0b"

STATUS_LABELS = {
    "in-stock": "Op voorraad",
    "low-stock": "Bijna op",
    "out-of-stock": "Niet meer aanwezig",
}


def compose_supply_request_email(
    item: MedicalItem,
    location: ItemLocation | None,
    recipient_name: str | None = None,
    stock_status: str | None = None,
    now: datetime | None = None,
) -> tuple[str, str, str]:
    """Return (subject, html, text) for a restock email."""
    stock_status = stock_status or (location.stock_status if location else OUT_OF_STOCK)
    now = now or utcnow()
    urgent = stock_status == OUT_OF_STOCK

    if urgent:
        subject = f"URGENT: {item.name} is niet meer aanwezig"
        color = URGENT_COLOR
        notice = "Het volgende item is op en moet dringend worden aangevuld."
    else:
        subject = f"Aanvulverzoek: {item.name} is bijna op"
        color = LOW_COLOR
        notice = "Het volgende item is bijna op en moet binnenkort worden aangevuld."

    if location is not None:
        post_name = location.ambulance_post.name if location.ambulance_post else location.ambulance_post_id
        cabinet_name = location.cabinet.name if location.cabinet else location.cabinet_id
        where = f"{post_name} - {cabinet_name} (Kast {location.cabinet_id})"
        if location.drawer is not None:
            where += f" - Lade {location.drawer.name}"
    else:
        where = "Alle locaties"

    expiry = item.expiry_date.strftime("%d-%m-%Y") if item.expiry_date else "Geen"
    greeting = f"Beste {recipient_name}," if recipient_name else "Beste collega,"

    details = [
        ("Naam", item.name),
        ("Beschrijving", item.description or "Geen beschrijving"),
        ("Categorie", item.category),
        ("Locatie", where),
        ("Status", STATUS_LABELS.get(stock_status, stock_status)),
        ("Vervaldatum", expiry),
    ]

    detail_rows = "\n".join(
        f"<p><strong>{label}:</strong> {html.escape(str(value))}</p>"
        for label, value in details
    )

    body = f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
  <div style="background-color: {color}; color: white; padding: 20px; text-align: center;">
    <h1>Medische Inventaris - {'URGENT ' if urgent else ''}Aanvulverzoek</h1>
  </div>
  <div style="padding: 20px;">
    <p>{html.escape(greeting)}</p>
    <div style="border-left: 4px solid {color}; padding: 15px; margin: 20px 0;">
      <strong>Let op:</strong> {notice}
    </div>
    <div style="background-color: #f8fafc; padding: 15px; border-radius: 8px;">
      {detail_rows}
    </div>
    <p>Gelieve zo spoedig mogelijk actie te ondernemen om de voorraad aan te vullen.</p>
  </div>
  <div style="background-color: #f1f5f9; padding: 15px; text-align: center; color: #64748b;">
    <p>Deze email is automatisch gegenereerd door het Medische Inventaris Systeem</p>
    <p>Datum: {now.strftime("%d-%m-%Y %H:%M")}</p>
  </div>
</body>
</html>
"""

    text = "\n".join(
        [greeting, "", notice, ""]
        + [f"{label}: {value}" for label, value in details]
        + ["", "Gelieve zo spoedig mogelijk actie te ondernemen om de voorraad aan te vullen."]
    )

    return subject, body, text


def _deliver(transport: EmailTransport, to: str, subject: str, body: str, text: str):
    delivered = transport.send(OutgoingEmail(to=to, subject=subject, html=body, text=text))
    if not delivered:
        raise DeliveryError(
            "Email could not be delivered. Please try again later."
        )


def send_supply_request(
    storage: InventoryStorage,
    transport: EmailTransport,
    location_id: int,
) -> SupplyRequest:
    """
    Email the location's restock contact and record the receipt.

    Rejected without sending when the location is in stock or nobody at its
    post can receive the request. A failed delivery records nothing.
    """
    location = storage.get_item_location(location_id)

    if not needs_supply(location.stock_status):
        raise ValidationError("This location is in stock; no supply request needed")

    contact = storage.contact_for_location(location)
    if contact is None:
        raise ValidationError("No contact person configured for this location")

    subject, body, text = compose_supply_request_email(
        location.item, location, recipient_name=contact.name
    )
    _deliver(transport, contact.email, subject, body, text)

    request = storage.record_supply_request(
        location.item_id,
        contact.email,
        location.stock_status,
        location=location,
    )
    logger.info(
        f"Supply request sent to {contact.email} for item {location.item_id} "
        f"at {location.ambulance_post_id}/{location.cabinet_id}"
    )
    return request


def send_item_warning_email(
    storage: InventoryStorage,
    transport: EmailTransport,
    item_id: int,
) -> SupplyRequest:
    """Item-level warning to the item's alert address."""
    item = storage.get_item(item_id)

    if not item.alert_email:
        raise ValidationError("No alert email configured for this item")

    subject, body, text = compose_supply_request_email(item, None, stock_status=OUT_OF_STOCK)
    _deliver(transport, item.alert_email, subject, body, text)

    return storage.record_supply_request(item.id, item.alert_email, OUT_OF_STOCK)


def _pick_location(
    storage: InventoryStorage,
    item: MedicalItem,
    ambulance_post_id: str | None,
    location_id: int | None,
) -> ItemLocation:
    if location_id is not None:
        location = storage.get_item_location(location_id)
        if location.item_id != item.id:
            raise NotFoundError("Item location", location_id)
        return location

    locations = storage.list_item_locations(item_id=item.id, ambulance_post_id=ambulance_post_id)
    if not locations:
        raise NotFoundError("Item location")
    if len(locations) > 1:
        raise ValidationError(
            "Item has several locations here; pass locationId to choose one"
        )
    return locations[0]


def mark_location_status(
    storage: InventoryStorage,
    transport: EmailTransport,
    item_id: int,
    stock_status: str,
    ambulance_post_id: str | None = None,
    location_id: int | None = None,
) -> tuple[ItemLocation, SupplyRequest | None]:
    """
    Set a location to low/out of stock and notify its contact in one go.

    The status change, the email and the receipt form one transaction: when
    delivery fails the status change is rolled back and DeliveryError is
    raised, so a location never sits low without a request having gone out
    while a contact exists. Without a contact only the status is saved.
    """
    if stock_status == IN_STOCK:
        raise ValidationError("Use the status endpoint to reset a location to in stock")

    item = storage.get_item(item_id)
    location = _pick_location(storage, item, ambulance_post_id, location_id)

    storage.apply_stock_status(location, stock_status)
    storage.db.flush()

    contact = storage.contact_for_location(location)
    if contact is None:
        storage.commit()
        storage.db.refresh(location)
        return location, None

    subject, body, text = compose_supply_request_email(
        item, location, recipient_name=contact.name, stock_status=stock_status
    )

    try:
        _deliver(transport, contact.email, subject, body, text)
    except DeliveryError:
        storage.db.rollback()
        logger.warning(
            f"Rolled back status change of location {location.id}: email to "
            f"{contact.email} failed"
        )
        raise

    request = storage.add_supply_request(item.id, contact.email, stock_status, location=location)
    storage.commit()

    storage.db.refresh(location)
    storage.db.refresh(request)
    return location, request
