"""
Storage access layer.

Every read and write of the inventory tables goes through InventoryStorage.
It validates input before touching the database, raises the domain errors
from medstock.core.exceptions, and invalidates the read cache itself after
each write, so callers never have to remember to.

Cached reads (posts, cabinets, contacts, cabinet order) return response
schemas rather than ORM rows, since cached rows would outlive their session.
"""
from datetime import date, datetime, timezone
import logging
import re

from fastapi import Depends
from sqlalchemy import Date, DateTime, func, or_, select, text
from sqlalchemy.exc import IntegrityError, StatementError
from sqlalchemy.orm import Session

from medstock.core import cache as cache_kinds
from medstock.core.cache import InventoryCache, get_cache
from medstock.core.config import settings
from medstock.core.exceptions import ConflictError, NotFoundError, ValidationError
from medstock.database import get_db
from medstock.models.ambulance_post import AmbulancePost
from medstock.models.cabinet import Cabinet
from medstock.models.cabinet_location import CabinetLocation
from medstock.models.category import Category
from medstock.models.drawer import Drawer
from medstock.models.item import MedicalItem
from medstock.models.item_location import (
    IN_STOCK,
    LOW_STOCK,
    OUT_OF_STOCK,
    STOCK_STATUSES,
    ItemLocation,
)
from medstock.models.post_cabinet_order import PostCabinetOrder
from medstock.models.post_contact import PostContact
from medstock.models.supply_request import SupplyRequest
from medstock.schemas.ambulance_post import AmbulancePostResponse, PostContactResponse
from medstock.schemas.cabinet import CabinetResponse
from medstock.schemas.item_location import ItemLocationResponse

logger = logging.getLogger("medstock")


POST_ID_RE = re.compile(r"^[a-z0-9-]+$")

NEEDS_SUPPLY = (LOW_STOCK, OUT_OF_STOCK)

# Insert order for backups; deletes run in reverse
BACKUP_TABLES = [
    ("categories", Category),
    ("ambulance_posts", AmbulancePost),
    ("cabinets", Cabinet),
    ("drawers", Drawer),
    ("post_contacts", PostContact),
    ("cabinet_locations", CabinetLocation),
    ("post_cabinet_orders", PostCabinetOrder),
    ("medical_items", MedicalItem),
    ("item_locations", ItemLocation),
    ("supply_requests", SupplyRequest),
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def needs_supply(stock_status: str) -> bool:
    return stock_status in NEEDS_SUPPLY


def _require_text(data: dict, field: str, label: str, max_length: int | None = None):
    value = data.get(field)

    if value is None or not str(value).strip():
        raise ValidationError(f"{label} is required")

    value = str(value).strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{label} may be at most {max_length} characters")

    data[field] = value


def _validate_status(stock_status):
    if stock_status not in STOCK_STATUSES:
        raise ValidationError(
            f"Invalid stock status '{stock_status}'. "
            f"Expected one of: {', '.join(STOCK_STATUSES)}"
        )


# Field checks for new rows, shared by the create methods and backup import

def _check_new_item(data: dict):
    _require_text(data, "name", "Name")
    _require_text(data, "category", "Category")


def _check_new_post(data: dict):
    _require_text(data, "id", "Post id", max_length=50)
    _require_text(data, "name", "Name")

    if not POST_ID_RE.match(data["id"]):
        raise ValidationError(
            "Post id may only contain lowercase letters, digits and dashes"
        )


def _clean_cabinet(data: dict):
    if "name" in data:
        _require_text(data, "name", "Name", max_length=50)
    if "abbreviation" in data:
        _require_text(data, "abbreviation", "Abbreviation", max_length=3)
        data["abbreviation"] = data["abbreviation"].upper()
    if "color" in data:
        _require_text(data, "color", "Color", max_length=20)


def _check_new_cabinet(data: dict):
    _require_text(data, "id", "Cabinet id", max_length=10)
    _require_text(data, "name", "Name", max_length=50)
    _require_text(data, "abbreviation", "Abbreviation", max_length=3)
    _clean_cabinet(data)


def _check_new_drawer(data: dict):
    _require_text(data, "name", "Name")


def _check_new_contact(data: dict):
    _require_text(data, "name", "Name")
    _require_text(data, "email", "Email")


def _check_new_category(data: dict):
    _require_text(data, "name", "Name")


def _check_new_location(data: dict):
    _validate_status(data.get("stock_status") or IN_STOCK)


NEW_ROW_CHECKS = {
    MedicalItem: _check_new_item,
    AmbulancePost: _check_new_post,
    Cabinet: _check_new_cabinet,
    Drawer: _check_new_drawer,
    PostContact: _check_new_contact,
    Category: _check_new_category,
    ItemLocation: _check_new_location,
}


class InventoryStorage:
    def __init__(
        self,
        db: Session,
        cache: InventoryCache,
        uniqueness: str | None = None,
    ):
        self.db = db
        self.cache = cache
        self.uniqueness = uniqueness or settings.ITEM_LOCATION_UNIQUENESS

    # ---------------- HELPERS ----------------

    def commit(self):
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info(f"Integrity error on commit: {exc.orig}")
            raise ConflictError("Write conflicts with existing data")

    def _get_or_404(self, model, identifier, label: str):
        row = self.db.query(model).filter(model.id == identifier).first()
        if row is None:
            raise NotFoundError(label, identifier)
        return row

    # ---------------- MEDICAL ITEMS ----------------

    def list_items(
        self,
        cabinet: str | None = None,
        category: str | None = None,
        search: str | None = None,
        ambulance_post_id: str | None = None,
    ) -> list[MedicalItem]:
        query = self.db.query(MedicalItem)

        if cabinet or ambulance_post_id:
            located = select(ItemLocation.item_id)
            if cabinet:
                located = located.where(ItemLocation.cabinet_id == cabinet)
            if ambulance_post_id:
                located = located.where(ItemLocation.ambulance_post_id == ambulance_post_id)
            query = query.filter(MedicalItem.id.in_(located))

        if category:
            query = query.filter(func.lower(MedicalItem.category) == category.lower())

        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(
                or_(
                    func.lower(MedicalItem.name).like(pattern),
                    func.lower(MedicalItem.description).like(pattern),
                    func.lower(MedicalItem.category).like(pattern),
                )
            )

        return query.order_by(MedicalItem.name, MedicalItem.id).all()

    def get_item(self, item_id: int) -> MedicalItem:
        return self._get_or_404(MedicalItem, item_id, "Medical item")

    def _check_replacement(self, item_id: int | None, replacement_id: int | None):
        if replacement_id is None:
            return
        if item_id is not None and replacement_id == item_id:
            raise ValidationError("An item cannot replace itself")
        if self.db.query(MedicalItem.id).filter(MedicalItem.id == replacement_id).first() is None:
            raise ValidationError(f"Replacement item '{replacement_id}' does not exist")

    def create_item(self, data: dict, locations: list[dict] | None = None) -> MedicalItem:
        data = dict(data)
        _check_new_item(data)
        self._check_replacement(None, data.get("replacement_item_id"))

        item = MedicalItem(**data)
        self.db.add(item)
        self.db.flush()

        for location_data in locations or []:
            self._add_location(item.id, dict(location_data))

        self.commit()
        self.db.refresh(item)
        return item

    def update_item(self, item_id: int, data: dict) -> MedicalItem:
        item = self.get_item(item_id)
        data = dict(data)

        if "name" in data:
            _require_text(data, "name", "Name")
        if "category" in data:
            _require_text(data, "category", "Category")
        if "is_discontinued" in data and data["is_discontinued"] is None:
            raise ValidationError("isDiscontinued must be true or false")
        if "replacement_item_id" in data:
            self._check_replacement(item.id, data["replacement_item_id"])

        for field, value in data.items():
            setattr(item, field, value)

        self.commit()
        self.db.refresh(item)
        return item

    def delete_item(self, item_id: int):
        item = self.get_item(item_id)

        (
            self.db.query(MedicalItem)
            .filter(MedicalItem.replacement_item_id == item.id)
            .update({MedicalItem.replacement_item_id: None}, synchronize_session=False)
        )

        self.db.delete(item)
        self.commit()

    # ---------------- AMBULANCE POSTS ----------------

    def get_ambulance_posts(self) -> list[AmbulancePostResponse]:
        def load():
            posts = self.db.query(AmbulancePost).order_by(AmbulancePost.id).all()
            return [AmbulancePostResponse.model_validate(post) for post in posts]

        return self.cache.get_or_load(cache_kinds.AMBULANCE_POSTS, load)

    def get_ambulance_post(self, post_id: str) -> AmbulancePost:
        return self._get_or_404(AmbulancePost, post_id, "Ambulance post")

    def create_ambulance_post(self, data: dict) -> AmbulancePost:
        data = dict(data)
        _check_new_post(data)

        if self.db.query(AmbulancePost.id).filter(AmbulancePost.id == data["id"]).first():
            raise ConflictError(f"Ambulance post '{data['id']}' already exists")

        post = AmbulancePost(**data)
        self.db.add(post)
        self.commit()
        self.cache.invalidate(cache_kinds.AMBULANCE_POSTS, cache_kinds.CABINET_ORDER)

        self.db.refresh(post)
        return post

    def update_ambulance_post(self, post_id: str, data: dict) -> AmbulancePost:
        post = self.get_ambulance_post(post_id)
        data = dict(data)

        if "name" in data:
            _require_text(data, "name", "Name")
        if "is_active" in data and data["is_active"] is None:
            raise ValidationError("isActive must be true or false")

        for field, value in data.items():
            setattr(post, field, value)

        self.commit()
        self.cache.invalidate(cache_kinds.AMBULANCE_POSTS)

        self.db.refresh(post)
        return post

    def delete_ambulance_post(self, post_id: str):
        post = self.get_ambulance_post(post_id)

        in_use = (
            self.db.query(func.count(ItemLocation.id))
            .filter(ItemLocation.ambulance_post_id == post.id)
            .scalar()
        )
        if in_use:
            raise ConflictError(
                f"Cannot delete ambulance post with items in it ({in_use} locations)"
            )

        self.db.query(CabinetLocation).filter(
            CabinetLocation.ambulance_post_id == post.id
        ).delete(synchronize_session=False)
        self.db.query(PostCabinetOrder).filter(
            PostCabinetOrder.ambulance_post_id == post.id
        ).delete(synchronize_session=False)

        self.db.delete(post)
        self.commit()
        self.cache.invalidate(
            cache_kinds.AMBULANCE_POSTS,
            cache_kinds.POST_CONTACTS,
            cache_kinds.CABINET_ORDER,
        )

    # ---------------- CABINETS ----------------

    def get_cabinets(self) -> list[CabinetResponse]:
        def load():
            cabinets = self.db.query(Cabinet).order_by(Cabinet.id).all()
            return [CabinetResponse.model_validate(cabinet) for cabinet in cabinets]

        return self.cache.get_or_load(cache_kinds.CABINETS, load)

    def get_cabinet(self, cabinet_id: str) -> Cabinet:
        return self._get_or_404(Cabinet, cabinet_id, "Cabinet")

    def create_cabinet(self, data: dict) -> Cabinet:
        data = dict(data)
        _check_new_cabinet(data)

        if self.db.query(Cabinet.id).filter(Cabinet.id == data["id"]).first():
            raise ConflictError(f"Cabinet '{data['id']}' already exists")

        cabinet = Cabinet(**data)
        self.db.add(cabinet)
        self.commit()
        self.cache.invalidate(cache_kinds.CABINETS, cache_kinds.CABINET_ORDER)

        self.db.refresh(cabinet)
        return cabinet

    def update_cabinet(self, cabinet_id: str, data: dict) -> Cabinet:
        cabinet = self.get_cabinet(cabinet_id)
        data = dict(data)
        _clean_cabinet(data)

        for field, value in data.items():
            setattr(cabinet, field, value)

        self.commit()
        self.cache.invalidate(cache_kinds.CABINETS, cache_kinds.CABINET_ORDER)

        self.db.refresh(cabinet)
        return cabinet

    def delete_cabinet(self, cabinet_id: str):
        cabinet = self.get_cabinet(cabinet_id)

        in_use = (
            self.db.query(func.count(ItemLocation.id))
            .filter(ItemLocation.cabinet_id == cabinet.id)
            .scalar()
        )
        if in_use:
            raise ConflictError("Cannot delete cabinet with items in it")

        self.db.query(CabinetLocation).filter(
            CabinetLocation.cabinet_id == cabinet.id
        ).delete(synchronize_session=False)
        self.db.query(PostCabinetOrder).filter(
            PostCabinetOrder.cabinet_id == cabinet.id
        ).delete(synchronize_session=False)

        self.db.delete(cabinet)
        self.commit()
        self.cache.invalidate(cache_kinds.CABINETS, cache_kinds.CABINET_ORDER)

    # ---------------- DRAWERS ----------------

    def list_drawers(self, cabinet_id: str | None = None) -> list[Drawer]:
        query = self.db.query(Drawer)
        if cabinet_id:
            query = query.filter(Drawer.cabinet_id == cabinet_id)
        return query.order_by(Drawer.cabinet_id, Drawer.drawer_number, Drawer.id).all()

    def get_drawer(self, drawer_id: int) -> Drawer:
        return self._get_or_404(Drawer, drawer_id, "Drawer")

    def create_drawer(self, data: dict) -> Drawer:
        data = dict(data)
        _check_new_drawer(data)
        self.get_cabinet(data.get("cabinet_id"))

        drawer = Drawer(**data)
        self.db.add(drawer)
        self.commit()

        self.db.refresh(drawer)
        return drawer

    def update_drawer(self, drawer_id: int, data: dict) -> Drawer:
        drawer = self.get_drawer(drawer_id)
        data = dict(data)
        if "name" in data:
            _require_text(data, "name", "Name")

        for field, value in data.items():
            setattr(drawer, field, value)

        self.commit()
        self.db.refresh(drawer)
        return drawer

    def delete_drawer(self, drawer_id: int):
        drawer = self.get_drawer(drawer_id)

        self.db.query(ItemLocation).filter(ItemLocation.drawer_id == drawer.id).update(
            {ItemLocation.drawer_id: None}, synchronize_session=False
        )

        self.db.delete(drawer)
        self.commit()

    # ---------------- ITEM LOCATIONS ----------------

    def list_item_locations(
        self,
        item_id: int | None = None,
        ambulance_post_id: str | None = None,
    ) -> list[ItemLocation]:
        query = self.db.query(ItemLocation)
        if item_id is not None:
            query = query.filter(ItemLocation.item_id == item_id)
        if ambulance_post_id:
            query = query.filter(ItemLocation.ambulance_post_id == ambulance_post_id)
        return query.order_by(ItemLocation.id).all()

    def get_item_location(self, location_id: int) -> ItemLocation:
        return self._get_or_404(ItemLocation, location_id, "Item location")

    def _check_location_refs(
        self,
        post_id: str,
        cabinet_id: str,
        drawer_id: int | None,
        contact_id: int | None,
    ):
        if not post_id:
            raise ValidationError("Ambulance post is required")
        if not cabinet_id:
            raise ValidationError("Cabinet is required")

        if self.db.query(AmbulancePost.id).filter(AmbulancePost.id == post_id).first() is None:
            raise ValidationError(f"Ambulance post '{post_id}' does not exist")
        if self.db.query(Cabinet.id).filter(Cabinet.id == cabinet_id).first() is None:
            raise ValidationError(f"Cabinet '{cabinet_id}' does not exist")

        if drawer_id is not None:
            drawer = self.db.query(Drawer).filter(Drawer.id == drawer_id).first()
            if drawer is None:
                raise ValidationError(f"Drawer '{drawer_id}' does not exist")
            if drawer.cabinet_id != cabinet_id:
                raise ValidationError(
                    f"Drawer '{drawer_id}' does not belong to cabinet '{cabinet_id}'"
                )

        if contact_id is not None:
            contact = self.db.query(PostContact).filter(PostContact.id == contact_id).first()
            if contact is None:
                raise ValidationError(f"Contact person '{contact_id}' does not exist")
            if contact.ambulance_post_id != post_id:
                raise ValidationError(
                    f"Contact person '{contact_id}' is not a contact of post '{post_id}'"
                )

    def _check_unique_location(
        self,
        item_id: int,
        post_id: str,
        cabinet_id: str,
        drawer_id: int | None,
        exclude_id: int | None = None,
    ):
        if self.uniqueness == "none":
            return

        query = self.db.query(ItemLocation.id).filter(
            ItemLocation.item_id == item_id,
            ItemLocation.ambulance_post_id == post_id,
            ItemLocation.cabinet_id == cabinet_id,
        )

        if self.uniqueness == "drawer":
            if drawer_id is None:
                query = query.filter(ItemLocation.drawer_id.is_(None))
            else:
                query = query.filter(ItemLocation.drawer_id == drawer_id)

        if exclude_id is not None:
            query = query.filter(ItemLocation.id != exclude_id)

        if query.first() is not None:
            raise ConflictError(
                f"Item '{item_id}' already has a location in cabinet "
                f"'{cabinet_id}' at post '{post_id}'"
            )

    def _add_location(self, item_id: int, data: dict) -> ItemLocation:
        _check_new_location(data)
        status = data.get("stock_status") or IN_STOCK

        post_id = data.get("ambulance_post_id")
        cabinet_id = data.get("cabinet_id")
        drawer_id = data.get("drawer_id")

        self._check_location_refs(post_id, cabinet_id, drawer_id, data.get("contact_person_id"))
        self._check_unique_location(item_id, post_id, cabinet_id, drawer_id)

        now = utcnow()
        location = ItemLocation(
            item_id=item_id,
            ambulance_post_id=post_id,
            cabinet_id=cabinet_id,
            drawer_id=drawer_id,
            stock_status=status,
            contact_person_id=data.get("contact_person_id"),
            status_changed_at=now,
            supply_episode_started_at=now if needs_supply(status) else None,
            created_at=now,
        )
        self.db.add(location)
        self.db.flush()
        return location

    def create_item_location(self, data: dict) -> ItemLocation:
        data = dict(data)
        item = self.get_item(data.pop("item_id", None))

        location = self._add_location(item.id, data)
        self.commit()

        self.db.refresh(location)
        return location

    def update_item_location(self, location_id: int, data: dict) -> ItemLocation:
        location = self.get_item_location(location_id)
        data = dict(data)

        cabinet_id = data.get("cabinet_id") or location.cabinet_id
        if "drawer_id" in data:
            drawer_id = data["drawer_id"]
        elif cabinet_id == location.cabinet_id:
            drawer_id = location.drawer_id
        else:
            drawer_id = None
        contact_id = data.get("contact_person_id", location.contact_person_id)

        self._check_location_refs(location.ambulance_post_id, cabinet_id, drawer_id, contact_id)
        self._check_unique_location(
            location.item_id,
            location.ambulance_post_id,
            cabinet_id,
            drawer_id,
            exclude_id=location.id,
        )

        location.cabinet_id = cabinet_id
        location.drawer_id = drawer_id
        location.contact_person_id = contact_id

        if "stock_status" in data and data["stock_status"] is not None:
            self.apply_stock_status(location, data["stock_status"])

        self.commit()
        self.db.refresh(location)
        return location

    def apply_stock_status(self, location: ItemLocation, stock_status: str):
        """Set the status without committing. Any status may follow any other."""
        _validate_status(stock_status)

        if stock_status == location.stock_status:
            return

        now = utcnow()
        if stock_status == IN_STOCK:
            location.supply_episode_started_at = None
        elif location.stock_status == IN_STOCK or location.supply_episode_started_at is None:
            location.supply_episode_started_at = now

        location.stock_status = stock_status
        location.status_changed_at = now

    def set_stock_status(self, location_id: int, stock_status: str) -> ItemLocation:
        location = self.get_item_location(location_id)
        self.apply_stock_status(location, stock_status)

        self.commit()
        self.db.refresh(location)
        return location

    def delete_item_location(self, location_id: int):
        location = self.get_item_location(location_id)
        self.db.delete(location)
        self.commit()

    def supply_requested_at(self, locations: list[ItemLocation]) -> dict[int, datetime]:
        """Latest request per location sent during its current supply episode."""
        ids = [loc.id for loc in locations if loc.supply_episode_started_at is not None]
        if not ids:
            return {}

        rows = (
            self.db.query(SupplyRequest.item_location_id, func.max(SupplyRequest.sent_at))
            .join(ItemLocation, SupplyRequest.item_location_id == ItemLocation.id)
            .filter(
                ItemLocation.id.in_(ids),
                ItemLocation.supply_episode_started_at.isnot(None),
                SupplyRequest.sent_at >= ItemLocation.supply_episode_started_at,
            )
            .group_by(SupplyRequest.item_location_id)
            .all()
        )
        return {location_id: sent_at for location_id, sent_at in rows}

    def contact_for_location(self, location: ItemLocation) -> PostContact | None:
        """
        Who receives restock emails for a location: its own contact person
        when active, otherwise the first active contact of its post.
        """
        contact = location.contact_person
        if contact is not None and contact.is_active:
            return contact

        return (
            self.db.query(PostContact)
            .filter(
                PostContact.ambulance_post_id == location.ambulance_post_id,
                PostContact.is_active.is_(True),
            )
            .order_by(PostContact.id)
            .first()
        )

    def location_views(self, locations: list[ItemLocation]) -> list[ItemLocationResponse]:
        requested = self.supply_requested_at(locations)

        # A location's own contact always belongs to its post
        post_ids = {loc.ambulance_post_id for loc in locations}
        posts_with_contact = {
            row.ambulance_post_id
            for row in self.db.query(PostContact.ambulance_post_id)
            .filter(
                PostContact.ambulance_post_id.in_(post_ids),
                PostContact.is_active.is_(True),
            )
            .distinct()
            .all()
        } if post_ids else set()

        return [
            ItemLocationResponse(
                id=loc.id,
                item_id=loc.item_id,
                ambulance_post_id=loc.ambulance_post_id,
                cabinet_id=loc.cabinet_id,
                drawer_id=loc.drawer_id,
                stock_status=loc.stock_status,
                contact_person_id=loc.contact_person_id,
                status_changed_at=loc.status_changed_at,
                created_at=loc.created_at,
                needs_supply=needs_supply(loc.stock_status),
                has_contact=loc.ambulance_post_id in posts_with_contact,
                supply_requested_at=requested.get(loc.id),
            )
            for loc in locations
        ]

    def location_view(self, location: ItemLocation) -> ItemLocationResponse:
        return self.location_views([location])[0]

    # ---------------- CABINET LOCATIONS ----------------

    def list_cabinet_locations(
        self,
        cabinet_id: str | None = None,
        ambulance_post_id: str | None = None,
    ) -> list[CabinetLocation]:
        query = self.db.query(CabinetLocation)
        if cabinet_id:
            query = query.filter(CabinetLocation.cabinet_id == cabinet_id)
        if ambulance_post_id:
            query = query.filter(CabinetLocation.ambulance_post_id == ambulance_post_id)
        return query.order_by(CabinetLocation.id).all()

    def create_cabinet_location(self, data: dict) -> CabinetLocation:
        data = dict(data)
        cabinet = self.get_cabinet(data.get("cabinet_id"))
        post = self.get_ambulance_post(data.get("ambulance_post_id"))

        existing = (
            self.db.query(CabinetLocation.id)
            .filter(
                CabinetLocation.cabinet_id == cabinet.id,
                CabinetLocation.ambulance_post_id == post.id,
            )
            .first()
        )
        if existing:
            raise ConflictError(
                f"Cabinet '{cabinet.id}' is already placed at post '{post.id}'"
            )

        cabinet_location = CabinetLocation(**data)
        self.db.add(cabinet_location)
        self.commit()
        self.cache.invalidate(cache_kinds.CABINET_ORDER)

        self.db.refresh(cabinet_location)
        return cabinet_location

    def delete_cabinet_location(self, cabinet_location_id: int):
        cabinet_location = self._get_or_404(
            CabinetLocation, cabinet_location_id, "Cabinet location"
        )
        self.db.delete(cabinet_location)
        self.commit()
        self.cache.invalidate(cache_kinds.CABINET_ORDER)

    # ---------------- CABINET ORDER ----------------

    def get_cabinets_ordered_by_post(self, post_id: str) -> list[CabinetResponse]:
        """
        Cabinets of a post in its display order.

        Only cabinets placed at the post are listed when the post has any
        cabinet locations, otherwise all cabinets. Cabinets without a saved
        position follow the ordered ones, sorted by id.
        """
        self.get_ambulance_post(post_id)

        def load():
            placed = [
                row.cabinet_id
                for row in self.db.query(CabinetLocation.cabinet_id)
                .filter(CabinetLocation.ambulance_post_id == post_id)
                .all()
            ]

            query = self.db.query(Cabinet)
            if placed:
                query = query.filter(Cabinet.id.in_(placed))
            cabinets = query.order_by(Cabinet.id).all()

            positions = {
                row.cabinet_id: row.position
                for row in self.db.query(PostCabinetOrder)
                .filter(PostCabinetOrder.ambulance_post_id == post_id)
                .all()
            }

            ordered = sorted(
                cabinets,
                key=lambda c: (c.id not in positions, positions.get(c.id, 0), c.id),
            )
            return [CabinetResponse.model_validate(cabinet) for cabinet in ordered]

        return self.cache.get_or_load(cache_kinds.CABINET_ORDER, load, key=post_id)

    def set_cabinet_order(self, post_id: str, ordered_cabinet_ids: list[str]):
        post = self.get_ambulance_post(post_id)

        if len(set(ordered_cabinet_ids)) != len(ordered_cabinet_ids):
            raise ValidationError("Cabinet order contains duplicate cabinets")

        known = {
            row.id
            for row in self.db.query(Cabinet.id)
            .filter(Cabinet.id.in_(ordered_cabinet_ids))
            .all()
        }
        missing = [cabinet_id for cabinet_id in ordered_cabinet_ids if cabinet_id not in known]
        if missing:
            raise NotFoundError("Cabinet", missing[0])

        self.db.query(PostCabinetOrder).filter(
            PostCabinetOrder.ambulance_post_id == post.id
        ).delete(synchronize_session=False)

        for position, cabinet_id in enumerate(ordered_cabinet_ids):
            self.db.add(
                PostCabinetOrder(
                    ambulance_post_id=post.id,
                    cabinet_id=cabinet_id,
                    position=position,
                )
            )

        self.commit()
        self.cache.invalidate(cache_kinds.CABINET_ORDER)

    # ---------------- POST CONTACTS ----------------

    def get_post_contacts(self, ambulance_post_id: str | None = None) -> list[PostContactResponse]:
        def load():
            contacts = self.db.query(PostContact).order_by(PostContact.id).all()
            return [PostContactResponse.model_validate(contact) for contact in contacts]

        contacts = self.cache.get_or_load(cache_kinds.POST_CONTACTS, load)

        if ambulance_post_id:
            return [c for c in contacts if c.ambulance_post_id == ambulance_post_id]
        return contacts

    def get_post_contact(self, contact_id: int) -> PostContact:
        return self._get_or_404(PostContact, contact_id, "Post contact")

    def create_post_contact(self, data: dict) -> PostContact:
        data = dict(data)
        _check_new_contact(data)
        self.get_ambulance_post(data.get("ambulance_post_id"))

        contact = PostContact(**data)
        self.db.add(contact)
        self.commit()
        self.cache.invalidate(cache_kinds.POST_CONTACTS)

        self.db.refresh(contact)
        return contact

    def update_post_contact(self, contact_id: int, data: dict) -> PostContact:
        contact = self.get_post_contact(contact_id)
        data = dict(data)

        if "name" in data:
            _require_text(data, "name", "Name")
        if "email" in data:
            _require_text(data, "email", "Email")
        if "is_active" in data and data["is_active"] is None:
            raise ValidationError("isActive must be true or false")

        for field, value in data.items():
            setattr(contact, field, value)

        self.commit()
        self.cache.invalidate(cache_kinds.POST_CONTACTS)

        self.db.refresh(contact)
        return contact

    def delete_post_contact(self, contact_id: int):
        contact = self.get_post_contact(contact_id)

        self.db.query(ItemLocation).filter(
            ItemLocation.contact_person_id == contact.id
        ).update({ItemLocation.contact_person_id: None}, synchronize_session=False)

        self.db.delete(contact)
        self.commit()
        self.cache.invalidate(cache_kinds.POST_CONTACTS)

    # ---------------- CATEGORIES ----------------

    def list_categories(self) -> list[Category]:
        return self.db.query(Category).order_by(Category.name).all()

    def get_category(self, category_id: int) -> Category:
        return self._get_or_404(Category, category_id, "Category")

    def _check_category_name(self, name: str, exclude_id: int | None = None):
        query = self.db.query(Category.id).filter(func.lower(Category.name) == name.lower())
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        if query.first():
            raise ConflictError(f"Category '{name}' already exists")

    def create_category(self, data: dict) -> Category:
        data = dict(data)
        _check_new_category(data)
        self._check_category_name(data["name"])

        category = Category(**data)
        self.db.add(category)
        self.commit()

        self.db.refresh(category)
        return category

    def update_category(self, category_id: int, data: dict) -> Category:
        category = self.get_category(category_id)
        data = dict(data)

        if "icon" in data:
            _require_text(data, "icon", "Icon")

        if "name" in data:
            _require_text(data, "name", "Name")
            self._check_category_name(data["name"], exclude_id=category.id)

            # Items point at categories by name
            if data["name"] != category.name:
                self.db.query(MedicalItem).filter(
                    MedicalItem.category == category.name
                ).update({MedicalItem.category: data["name"]}, synchronize_session=False)

        for field, value in data.items():
            setattr(category, field, value)

        self.commit()
        self.db.refresh(category)
        return category

    def delete_category(self, category_id: int):
        category = self.get_category(category_id)
        self.db.delete(category)
        self.commit()

    # ---------------- SUPPLY REQUESTS ----------------

    def add_supply_request(
        self,
        item_id: int,
        recipient_email: str,
        stock_status: str,
        location: ItemLocation | None = None,
    ) -> SupplyRequest:
        """Stage a receipt without committing; the caller owns the transaction."""
        request = SupplyRequest(
            item_id=item_id,
            item_location_id=location.id if location is not None else None,
            ambulance_post_id=location.ambulance_post_id if location is not None else None,
            recipient_email=recipient_email,
            stock_status=stock_status,
            sent_at=utcnow(),
        )
        self.db.add(request)
        self.db.flush()
        return request

    def record_supply_request(
        self,
        item_id: int,
        recipient_email: str,
        stock_status: str,
        location: ItemLocation | None = None,
    ) -> SupplyRequest:
        request = self.add_supply_request(item_id, recipient_email, stock_status, location)
        self.commit()

        self.db.refresh(request)
        return request

    def list_supply_requests(
        self,
        item_id: int | None = None,
        ambulance_post_id: str | None = None,
    ) -> list[SupplyRequest]:
        query = self.db.query(SupplyRequest)
        if item_id is not None:
            query = query.filter(SupplyRequest.item_id == item_id)
        if ambulance_post_id:
            query = query.filter(SupplyRequest.ambulance_post_id == ambulance_post_id)
        return query.order_by(SupplyRequest.sent_at.desc(), SupplyRequest.id.desc()).all()

    # ---------------- DERIVED READS ----------------

    def summary_by_cabinet(self, ambulance_post_id: str | None = None) -> list[dict]:
        """Per cabinet: location count, locations needing supply, count per category."""
        cabinets = self.db.query(Cabinet).order_by(Cabinet.id).all()

        query = (
            self.db.query(
                ItemLocation.cabinet_id,
                MedicalItem.category,
                ItemLocation.stock_status,
                func.count(ItemLocation.id),
            )
            .join(MedicalItem, ItemLocation.item_id == MedicalItem.id)
        )
        if ambulance_post_id:
            query = query.filter(ItemLocation.ambulance_post_id == ambulance_post_id)

        rows = query.group_by(
            ItemLocation.cabinet_id,
            MedicalItem.category,
            ItemLocation.stock_status,
        ).all()

        summary = {
            cabinet.id: {
                "id": cabinet.id,
                "name": cabinet.name,
                "abbreviation": cabinet.abbreviation,
                "color": cabinet.color,
                "total_items": 0,
                "low_stock_items": 0,
                "categories": {},
            }
            for cabinet in cabinets
        }

        for cabinet_id, category, stock_status, count in rows:
            entry = summary.get(cabinet_id)
            if entry is None:
                continue
            entry["total_items"] += count
            if needs_supply(stock_status):
                entry["low_stock_items"] += count
            entry["categories"][category] = entry["categories"].get(category, 0) + count

        return list(summary.values())

    # ---------------- BACKUP ----------------

    def export_snapshot(self) -> dict:
        tables = {}
        for name, model in BACKUP_TABLES:
            columns = model.__table__.columns
            rows = self.db.query(model).order_by(*model.__table__.primary_key.columns).all()
            tables[name] = [
                {column.name: getattr(row, column.key) for column in columns}
                for row in rows
            ]

        return {"version": 1, "exported_at": utcnow(), "tables": tables}

    def _coerce_row(self, model, name: str, row: dict) -> dict:
        columns = {column.name: column for column in model.__table__.columns}

        unknown = set(row) - set(columns)
        if unknown:
            raise ValidationError(
                f"Unknown columns for table '{name}': {', '.join(sorted(unknown))}"
            )

        for pk in model.__table__.primary_key.columns:
            if row.get(pk.name) is None:
                raise ValidationError(f"Every row in table '{name}' needs '{pk.name}'")

        values = {}
        for key, value in row.items():
            column_type = columns[key].type
            try:
                if isinstance(value, str) and isinstance(column_type, DateTime):
                    value = datetime.fromisoformat(value)
                elif isinstance(value, str) and isinstance(column_type, Date):
                    value = date.fromisoformat(value)
            except ValueError:
                raise ValidationError(f"Invalid date '{value}' in table '{name}'")
            values[columns[key].key] = value

        check = NEW_ROW_CHECKS.get(model)
        if check is not None:
            check(values)
        return values

    def import_snapshot(self, tables: dict[str, list[dict]]) -> dict[str, int]:
        """
        Replace every table with the snapshot contents in one transaction.

        Rows pass the same field checks as the create methods before anything
        is deleted; reference checks run once the referenced tables are in.
        A rejected snapshot leaves the current data untouched.
        """
        known = dict(BACKUP_TABLES)
        unknown = set(tables) - set(known)
        if unknown:
            raise ValidationError(f"Unknown tables in backup: {', '.join(sorted(unknown))}")

        snapshot = {
            name: [self._coerce_row(model, name, row) for row in tables.get(name, [])]
            for name, model in BACKUP_TABLES
        }

        item_ids = {values["id"] for values in snapshot["medical_items"]}
        replacements = []
        for values in snapshot["medical_items"]:
            # Self reference: insert first, link replacements afterwards
            replacement_id = values.pop("replacement_item_id", None)
            if replacement_id is None:
                continue
            if replacement_id == values["id"]:
                raise ValidationError("An item cannot replace itself")
            if replacement_id not in item_ids:
                raise ValidationError(f"Replacement item '{replacement_id}' does not exist")
            replacements.append((values["id"], replacement_id))

        try:
            self._replace_tables(snapshot, replacements)
        except ValidationError:
            self.db.rollback()
            raise
        except StatementError as exc:
            self.db.rollback()
            logger.info(f"Backup import rejected by the database: {exc.orig}")
            raise ValidationError("Backup rows break a table constraint")

        self.commit()
        self.cache.clear()
        return {name: len(rows) for name, rows in snapshot.items()}

    def _replace_tables(self, snapshot: dict[str, list[dict]], replacements: list[tuple]):
        for _, model in reversed(BACKUP_TABLES):
            self.db.query(model).delete(synchronize_session=False)

        for name, model in BACKUP_TABLES:
            for values in snapshot[name]:
                if model is ItemLocation:
                    self._check_location_refs(
                        values.get("ambulance_post_id"),
                        values.get("cabinet_id"),
                        values.get("drawer_id"),
                        values.get("contact_person_id"),
                    )
                self.db.add(model(**values))
            self.db.flush()

            if model is MedicalItem:
                for item_id, replacement_id in replacements:
                    self.db.query(MedicalItem).filter(MedicalItem.id == item_id).update(
                        {MedicalItem.replacement_item_id: replacement_id},
                        synchronize_session=False,
                    )
                self.db.flush()

        if self.db.get_bind().dialect.name == "postgresql":
            self._reset_sequences()

    def _reset_sequences(self):
        for name, model in BACKUP_TABLES:
            pk = list(model.__table__.primary_key.columns)[0]
            if pk.type.python_type is not int:
                continue
            self.db.execute(
                text(
                    f"SELECT setval(pg_get_serial_sequence('{name}', '{pk.name}'), "
                    f"COALESCE(MAX({pk.name}), 1), MAX({pk.name}) IS NOT NULL) FROM {name}"
                )
            )


def get_storage(
    db: Session = Depends(get_db),
    cache: InventoryCache = Depends(get_cache),
) -> InventoryStorage:
    return InventoryStorage(db, cache)
