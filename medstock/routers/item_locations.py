# medstock/routers/item_locations.py

from fastapi import APIRouter, Depends, Query, status

from medstock.schemas.item_location import (
    ItemLocationCreate,
    ItemLocationUpdate,
    ItemLocationResponse,
    StockStatusUpdate,
)
from medstock.services.storage import InventoryStorage, get_storage

router = APIRouter(
    prefix="/api/item-locations",
    tags=["Item locations"],
)


@router.get("", response_model=list[ItemLocationResponse])
def list_item_locations(
    ambulance_post_id: str | None = Query(None, alias="ambulancePostId"),
    storage: InventoryStorage = Depends(get_storage),
):
    locations = storage.list_item_locations(ambulance_post_id=ambulance_post_id)
    return storage.location_views(locations)


@router.get("/{item_id}", response_model=list[ItemLocationResponse])
def list_locations_for_item(
    item_id: int,
    storage: InventoryStorage = Depends(get_storage),
):
    item = storage.get_item(item_id)
    return storage.location_views(storage.list_item_locations(item_id=item.id))


@router.post(
    "",
    response_model=ItemLocationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_item_location(
    location_data: ItemLocationCreate,
    storage: InventoryStorage = Depends(get_storage),
):
    location = storage.create_item_location(location_data.model_dump())
    return storage.location_view(location)


@router.patch("/{location_id}", response_model=ItemLocationResponse)
def update_item_location(
    location_id: int,
    location_data: ItemLocationUpdate,
    storage: InventoryStorage = Depends(get_storage),
):
    location = storage.update_item_location(
        location_id, location_data.model_dump(exclude_unset=True)
    )
    return storage.location_view(location)


@router.patch("/{location_id}/status", response_model=ItemLocationResponse)
def update_stock_status(
    location_id: int,
    status_data: StockStatusUpdate,
    storage: InventoryStorage = Depends(get_storage),
):
    location = storage.set_stock_status(location_id, status_data.stock_status)
    return storage.location_view(location)


@router.delete("/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item_location(
    location_id: int,
    storage: InventoryStorage = Depends(get_storage),
):
    storage.delete_item_location(location_id)

    return None
