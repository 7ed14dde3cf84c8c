# medstock/routers/medical_items.py

from fastapi import APIRouter, Depends, Query, status

from medstock.schemas.item import ItemCreate, ItemUpdate, ItemResponse
from medstock.services.storage import InventoryStorage, get_storage

router = APIRouter(
    prefix="/api/medical-items",
    tags=["Medical items"],
)


@router.get("", response_model=list[ItemResponse])
def list_medical_items(
    cabinet: str | None = None,
    category: str | None = None,
    search: str | None = None,
    ambulance_post_id: str | None = Query(None, alias="ambulancePostId"),
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.list_items(
        cabinet=cabinet,
        category=category,
        search=search,
        ambulance_post_id=ambulance_post_id,
    )


@router.get("/{item_id}", response_model=ItemResponse)
def get_medical_item(
    item_id: int,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.get_item(item_id)


@router.post(
    "",
    response_model=ItemResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_medical_item(
    item_data: ItemCreate,
    storage: InventoryStorage = Depends(get_storage),
):
    data = item_data.model_dump(exclude={"locations"})
    locations = [location.model_dump() for location in item_data.locations]

    return storage.create_item(data, locations=locations)


@router.patch("/{item_id}", response_model=ItemResponse)
def update_medical_item(
    item_id: int,
    item_data: ItemUpdate,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.update_item(item_id, item_data.model_dump(exclude_unset=True))


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_medical_item(
    item_id: int,
    storage: InventoryStorage = Depends(get_storage),
):
    storage.delete_item(item_id)

    return None
