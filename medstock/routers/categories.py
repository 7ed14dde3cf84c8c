# medstock/routers/categories.py

from fastapi import APIRouter, Depends, status

from medstock.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse
from medstock.services.storage import InventoryStorage, get_storage

router = APIRouter(
    prefix="/api/categories",
    tags=["Categories"],
)


@router.get("", response_model=list[CategoryResponse])
def list_categories(storage: InventoryStorage = Depends(get_storage)):
    return storage.list_categories()


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.create_category(category_data.model_dump())


@router.patch("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.update_category(category_id, category_data.model_dump(exclude_unset=True))


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    storage: InventoryStorage = Depends(get_storage),
):
    storage.delete_category(category_id)

    return None
