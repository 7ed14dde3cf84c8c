# medstock/routers/drawers.py

from fastapi import APIRouter, Depends, Query, status

from medstock.schemas.cabinet import DrawerCreate, DrawerUpdate, DrawerResponse
from medstock.services.storage import InventoryStorage, get_storage

router = APIRouter(
    prefix="/api/drawers",
    tags=["Drawers"],
)


@router.get("", response_model=list[DrawerResponse])
def list_drawers(
    cabinet_id: str | None = Query(None, alias="cabinetId"),
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.list_drawers(cabinet_id=cabinet_id)


@router.post("", response_model=DrawerResponse, status_code=status.HTTP_201_CREATED)
def create_drawer(
    drawer_data: DrawerCreate,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.create_drawer(drawer_data.model_dump())


@router.patch("/{drawer_id}", response_model=DrawerResponse)
def update_drawer(
    drawer_id: int,
    drawer_data: DrawerUpdate,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.update_drawer(drawer_id, drawer_data.model_dump(exclude_unset=True))


@router.delete("/{drawer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_drawer(
    drawer_id: int,
    storage: InventoryStorage = Depends(get_storage),
):
    storage.delete_drawer(drawer_id)

    return None
