# medstock/routers/cabinet_locations.py

from fastapi import APIRouter, Depends, Query, status

from medstock.schemas.cabinet import CabinetLocationCreate, CabinetLocationResponse
from medstock.services.storage import InventoryStorage, get_storage

router = APIRouter(
    prefix="/api/cabinet-locations",
    tags=["Cabinet locations"],
)


@router.get("", response_model=list[CabinetLocationResponse])
def list_cabinet_locations(
    cabinet_id: str | None = Query(None, alias="cabinetId"),
    ambulance_post_id: str | None = Query(None, alias="ambulancePostId"),
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.list_cabinet_locations(
        cabinet_id=cabinet_id,
        ambulance_post_id=ambulance_post_id,
    )


@router.post(
    "",
    response_model=CabinetLocationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_cabinet_location(
    location_data: CabinetLocationCreate,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.create_cabinet_location(location_data.model_dump())


@router.delete("/{cabinet_location_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cabinet_location(
    cabinet_location_id: int,
    storage: InventoryStorage = Depends(get_storage),
):
    storage.delete_cabinet_location(cabinet_location_id)

    return None
