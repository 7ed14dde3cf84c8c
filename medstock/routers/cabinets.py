# medstock/routers/cabinets.py

from fastapi import APIRouter, Depends, Query, status

from medstock.schemas.cabinet import (
    CabinetCreate,
    CabinetUpdate,
    CabinetResponse,
    CabinetSummary,
)
from medstock.services.storage import InventoryStorage, get_storage

router = APIRouter(
    prefix="/api/cabinets",
    tags=["Cabinets"],
)


@router.get("", response_model=list[CabinetResponse])
def list_cabinets(storage: InventoryStorage = Depends(get_storage)):
    return storage.get_cabinets()


# Registered before "/{cabinet_id}" so "summary" is not taken for an id
@router.get("/summary", response_model=list[CabinetSummary])
def cabinet_summary(
    ambulance_post_id: str | None = Query(None, alias="ambulancePostId"),
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.summary_by_cabinet(ambulance_post_id=ambulance_post_id)


@router.get("/{cabinet_id}", response_model=CabinetResponse)
def get_cabinet(
    cabinet_id: str,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.get_cabinet(cabinet_id)


@router.post(
    "",
    response_model=CabinetResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_cabinet(
    cabinet_data: CabinetCreate,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.create_cabinet(cabinet_data.model_dump())


@router.patch("/{cabinet_id}", response_model=CabinetResponse)
def update_cabinet(
    cabinet_id: str,
    cabinet_data: CabinetUpdate,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.update_cabinet(cabinet_id, cabinet_data.model_dump(exclude_unset=True))


@router.delete("/{cabinet_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cabinet(
    cabinet_id: str,
    storage: InventoryStorage = Depends(get_storage),
):
    storage.delete_cabinet(cabinet_id)

    return None
