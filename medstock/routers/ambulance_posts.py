# medstock/routers/ambulance_posts.py

from fastapi import APIRouter, Depends, status

from medstock.schemas.ambulance_post import (
    AmbulancePostCreate,
    AmbulancePostUpdate,
    AmbulancePostResponse,
)
from medstock.schemas.cabinet import CabinetOrderUpdate, CabinetResponse
from medstock.services.storage import InventoryStorage, get_storage

router = APIRouter(
    prefix="/api/ambulance-posts",
    tags=["Ambulance posts"],
)


@router.get("", response_model=list[AmbulancePostResponse])
def list_ambulance_posts(storage: InventoryStorage = Depends(get_storage)):
    return storage.get_ambulance_posts()


@router.get("/{post_id}", response_model=AmbulancePostResponse)
def get_ambulance_post(
    post_id: str,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.get_ambulance_post(post_id)


@router.post(
    "",
    response_model=AmbulancePostResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_ambulance_post(
    post_data: AmbulancePostCreate,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.create_ambulance_post(post_data.model_dump())


@router.patch("/{post_id}", response_model=AmbulancePostResponse)
def update_ambulance_post(
    post_id: str,
    post_data: AmbulancePostUpdate,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.update_ambulance_post(post_id, post_data.model_dump(exclude_unset=True))


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ambulance_post(
    post_id: str,
    storage: InventoryStorage = Depends(get_storage),
):
    storage.delete_ambulance_post(post_id)

    return None


# ---------------- CABINET ORDER ----------------

@router.get("/{post_id}/cabinets/ordered", response_model=list[CabinetResponse])
def ordered_cabinets(
    post_id: str,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.get_cabinets_ordered_by_post(post_id)


@router.post("/{post_id}/cabinets/order", response_model=list[CabinetResponse])
def save_cabinet_order(
    post_id: str,
    order_data: CabinetOrderUpdate,
    storage: InventoryStorage = Depends(get_storage),
):
    storage.set_cabinet_order(post_id, order_data.ordered_cabinet_ids)

    return storage.get_cabinets_ordered_by_post(post_id)
