# medstock/routers/post_contacts.py

from fastapi import APIRouter, Depends, Query, status

from medstock.schemas.ambulance_post import (
    PostContactCreate,
    PostContactUpdate,
    PostContactResponse,
)
from medstock.services.storage import InventoryStorage, get_storage

router = APIRouter(
    prefix="/api/post-contacts",
    tags=["Post contacts"],
)


@router.get("", response_model=list[PostContactResponse])
def list_post_contacts(
    ambulance_post_id: str | None = Query(None, alias="ambulancePostId"),
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.get_post_contacts(ambulance_post_id=ambulance_post_id)


@router.get("/{contact_id}", response_model=PostContactResponse)
def get_post_contact(
    contact_id: int,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.get_post_contact(contact_id)


@router.post(
    "",
    response_model=PostContactResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_post_contact(
    contact_data: PostContactCreate,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.create_post_contact(contact_data.model_dump())


@router.patch("/{contact_id}", response_model=PostContactResponse)
def update_post_contact(
    contact_id: int,
    contact_data: PostContactUpdate,
    storage: InventoryStorage = Depends(get_storage),
):
    return storage.update_post_contact(contact_id, contact_data.model_dump(exclude_unset=True))


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post_contact(
    contact_id: int,
    storage: InventoryStorage = Depends(get_storage),
):
    storage.delete_post_contact(contact_id)

    return None
