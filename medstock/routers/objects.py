# medstock/routers/objects.py

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import FileResponse

from medstock.core.rate_limiter import limiter
from medstock.schemas.objects import UploadURLResponse
from medstock.services.object_storage import ObjectStorage, get_object_storage

router = APIRouter(tags=["Objects"])

logger = logging.getLogger("medstock")


@router.post("/api/objects/upload", response_model=UploadURLResponse)
@limiter.limit("30/minute")
def create_upload_url(
    request: Request,
    objects: ObjectStorage = Depends(get_object_storage),
):
    upload_url, object_path = objects.create_upload()

    return {"upload_url": upload_url, "object_path": object_path}


@router.put("/objects/uploads/{object_id}", status_code=status.HTTP_201_CREATED)
async def upload_object(
    request: Request,
    object_id: str,
    expires: int = Query(...),
    signature: str = Query(...),
    objects: ObjectStorage = Depends(get_object_storage),
):
    if not objects.verify_upload(object_id, expires, signature):
        logger.warning(f"Rejected upload for object {object_id}: bad or expired signature")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Upload URL is invalid or expired",
        )

    data = await request.body()
    object_path = objects.save(object_id, data, request.headers.get("content-type"))

    return {"objectPath": object_path}


@router.get("/objects/{object_path:path}")
def download_object(
    object_path: str,
    objects: ObjectStorage = Depends(get_object_storage),
):
    path, content_type = objects.resolve(object_path)

    return FileResponse(path, media_type=content_type or "application/octet-stream")
