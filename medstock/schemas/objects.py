# medstock/schemas/objects.py

from pydantic import Field

from medstock.schemas.base import ResponseModel


class UploadURLResponse(ResponseModel):
    # The uploader widget reads "uploadURL"
    upload_url: str = Field(..., alias="uploadURL")
    object_path: str
