# medstock/schemas/ambulance_post.py

from datetime import datetime

from pydantic import EmailStr, Field

from medstock.schemas.base import RequestModel, ResponseModel


POST_ID_PATTERN = r"^[a-z0-9-]+$"


class AmbulancePostCreate(RequestModel):
    id: str = Field(..., min_length=1, max_length=50, pattern=POST_ID_PATTERN)
    name: str = Field(..., min_length=1)
    location: str | None = None
    description: str | None = None
    is_active: bool = True


class AmbulancePostUpdate(RequestModel):
    name: str | None = Field(None, min_length=1)
    location: str | None = None
    description: str | None = None
    is_active: bool | None = None


class AmbulancePostResponse(ResponseModel):
    id: str
    name: str
    location: str | None
    description: str | None
    is_active: bool
    created_at: datetime | None


class PostContactCreate(RequestModel):
    ambulance_post_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str | None = None
    department: str | None = None
    is_active: bool = True


class PostContactUpdate(RequestModel):
    name: str | None = Field(None, min_length=1)
    email: EmailStr | None = None
    phone: str | None = None
    department: str | None = None
    is_active: bool | None = None


class PostContactResponse(ResponseModel):
    id: int
    ambulance_post_id: str
    name: str
    email: str
    phone: str | None
    department: str | None
    is_active: bool
