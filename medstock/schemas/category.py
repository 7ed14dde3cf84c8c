# medstock/schemas/category.py

from pydantic import Field

from medstock.schemas.base import RequestModel, ResponseModel


class CategoryCreate(RequestModel):
    name: str = Field(..., min_length=1)
    icon: str = "📦"


class CategoryUpdate(RequestModel):
    name: str | None = Field(None, min_length=1)
    icon: str | None = Field(None, min_length=1)


class CategoryResponse(ResponseModel):
    id: int
    name: str
    icon: str
