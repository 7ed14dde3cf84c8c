# medstock/schemas/cabinet.py

from typing import Dict, List

from pydantic import Field, field_validator

from medstock.schemas.base import RequestModel, ResponseModel


class CabinetCreate(RequestModel):
    id: str = Field(..., min_length=1, max_length=10)
    name: str = Field(..., min_length=1, max_length=50)
    abbreviation: str = Field(..., min_length=1, max_length=3)
    color: str = Field("bg-slate-200", min_length=1, max_length=20)
    description: str | None = None
    location: str | None = None

    @field_validator("abbreviation")
    @classmethod
    def upper_abbreviation(cls, value: str) -> str:
        return value.upper()


class CabinetUpdate(RequestModel):
    name: str | None = Field(None, min_length=1, max_length=50)
    abbreviation: str | None = Field(None, min_length=1, max_length=3)
    color: str | None = Field(None, min_length=1, max_length=20)
    description: str | None = None
    location: str | None = None

    @field_validator("abbreviation")
    @classmethod
    def upper_abbreviation(cls, value: str | None) -> str | None:
        return value.upper() if value is not None else value


class CabinetResponse(ResponseModel):
    id: str
    name: str
    abbreviation: str
    color: str | None
    description: str | None
    location: str | None


class CabinetSummary(ResponseModel):
    id: str
    name: str
    abbreviation: str
    color: str | None
    total_items: int
    low_stock_items: int
    categories: Dict[str, int]


class CabinetOrderUpdate(RequestModel):
    ordered_cabinet_ids: List[str]


class DrawerCreate(RequestModel):
    cabinet_id: str = Field(..., min_length=1, max_length=10)
    name: str = Field(..., min_length=1)
    position: str | None = None
    drawer_number: int | None = Field(None, ge=0)
    description: str | None = None


class DrawerUpdate(RequestModel):
    name: str | None = Field(None, min_length=1)
    position: str | None = None
    drawer_number: int | None = Field(None, ge=0)
    description: str | None = None


class DrawerResponse(ResponseModel):
    id: int
    cabinet_id: str
    name: str
    position: str | None
    drawer_number: int | None
    description: str | None


class CabinetLocationCreate(RequestModel):
    cabinet_id: str = Field(..., min_length=1, max_length=10)
    ambulance_post_id: str = Field(..., min_length=1)
    sub_location: str | None = None


class CabinetLocationResponse(ResponseModel):
    id: int
    cabinet_id: str
    ambulance_post_id: str
    sub_location: str | None
