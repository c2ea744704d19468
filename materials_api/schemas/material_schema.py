from datetime import datetime
from typing import Any

from pydantic import BaseModel


class MaterialCreateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    content: str | None = None


class MaterialUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    content: str | None = None


class OwnerSummary(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class MaterialResponse(BaseModel):
    id: int
    user_id: int
    title: str
    description: str | None = None
    content: str | None = None
    file_url: str | None = None
    file_type: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MaterialDetailResponse(MaterialResponse):
    owner: OwnerSummary | None = None


class MaterialEnvelope(BaseModel):
    success: bool = True
    data: MaterialResponse


class MaterialDetailEnvelope(BaseModel):
    success: bool = True
    data: MaterialDetailResponse


class EmptyEnvelope(BaseModel):
    success: bool = True
    data: dict = {}


class FileUploadEnvelope(BaseModel):
    success: bool = True
    data: str


class PageLink(BaseModel):
    page: int
    limit: int


class Pagination(BaseModel):
    next: PageLink | None = None
    prev: PageLink | None = None


class MaterialListEnvelope(BaseModel):
    success: bool = True
    count: int
    total: int
    pagination: Pagination
    data: list[dict[str, Any]]
