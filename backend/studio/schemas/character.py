"""Character library schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from studio.models import VariationType
from studio.services.storage_service import StorageService


class ReferenceImageResponse(BaseModel):
    id: UUID
    variation_id: UUID
    image_url: str
    is_primary: bool
    created_at: datetime

    @field_validator("image_url")
    @classmethod
    def display_url(cls, v: str) -> str:
        return StorageService.display_url(v)

    class Config:
        from_attributes = True


class VariationResponse(BaseModel):
    id: UUID
    character_id: UUID
    type: VariationType
    custom_label: Optional[str] = None
    label: str
    description: Optional[str] = None
    images: List[ReferenceImageResponse] = []
    created_at: datetime

    class Config:
        from_attributes = True


class CharacterResponse(BaseModel):
    id: UUID
    name: str
    variations: List[VariationResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CharacterCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    variation_type: VariationType = VariationType.ADULT
    custom_label: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None


class VariationDescription(BaseModel):
    id: UUID
    description: Optional[str] = None


class CharacterUpdateRequest(BaseModel):
    """Rename and/or describe variations; omitted fields are left unchanged."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    variations: List[VariationDescription] = []


class VariationCreateRequest(BaseModel):
    type: VariationType
    custom_label: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None


class ReferenceImageRequest(BaseModel):
    image_url: str = Field(..., min_length=1, description="http(s) URL or data URI")


class ReferenceImageUpdateRequest(BaseModel):
    is_primary: bool = True
