"""Image and video generation schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from studio.models import MotionType, VideoProvider, VideoStatus
from studio.services.storage_service import StorageService


class ImageResponse(BaseModel):
    """Candidate image; stored objects are served through the media proxy."""

    id: UUID
    shot_id: UUID
    prompt: str
    image_url: str
    selected: bool
    created_at: datetime

    @field_validator("image_url")
    @classmethod
    def display_url(cls, v: str) -> str:
        return StorageService.display_url(v)

    class Config:
        from_attributes = True


class VideoResponse(BaseModel):
    id: UUID
    shot_id: UUID
    source_image_id: Optional[UUID] = None
    provider: VideoProvider
    motion_type: MotionType
    prompt: Optional[str] = None
    provider_task_id: Optional[str] = None
    status: VideoStatus
    video_url: Optional[str] = None
    error_message: Optional[str] = None
    selected: bool
    created_at: datetime
    completed_at: Optional[datetime] = None

    @field_validator("video_url")
    @classmethod
    def display_url(cls, v: Optional[str]) -> Optional[str]:
        return StorageService.display_url(v)

    class Config:
        from_attributes = True


class ImageGenerateRequest(BaseModel):
    """Request body for filling a shot's image slots."""

    shot_id: UUID
    count: Optional[int] = Field(default=None, ge=1, le=10)
    regenerate: bool = False
    custom_prompt: Optional[str] = Field(default=None, max_length=4000)
    character_variation_ids: List[UUID] = Field(default_factory=list)


class ImageBatchResponse(BaseModel):
    generated: int
    failed: int
    images: List[ImageResponse]


class ImageSelectRequest(BaseModel):
    shot_id: UUID
    image_id: UUID


class VideoGenerateRequest(BaseModel):
    """Request body for starting an image-to-video job."""

    shot_id: UUID
    image_id: UUID
    provider: VideoProvider = VideoProvider.MINIMAX
    motion_type: MotionType = MotionType.SUBTLE
    custom_prompt: Optional[str] = Field(default=None, max_length=2000)


class VideoSelectRequest(BaseModel):
    shot_id: UUID
    video_id: UUID


class VideoStatusUpdateRequest(BaseModel):
    """Externally reported job state (webhook or manual update)."""

    status: VideoStatus
    video_url: Optional[str] = None
    error: Optional[str] = None


class ProjectVideoStatusResponse(BaseModel):
    """All of a project's videos; in_flight == 0 means polling can stop."""

    videos: List[VideoResponse]
    in_flight: int


class DeleteResponse(BaseModel):
    deleted: UUID
    promoted_id: Optional[UUID] = None
