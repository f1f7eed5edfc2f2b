"""Shot schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from studio.models import (
    MAX_SHOT_DURATION,
    MIN_SHOT_DURATION,
    CameraMovement,
    ShotMood,
    ShotStatus,
    VisualStyle,
)
from studio.schemas.generation import ImageResponse, VideoResponse


class ShotResponse(BaseModel):
    """Shot with its candidate images and videos, oldest first."""

    id: UUID
    project_id: UUID
    scene_id: UUID
    shot_index: int
    description: str
    duration: float
    mood: ShotMood
    camera_movement: CameraMovement
    visual_style: VisualStyle
    status: ShotStatus
    images: List[ImageResponse] = []
    videos: List[VideoResponse] = []
    created_at: datetime

    class Config:
        from_attributes = True


class ShotUpdateRequest(BaseModel):
    """Partial shot update; omitted fields are left unchanged."""

    description: Optional[str] = Field(default=None, min_length=1)
    duration: Optional[float] = Field(default=None, ge=MIN_SHOT_DURATION, le=MAX_SHOT_DURATION)
    mood: Optional[ShotMood] = None
    camera_movement: Optional[CameraMovement] = None
    visual_style: Optional[VisualStyle] = None
    status: Optional[ShotStatus] = None


class ShotReorderRequest(BaseModel):
    shot_ids: List[UUID] = Field(..., min_length=1)
