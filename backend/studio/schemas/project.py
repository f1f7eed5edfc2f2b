"""Project and script schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from studio.models import AspectRatio, ProjectStatus, ScriptStatus
from studio.schemas.audio import AudioResponse
from studio.schemas.shot import ShotResponse


class ProjectCreateRequest(BaseModel):
    """Request body for creating a new project."""

    title: str = Field(..., max_length=255, min_length=1)
    aspect_ratio: AspectRatio = AspectRatio.LANDSCAPE


class ProjectUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, max_length=255, min_length=1)
    aspect_ratio: Optional[AspectRatio] = None
    status: Optional[ProjectStatus] = None


class ProjectResponse(BaseModel):
    """Basic project response."""

    id: UUID
    title: str
    aspect_ratio: AspectRatio
    status: ProjectStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SceneResponse(BaseModel):
    id: UUID
    scene_index: int
    title: str
    location: Optional[str] = None

    class Config:
        from_attributes = True


class ProjectDetailResponse(ProjectResponse):
    """Project with its scenes, shots (in timeline order) and audio."""

    scenes: List[SceneResponse] = []
    shots: List[ShotResponse] = []
    audio: Optional[AudioResponse] = None


class ProjectListResponse(BaseModel):
    """Paginated list of projects."""

    items: List[ProjectResponse]
    total: int
    page: int
    page_size: int


class ScriptIngestRequest(BaseModel):
    """Raw script text to parse into scenes and shots."""

    script_text: str = Field(..., min_length=1, max_length=100_000)
    source_file_name: Optional[str] = Field(default=None, max_length=255)


class ScriptResponse(BaseModel):
    id: UUID
    project_id: UUID
    version: int
    source_file_name: Optional[str] = None
    status: ScriptStatus
    parsed_data: dict
    created_at: datetime

    class Config:
        from_attributes = True
