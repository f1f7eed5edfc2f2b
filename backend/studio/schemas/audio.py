"""Project audio schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from studio.models import MusicSource, NarrationSource
from studio.services.storage_service import StorageService


class AudioUpdateRequest(BaseModel):
    """Attach narration and/or music by URL."""

    narration_url: Optional[str] = None
    narration_source: NarrationSource = NarrationSource.UPLOAD
    music_url: Optional[str] = None
    music_source: MusicSource = MusicSource.UPLOAD


class TTSRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=20_000)
    voice_id: Optional[str] = Field(default=None, description="edge-tts voice ShortName")


class MusicRequest(BaseModel):
    style: Optional[str] = Field(default=None, description="Preset name such as CINEMATIC_ORCHESTRAL")
    custom_prompt: Optional[str] = Field(default=None, max_length=1000)
    duration: Optional[int] = Field(default=None, ge=1, le=300, description="Seconds")


class AudioResponse(BaseModel):
    id: UUID
    project_id: UUID
    narration_url: Optional[str] = None
    narration_source: Optional[NarrationSource] = None
    music_url: Optional[str] = None
    music_source: Optional[MusicSource] = None
    updated_at: datetime

    @field_validator("narration_url", "music_url")
    @classmethod
    def display_url(cls, v: Optional[str]) -> Optional[str]:
        return StorageService.display_url(v)

    class Config:
        from_attributes = True
