"""
Generation models - candidate images and videos for a shot.

At most one generation of each kind is selected per shot.
"""
from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, Relationship

from studio.models.base import BaseUUIDModel, enum_column, utc_now
from studio.models.enums import MotionType, VideoProvider, VideoStatus

if TYPE_CHECKING:
    from studio.models.scene import Shot


class ImageGeneration(BaseUUIDModel, table=True):
    """
    One candidate image for a shot.

    Table: image_generations

    image_url may be a durable storage reference (s3://bucket/key),
    a data URI, or a provider's ephemeral URL.
    """
    __tablename__ = "image_generations"

    shot_id: UUID = Field(foreign_key="shots.id", nullable=False, index=True)
    prompt: str = Field(sa_column=Column(Text, nullable=False))
    image_url: str = Field(sa_column=Column(Text, nullable=False))
    selected: bool = Field(default=False, nullable=False)

    shot: Optional["Shot"] = Relationship(back_populates="images")


class VideoGeneration(BaseUUIDModel, table=True):
    """
    One image-to-video attempt for a shot.

    Table: video_generations

    Lifecycle: PENDING -> PROCESSING -> COMPLETED | FAILED, or
    PENDING -> FAILED when the provider rejects the submission.
    Terminal records never change status; a retry is a new row.
    """
    __tablename__ = "video_generations"

    shot_id: UUID = Field(foreign_key="shots.id", nullable=False, index=True)
    source_image_id: Optional[UUID] = Field(
        default=None, foreign_key="image_generations.id"
    )
    provider: VideoProvider = Field(
        sa_column=enum_column(VideoProvider, "video_provider"),
    )
    motion_type: MotionType = Field(
        default=MotionType.SUBTLE,
        sa_column=enum_column(MotionType, "motion_type"),
    )
    prompt: Optional[str] = Field(default=None, sa_column=Column(Text))
    provider_task_id: Optional[str] = Field(default=None, max_length=255, index=True)
    status: VideoStatus = Field(
        default=VideoStatus.PENDING,
        sa_column=enum_column(VideoStatus, "video_status", index=True),
    )
    video_url: Optional[str] = Field(default=None, sa_column=Column(Text))
    error_message: Optional[str] = Field(default=None, sa_column=Column(Text))
    selected: bool = Field(default=False, nullable=False)
    updated_at: datetime = Field(
        default_factory=utc_now,
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"onupdate": utc_now},
    )
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    shot: Optional["Shot"] = Relationship(back_populates="videos")

    @property
    def is_terminal(self) -> bool:
        return VideoStatus(self.status).is_terminal
