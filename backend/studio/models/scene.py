"""
Scene and Shot models.

Shots carry a project-wide shot_index that is contiguous from 0 and is the
ordering key of the exported timeline.
"""
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlmodel import Field, Relationship, SQLModel

from studio.models.base import BaseUUIDModel, enum_column
from studio.models.enums import CameraMovement, ShotMood, ShotStatus, VisualStyle

if TYPE_CHECKING:
    from studio.models.generation import ImageGeneration, VideoGeneration
    from studio.models.project import Project

MIN_SHOT_DURATION = 0.5
MAX_SHOT_DURATION = 60.0


class Scene(BaseUUIDModel, table=True):
    """
    Ordered group of shots.

    Table: scenes
    """
    __tablename__ = "scenes"

    project_id: UUID = Field(foreign_key="projects.id", nullable=False, index=True)
    scene_index: int = Field(ge=0, nullable=False)
    title: str = Field(default="", max_length=255)
    location: Optional[str] = Field(default=None, max_length=255)

    project: Optional["Project"] = Relationship(back_populates="scenes")
    shots: List["Shot"] = Relationship(
        back_populates="scene",
        sa_relationship_kwargs={"order_by": "Shot.shot_index"},
    )


class ShotBase(SQLModel):
    """Editable shot properties."""
    description: str = Field(nullable=False)
    duration: float = Field(default=4.0, ge=MIN_SHOT_DURATION, le=MAX_SHOT_DURATION)


class Shot(ShotBase, BaseUUIDModel, table=True):
    """
    Smallest timed unit of the produced video.

    Table: shots
    """
    __tablename__ = "shots"

    project_id: UUID = Field(foreign_key="projects.id", nullable=False, index=True)
    scene_id: UUID = Field(foreign_key="scenes.id", nullable=False, index=True)
    shot_index: int = Field(ge=0, nullable=False, index=True)
    mood: ShotMood = Field(
        default=ShotMood.DRAMATIC,
        sa_column=enum_column(ShotMood, "shot_mood"),
    )
    camera_movement: CameraMovement = Field(
        default=CameraMovement.STATIC,
        sa_column=enum_column(CameraMovement, "camera_movement"),
    )
    visual_style: VisualStyle = Field(
        default=VisualStyle.PHOTOREALISTIC,
        sa_column=enum_column(VisualStyle, "visual_style"),
    )
    status: ShotStatus = Field(
        default=ShotStatus.PENDING,
        sa_column=enum_column(ShotStatus, "shot_status"),
    )

    project: Optional["Project"] = Relationship(back_populates="shots")
    scene: Optional["Scene"] = Relationship(back_populates="shots")
    images: List["ImageGeneration"] = Relationship(
        back_populates="shot",
        sa_relationship_kwargs={"order_by": "ImageGeneration.created_at"},
    )
    videos: List["VideoGeneration"] = Relationship(
        back_populates="shot",
        sa_relationship_kwargs={"order_by": "VideoGeneration.created_at"},
    )
