"""
Project model - the root aggregate of a video production.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlalchemy import DateTime
from sqlmodel import Field, Relationship, SQLModel

from studio.models.base import BaseUUIDModel, enum_column, utc_now
from studio.models.enums import (
    AspectRatio,
    MusicSource,
    NarrationSource,
    ProjectStatus,
)

if TYPE_CHECKING:
    from studio.models.scene import Scene, Shot
    from studio.models.script import Script


class ProjectBase(SQLModel):
    """Shared project properties."""

    title: str = Field(max_length=255, nullable=False)
    aspect_ratio: AspectRatio = Field(
        default=AspectRatio.LANDSCAPE,
        sa_column=enum_column(AspectRatio, "aspect_ratio"),
    )
    status: ProjectStatus = Field(
        default=ProjectStatus.DRAFT,
        sa_column=enum_column(ProjectStatus, "project_status"),
    )


class Project(ProjectBase, BaseUUIDModel, table=True):
    """
    Project database model.

    Table: projects

    Owns scenes, shots, script versions and at most one audio record.
    """

    __tablename__ = "projects"

    updated_at: datetime = Field(
        default_factory=utc_now,
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"onupdate": utc_now},
    )

    # Relationships
    scripts: List["Script"] = Relationship(back_populates="project")
    scenes: List["Scene"] = Relationship(back_populates="project")
    shots: List["Shot"] = Relationship(back_populates="project")
    audio: Optional["ProjectAudio"] = Relationship(
        back_populates="project",
        sa_relationship_kwargs={"uselist": False},  # One-to-one
    )


class ProjectAudio(BaseUUIDModel, table=True):
    """
    Narration and music tracks for a project.

    Table: project_audio
    """

    __tablename__ = "project_audio"

    project_id: UUID = Field(
        foreign_key="projects.id", nullable=False, unique=True, index=True
    )
    narration_url: Optional[str] = Field(default=None)
    narration_source: Optional[NarrationSource] = Field(
        default=None,
        sa_column=enum_column(NarrationSource, "narration_source", nullable=True),
    )
    music_url: Optional[str] = Field(default=None)
    music_source: Optional[MusicSource] = Field(
        default=None,
        sa_column=enum_column(MusicSource, "music_source", nullable=True),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"onupdate": utc_now},
    )

    project: Optional["Project"] = Relationship(back_populates="audio")
