"""
Script model - versioned raw script text plus its parsed scene/shot breakdown.
"""
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field as PydanticField
from sqlalchemy import JSON, Column, Text
from sqlmodel import Field, Relationship

from studio.models.base import BaseUUIDModel, enum_column
from studio.models.enums import ScriptStatus

if TYPE_CHECKING:
    from studio.models.project import Project


class ParsedShot(BaseModel):
    """
    One shot as returned by the script parser.

    Enum-ish fields stay strings here; ingestion maps them onto the
    database enums with defaults for anything unrecognised.
    """
    model_config = ConfigDict(populate_by_name=True)

    index: int = PydanticField(
        default=0, validation_alias=AliasChoices("index", "shotIndex", "shot_index")
    )
    description: str
    camera_movement: str = PydanticField(
        default="STATIC",
        validation_alias=AliasChoices("camera_movement", "cameraMovement"),
    )
    mood: str = "DRAMATIC"
    duration: float = 4.0


class ParsedScene(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    index: int = PydanticField(
        default=0, validation_alias=AliasChoices("index", "sceneIndex", "scene_index")
    )
    title: str = ""
    location: Optional[str] = None
    shots: List[ParsedShot] = []


class ParsedScript(BaseModel):
    """
    Structured parser output.

    Structure: {"scenes": [{"index", "title", "location", "shots": [...]}]}
    """
    scenes: List[ParsedScene] = []

    @property
    def shot_count(self) -> int:
        return sum(len(scene.shots) for scene in self.scenes)


class Script(BaseUUIDModel, table=True):
    """
    Script database model.

    Table: scripts

    Every parse creates a new version; versions increase monotonically
    per project.
    """
    __tablename__ = "scripts"

    project_id: UUID = Field(foreign_key="projects.id", nullable=False, index=True)
    version: int = Field(default=1, ge=1)
    raw_text: str = Field(sa_column=Column(Text, nullable=False))
    source_file_name: Optional[str] = Field(default=None, max_length=255)
    parsed_data: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False)
    )
    status: ScriptStatus = Field(
        default=ScriptStatus.PENDING,
        sa_column=enum_column(ScriptStatus, "script_status"),
    )

    project: Optional["Project"] = Relationship(back_populates="scripts")

    def get_parsed(self) -> ParsedScript:
        """Parse the stored JSON back into a ParsedScript."""
        return ParsedScript.model_validate(self.parsed_data or {})
