"""
SQLModel ORM models for the application.
All models are exported here for convenient imports:
    from studio.models import Project, Shot, ImageGeneration, ...
"""

from studio.models.enums import (
    AspectRatio,
    CameraMovement,
    MotionType,
    MusicSource,
    NarrationSource,
    ProjectStatus,
    ScriptStatus,
    ShotMood,
    ShotStatus,
    VideoProvider,
    VariationType,
    VideoStatus,
    VisualStyle,
)
from studio.models.base import BaseUUIDModel, utc_now
from studio.models.project import Project, ProjectAudio, ProjectBase
from studio.models.script import ParsedScene, ParsedScript, ParsedShot, Script
from studio.models.scene import (
    MAX_SHOT_DURATION,
    MIN_SHOT_DURATION,
    Scene,
    Shot,
    ShotBase,
)
from studio.models.generation import ImageGeneration, VideoGeneration
from studio.models.character import (
    Character,
    CharacterReferenceImage,
    CharacterVariation,
)

__all__ = [
    # Enums
    "AspectRatio",
    "CameraMovement",
    "MotionType",
    "MusicSource",
    "NarrationSource",
    "ProjectStatus",
    "ScriptStatus",
    "ShotMood",
    "ShotStatus",
    "VideoProvider",
    "VariationType",
    "VideoStatus",
    "VisualStyle",
    # Base
    "BaseUUIDModel",
    "utc_now",
    # Project
    "Project",
    "ProjectAudio",
    "ProjectBase",
    # Script
    "Script",
    "ParsedScript",
    "ParsedScene",
    "ParsedShot",
    # Scenes and shots
    "Scene",
    "Shot",
    "ShotBase",
    "MIN_SHOT_DURATION",
    "MAX_SHOT_DURATION",
    # Generations
    "ImageGeneration",
    "VideoGeneration",
    # Character library
    "Character",
    "CharacterVariation",
    "CharacterReferenceImage",
]
