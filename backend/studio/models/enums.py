"""
Database ENUM types.
These enums are used for type safety in SQLModel classes and API schemas.
"""
from enum import Enum


class ProjectStatus(str, Enum):
    """Project workflow status states."""
    DRAFT = "DRAFT"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class AspectRatio(str, Enum):
    """Output frame orientation."""
    LANDSCAPE = "LANDSCAPE"
    PORTRAIT = "PORTRAIT"


class ScriptStatus(str, Enum):
    PENDING = "PENDING"
    PARSED = "PARSED"


class CameraMovement(str, Enum):
    STATIC = "STATIC"
    PAN_LEFT = "PAN_LEFT"
    PAN_RIGHT = "PAN_RIGHT"
    ZOOM_IN = "ZOOM_IN"
    ZOOM_OUT = "ZOOM_OUT"
    PUSH_IN = "PUSH_IN"
    HAND_HELD = "HAND_HELD"
    CUSTOM = "CUSTOM"


class ShotMood(str, Enum):
    DRAMATIC = "DRAMATIC"
    PEACEFUL = "PEACEFUL"
    APOCALYPTIC = "APOCALYPTIC"
    DIVINE = "DIVINE"
    FOREBODING = "FOREBODING"
    ACTION = "ACTION"


class VisualStyle(str, Enum):
    PHOTOREALISTIC = "PHOTOREALISTIC"
    HYPERREALISTIC_CINEMATIC = "HYPERREALISTIC_CINEMATIC"
    DRAMATIC_REALISM = "DRAMATIC_REALISM"
    EPIC_FILM_STILL = "EPIC_FILM_STILL"
    PAINTERLY_ARTISTIC = "PAINTERLY_ARTISTIC"
    ANIMATED_STYLIZED = "ANIMATED_STYLIZED"


class ShotStatus(str, Enum):
    """Shot approval state."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"


class VideoProvider(str, Enum):
    """Image-to-video back ends."""
    MINIMAX = "MINIMAX"
    RUNWAY = "RUNWAY"


class MotionType(str, Enum):
    """Requested camera motion for image-to-video generation."""
    SUBTLE = "SUBTLE"
    PAN_LEFT = "PAN_LEFT"
    PAN_RIGHT = "PAN_RIGHT"
    ZOOM_IN = "ZOOM_IN"
    ZOOM_OUT = "ZOOM_OUT"
    PUSH_IN = "PUSH_IN"
    HAND_HELD = "HAND_HELD"
    CUSTOM = "CUSTOM"


class VideoStatus(str, Enum):
    """Canonical generation job state shared by every provider."""
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (VideoStatus.COMPLETED, VideoStatus.FAILED)


class NarrationSource(str, Enum):
    TTS = "TTS"
    UPLOAD = "UPLOAD"
    RECORDED = "RECORDED"


class MusicSource(str, Enum):
    GENERATED = "GENERATED"
    UPLOAD = "UPLOAD"


class VariationType(str, Enum):
    """Age or look variant of a recurring character."""
    YOUNG = "YOUNG"
    ADULT = "ADULT"
    OLD = "OLD"
    CUSTOM = "CUSTOM"
