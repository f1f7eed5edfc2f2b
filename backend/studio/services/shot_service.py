"""
Shot editing: field updates, deletion and timeline reordering.
"""
from typing import Any, Dict, List, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from studio.crud.project import project_crud
from studio.crud.shot import shot_crud
from studio.exceptions import NotFoundError, ValidationError
from studio.models import (
    MAX_SHOT_DURATION,
    MIN_SHOT_DURATION,
    CameraMovement,
    Shot,
    ShotMood,
    ShotStatus,
    VisualStyle,
)
from studio.utils.logging import get_logger

logger = get_logger(__name__)

_ENUM_FIELDS = {
    "camera_movement": CameraMovement,
    "mood": ShotMood,
    "visual_style": VisualStyle,
    "status": ShotStatus,
}
EDITABLE_FIELDS = {"description", "duration", *_ENUM_FIELDS}


def validate_shot_update(data: Dict[str, Any]) -> Dict[str, Any]:
    """Check and coerce a partial shot update; unknown fields are rejected."""
    unknown = set(data) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown shot fields: {', '.join(sorted(unknown))}")

    clean: Dict[str, Any] = {}
    for field, value in data.items():
        if value is None:
            continue
        if field == "duration":
            duration = float(value)
            if not MIN_SHOT_DURATION <= duration <= MAX_SHOT_DURATION:
                raise ValidationError(
                    f"Duration must be between {MIN_SHOT_DURATION} and {MAX_SHOT_DURATION} seconds"
                )
            clean[field] = duration
        elif field == "description":
            if not str(value).strip():
                raise ValidationError("Description cannot be empty")
            clean[field] = str(value).strip()
        else:
            enum_cls = _ENUM_FIELDS[field]
            try:
                clean[field] = enum_cls(value)
            except ValueError:
                raise ValidationError(f"Invalid {field}: {value}")
    return clean


class ShotService:
    async def list_shots(
        self, session: AsyncSession, project_id: UUID
    ) -> List[Shot]:
        if not await project_crud.get_by_id(session, project_id):
            raise NotFoundError("Project", project_id)
        return await shot_crud.list_by_project(session, project_id, with_media=True)

    async def get_shot(self, session: AsyncSession, shot_id: UUID) -> Shot:
        shot = await shot_crud.get_with_media(session, shot_id)
        if not shot:
            raise NotFoundError("Shot", shot_id)
        return shot

    async def update_shot(
        self, session: AsyncSession, shot_id: UUID, data: Dict[str, Any]
    ) -> Shot:
        shot = await shot_crud.get(session, shot_id)
        if not shot:
            raise NotFoundError("Shot", shot_id)
        await shot_crud.update(session, shot, validate_shot_update(data))
        return await self.get_shot(session, shot_id)

    async def delete_shot(self, session: AsyncSession, shot_id: UUID) -> None:
        shot = await shot_crud.get(session, shot_id)
        if not shot:
            raise NotFoundError("Shot", shot_id)
        await shot_crud.delete(session, shot)
        logger.info("Shot deleted", shot_id=str(shot_id), project_id=str(shot.project_id))

    async def reorder_shots(
        self, session: AsyncSession, project_id: UUID, shot_ids: Sequence[UUID]
    ) -> List[Shot]:
        """
        Reassign shot indices to follow shot_ids.

        shot_ids must name every shot of the project exactly once.
        """
        if not await project_crud.get_by_id(session, project_id):
            raise NotFoundError("Project", project_id)

        shots = await shot_crud.list_by_project(session, project_id)
        if len(shot_ids) != len(set(shot_ids)) or set(shot_ids) != {s.id for s in shots}:
            raise ValidationError("shot_ids must list every shot of the project exactly once")

        await shot_crud.reindex(session, shot_ids, shots)
        logger.info("Shots reordered", project_id=str(project_id), count=len(shots))
        return await shot_crud.list_by_project(session, project_id, with_media=True)


shot_service = ShotService()
