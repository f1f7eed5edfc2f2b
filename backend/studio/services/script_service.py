"""
Script ingestion: parse, version and replace a project's shot list.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from studio.crud.project import project_crud
from studio.crud.shot import shot_crud
from studio.exceptions import NotFoundError
from studio.models import (
    MAX_SHOT_DURATION,
    MIN_SHOT_DURATION,
    CameraMovement,
    ParsedScript,
    ProjectStatus,
    Script,
    ScriptStatus,
    Shot,
    ShotMood,
    ShotStatus,
)
from studio.services.script_parser import ScriptParser, script_parser
from studio.utils.logging import get_logger

logger = get_logger(__name__)


def map_camera_movement(value: Optional[str]) -> CameraMovement:
    try:
        return CameraMovement((value or "").strip().upper())
    except ValueError:
        return CameraMovement.STATIC


def map_mood(value: Optional[str]) -> ShotMood:
    try:
        return ShotMood((value or "").strip().upper())
    except ValueError:
        return ShotMood.DRAMATIC


def clamp_duration(value: float) -> float:
    return min(max(float(value), MIN_SHOT_DURATION), MAX_SHOT_DURATION)


class ScriptService:
    def __init__(self, parser: Optional[ScriptParser] = None):
        self.parser = parser or script_parser

    async def ingest(
        self,
        session: AsyncSession,
        project_id: UUID,
        raw_text: str,
        source_file_name: Optional[str] = None,
    ) -> Script:
        """
        Parse a script and replace the project's scenes and shots with it.

        Every call stores a new script version; existing shots and their
        generations are discarded.
        """
        project = await project_crud.get_by_id(session, project_id)
        if not project:
            raise NotFoundError("Project", project_id)

        latest = await project_crud.get_latest_script(session, project_id)
        version = (latest.version if latest else 0) + 1

        parsed = await self.parser.parse(raw_text)

        script = Script(
            project_id=project_id,
            version=version,
            raw_text=raw_text,
            source_file_name=source_file_name,
            parsed_data=parsed.model_dump(mode="json"),
            status=ScriptStatus.PARSED,
        )
        session.add(script)

        await shot_crud.delete_for_project(session, project_id, commit=False)
        shot_count = await self._create_shots(session, project_id, parsed)

        project.status = ProjectStatus.IN_PROGRESS
        session.add(project)
        await session.commit()
        await session.refresh(script)

        logger.info(
            "Script ingested",
            project_id=str(project_id),
            version=version,
            scenes=len(parsed.scenes),
            shots=shot_count,
        )
        return script

    async def _create_shots(
        self, session: AsyncSession, project_id: UUID, parsed: ParsedScript
    ) -> int:
        shot_index = 0
        for scene_position, scene_data in enumerate(parsed.scenes):
            scene = await shot_crud.create_scene(
                session,
                project_id=project_id,
                scene_index=scene_position,
                title=scene_data.title,
                location=scene_data.location,
            )
            for shot_data in scene_data.shots:
                session.add(
                    Shot(
                        project_id=project_id,
                        scene_id=scene.id,
                        shot_index=shot_index,
                        description=shot_data.description,
                        camera_movement=map_camera_movement(shot_data.camera_movement),
                        mood=map_mood(shot_data.mood),
                        duration=clamp_duration(shot_data.duration),
                        status=ShotStatus.PENDING,
                    )
                )
                shot_index += 1
        await session.flush()
        return shot_index


script_service = ScriptService()
