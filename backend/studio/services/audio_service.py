"""
Project narration and music tracks.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from studio.config import settings
from studio.crud.project import project_crud
from studio.exceptions import NotFoundError, ValidationError
from studio.models import MusicSource, NarrationSource, ProjectAudio
from studio.services.music_service import MusicService, music_service, resolve_music_prompt
from studio.services.tts_service import TTSService, tts_service
from studio.utils.logging import get_logger

logger = get_logger(__name__)


class AudioService:
    def __init__(
        self,
        tts: Optional[TTSService] = None,
        music: Optional[MusicService] = None,
    ):
        self.tts = tts or tts_service
        self.music = music or music_service

    async def set_audio(
        self,
        session: AsyncSession,
        project_id: UUID,
        narration_url: Optional[str] = None,
        narration_source: Optional[NarrationSource] = None,
        music_url: Optional[str] = None,
        music_source: Optional[MusicSource] = None,
    ) -> ProjectAudio:
        """Attach narration and/or music; a missing URL leaves that track as is."""
        if not await project_crud.get_by_id(session, project_id):
            raise NotFoundError("Project", project_id)
        if narration_url is None and music_url is None:
            raise ValidationError("Provide a narration_url or a music_url")

        audio = await project_crud.upsert_audio(
            session,
            project_id,
            narration_url=narration_url,
            narration_source=narration_source,
            music_url=music_url,
            music_source=music_source,
        )
        logger.info(
            "Project audio updated",
            project_id=str(project_id),
            narration=narration_url is not None,
            music=music_url is not None,
        )
        return audio

    async def generate_narration(
        self,
        session: AsyncSession,
        project_id: UUID,
        text: str,
        voice_id: Optional[str] = None,
    ) -> ProjectAudio:
        if not await project_crud.get_by_id(session, project_id):
            raise NotFoundError("Project", project_id)

        url = await self.tts.generate_narration(project_id, text, voice_id)
        return await project_crud.upsert_audio(
            session,
            project_id,
            narration_url=url,
            narration_source=NarrationSource.TTS,
        )

    async def generate_music(
        self,
        session: AsyncSession,
        project_id: UUID,
        style: Optional[str] = None,
        prompt: Optional[str] = None,
        duration: Optional[int] = None,
    ) -> ProjectAudio:
        """Generate a music bed from a preset style or a custom prompt and attach it."""
        if not await project_crud.get_by_id(session, project_id):
            raise NotFoundError("Project", project_id)

        try:
            music_prompt = resolve_music_prompt(style, prompt)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        url = await self.music.generate_music(
            project_id, music_prompt, duration or settings.music_default_duration
        )
        return await project_crud.upsert_audio(
            session,
            project_id,
            music_url=url,
            music_source=MusicSource.GENERATED,
        )


audio_service = AudioService()
