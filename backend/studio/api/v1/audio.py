"""Project audio endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from studio.crud.project import project_crud
from studio.database import get_session
from studio.schemas.audio import AudioResponse, AudioUpdateRequest, MusicRequest, TTSRequest
from studio.services.audio_service import audio_service
from studio.services.music_service import MUSIC_STYLES
from studio.services.tts_service import tts_service

router = APIRouter()


@router.get("/voices")
async def list_voices():
    """Available narration voices."""
    return await tts_service.get_voices()


@router.get("/music/styles")
async def list_music_styles():
    """Preset music prompts by name."""
    return MUSIC_STYLES


@router.get("/projects/{project_id}/audio", response_model=AudioResponse)
async def get_audio(project_id: UUID, session: AsyncSession = Depends(get_session)):
    audio = await project_crud.get_audio(session, project_id)
    if not audio:
        raise HTTPException(status_code=404, detail="Audio not found")
    return AudioResponse.model_validate(audio)


@router.put("/projects/{project_id}/audio", response_model=AudioResponse)
async def set_audio(
    project_id: UUID,
    request: AudioUpdateRequest,
    session: AsyncSession = Depends(get_session),
):
    audio = await audio_service.set_audio(
        session,
        project_id,
        narration_url=request.narration_url,
        narration_source=request.narration_source,
        music_url=request.music_url,
        music_source=request.music_source,
    )
    return AudioResponse.model_validate(audio)


@router.post("/projects/{project_id}/audio/tts", response_model=AudioResponse)
async def generate_narration(
    project_id: UUID,
    request: TTSRequest,
    session: AsyncSession = Depends(get_session),
):
    """Synthesize narration and attach it to the project."""
    audio = await audio_service.generate_narration(
        session, project_id, text=request.text, voice_id=request.voice_id
    )
    return AudioResponse.model_validate(audio)


@router.post("/projects/{project_id}/audio/music", response_model=AudioResponse)
async def generate_music(
    project_id: UUID,
    request: MusicRequest,
    session: AsyncSession = Depends(get_session),
):
    """Generate background music and attach it to the project."""
    audio = await audio_service.generate_music(
        session,
        project_id,
        style=request.style,
        prompt=request.custom_prompt,
        duration=request.duration,
    )
    return AudioResponse.model_validate(audio)
