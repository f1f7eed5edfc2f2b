"""Video generation, status and selection endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from studio.crud.generation import video_generation_crud
from studio.crud.project import project_crud
from studio.database import get_session
from studio.models import VideoStatus
from studio.schemas.generation import (
    DeleteResponse,
    ProjectVideoStatusResponse,
    VideoGenerateRequest,
    VideoResponse,
    VideoSelectRequest,
    VideoStatusUpdateRequest,
)
from studio.services.selection_service import selection_service
from studio.services.video_generation_service import video_generation_service
from studio.services.video_poller import get_video_poller

router = APIRouter()


@router.post("/videos/generate", response_model=VideoResponse)
async def generate_video(
    request: VideoGenerateRequest,
    session: AsyncSession = Depends(get_session),
):
    """
    Submit an image-to-video job.

    Returns the record as PROCESSING, or FAILED with the provider's error
    message when the submission was rejected.
    """
    video = await video_generation_service.submit_video_job(
        session,
        shot_id=request.shot_id,
        image_id=request.image_id,
        provider=request.provider,
        motion_type=request.motion_type,
        custom_prompt=request.custom_prompt,
    )
    if video.status == VideoStatus.PROCESSING:
        get_video_poller().wake()
    return VideoResponse.model_validate(video)


@router.post("/videos/select", response_model=VideoResponse)
async def select_video(
    request: VideoSelectRequest,
    session: AsyncSession = Depends(get_session),
):
    video = await selection_service.select_video(session, request.shot_id, request.video_id)
    return VideoResponse.model_validate(video)


@router.get("/videos/{video_id}", response_model=VideoResponse)
async def get_video(video_id: UUID, session: AsyncSession = Depends(get_session)):
    video = await video_generation_crud.get(session, video_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    return VideoResponse.model_validate(video)


@router.delete("/videos/{video_id}", response_model=DeleteResponse)
async def delete_video(video_id: UUID, session: AsyncSession = Depends(get_session)):
    promoted_id = await selection_service.delete_video(session, video_id)
    return DeleteResponse(deleted=video_id, promoted_id=promoted_id)


@router.get("/videos/{video_id}/status", response_model=VideoResponse)
async def refresh_video_status(video_id: UUID, session: AsyncSession = Depends(get_session)):
    """Poll the provider once for an in-flight video and return the record."""
    video = await video_generation_crud.get(session, video_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    video = await video_generation_service.refresh_video(session, video)
    return VideoResponse.model_validate(video)


@router.post("/videos/{video_id}/status", response_model=VideoResponse)
async def update_video_status(
    video_id: UUID,
    request: VideoStatusUpdateRequest,
    session: AsyncSession = Depends(get_session),
):
    """Apply a provider webhook or manual status report."""
    video = await video_generation_service.apply_status_update(
        session,
        video_id,
        status=request.status,
        video_url=request.video_url,
        error=request.error,
    )
    return VideoResponse.model_validate(video)


@router.post("/videos/{video_id}/retry", response_model=VideoResponse)
async def retry_video(video_id: UUID, session: AsyncSession = Depends(get_session)):
    """Start a new attempt from a FAILED video's inputs."""
    video = await video_generation_service.retry_video(session, video_id)
    if video.status == VideoStatus.PROCESSING:
        get_video_poller().wake()
    return VideoResponse.model_validate(video)


@router.get("/projects/{project_id}/videos/status", response_model=ProjectVideoStatusResponse)
async def project_video_status(project_id: UUID, session: AsyncSession = Depends(get_session)):
    """
    Refresh every in-flight video of a project once.

    Clients poll this every few seconds and stop when in_flight is 0.
    """
    if not await project_crud.get_by_id(session, project_id):
        raise HTTPException(status_code=404, detail="Project not found")

    in_flight = await video_generation_service.refresh_in_flight(session, project_id)
    videos = await video_generation_service.project_videos(session, project_id)
    return ProjectVideoStatusResponse(
        videos=[VideoResponse.model_validate(v) for v in videos],
        in_flight=in_flight,
    )
