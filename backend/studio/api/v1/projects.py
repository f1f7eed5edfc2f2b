"""Project management endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from studio.crud.project import project_crud
from studio.crud.shot import shot_crud
from studio.database import get_session
from studio.models import ProjectStatus
from studio.schemas.audio import AudioResponse
from studio.schemas.project import (
    ProjectCreateRequest,
    ProjectDetailResponse,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdateRequest,
    SceneResponse,
    ScriptIngestRequest,
    ScriptResponse,
)
from studio.schemas.shot import ShotReorderRequest, ShotResponse
from studio.services.script_service import script_service
from studio.services.shot_service import shot_service
from studio.utils.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    request: ProjectCreateRequest,
    session: AsyncSession = Depends(get_session),
):
    project = await project_crud.create(
        session=session, title=request.title, aspect_ratio=request.aspect_ratio
    )
    logger.info("Project created", project_id=str(project.id))
    return ProjectResponse.model_validate(project)


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status_filter: Optional[ProjectStatus] = Query(None, alias="status"),
    session: AsyncSession = Depends(get_session),
):
    """List projects, newest first."""
    items, total = await project_crud.list_all(
        session=session, page=page, page_size=page_size, status=status_filter
    )
    return ProjectListResponse(
        items=[ProjectResponse.model_validate(p) for p in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(project_id: UUID, session: AsyncSession = Depends(get_session)):
    """Get project details with scenes, shots and audio."""
    project = await project_crud.get_with_relations(session=session, project_id=project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    shots = await shot_crud.list_by_project(session, project_id, with_media=True)
    base = ProjectResponse.model_validate(project)
    return ProjectDetailResponse(
        **base.model_dump(),
        scenes=[
            SceneResponse.model_validate(scene)
            for scene in sorted(project.scenes, key=lambda s: s.scene_index)
        ],
        shots=[ShotResponse.model_validate(shot) for shot in shots],
        audio=AudioResponse.model_validate(project.audio) if project.audio else None,
    )


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: UUID,
    request: ProjectUpdateRequest,
    session: AsyncSession = Depends(get_session),
):
    project = await project_crud.get_by_id(session=session, project_id=project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    project = await project_crud.update(
        session,
        project,
        title=request.title,
        aspect_ratio=request.aspect_ratio,
        status=request.status,
    )
    return ProjectResponse.model_validate(project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: UUID, session: AsyncSession = Depends(get_session)):
    """Delete a project with its script versions, shots, generations and audio."""
    project = await project_crud.get_by_id(session=session, project_id=project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    await project_crud.delete(session, project_id)
    logger.info("Project deleted", project_id=str(project_id))


@router.post("/{project_id}/script", response_model=ScriptResponse)
async def ingest_script(
    project_id: UUID,
    request: ScriptIngestRequest,
    session: AsyncSession = Depends(get_session),
):
    """
    Parse a script into scenes and shots.

    Replaces every existing shot of the project.
    """
    script = await script_service.ingest(
        session,
        project_id,
        raw_text=request.script_text,
        source_file_name=request.source_file_name,
    )
    return ScriptResponse.model_validate(script)


@router.get("/{project_id}/script", response_model=ScriptResponse)
async def get_latest_script(project_id: UUID, session: AsyncSession = Depends(get_session)):
    script = await project_crud.get_latest_script(session, project_id)
    if not script:
        raise HTTPException(status_code=404, detail="Script not found")
    return ScriptResponse.model_validate(script)


@router.get("/{project_id}/shots", response_model=List[ShotResponse])
async def list_shots(project_id: UUID, session: AsyncSession = Depends(get_session)):
    shots = await shot_service.list_shots(session, project_id)
    return [ShotResponse.model_validate(shot) for shot in shots]


@router.post("/{project_id}/shots/reorder", response_model=List[ShotResponse])
async def reorder_shots(
    project_id: UUID,
    request: ShotReorderRequest,
    session: AsyncSession = Depends(get_session),
):
    """Reassign shot indices in the given order; every shot must be listed."""
    shots = await shot_service.reorder_shots(session, project_id, request.shot_ids)
    return [ShotResponse.model_validate(shot) for shot in shots]
