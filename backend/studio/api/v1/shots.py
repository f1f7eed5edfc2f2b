"""Shot endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from studio.database import get_session
from studio.schemas.shot import ShotResponse, ShotUpdateRequest
from studio.services.shot_service import shot_service

router = APIRouter()


@router.get("/{shot_id}", response_model=ShotResponse)
async def get_shot(shot_id: UUID, session: AsyncSession = Depends(get_session)):
    shot = await shot_service.get_shot(session, shot_id)
    return ShotResponse.model_validate(shot)


@router.patch("/{shot_id}", response_model=ShotResponse)
async def update_shot(
    shot_id: UUID,
    request: ShotUpdateRequest,
    session: AsyncSession = Depends(get_session),
):
    shot = await shot_service.update_shot(
        session, shot_id, request.model_dump(exclude_unset=True)
    )
    return ShotResponse.model_validate(shot)


@router.delete("/{shot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shot(shot_id: UUID, session: AsyncSession = Depends(get_session)):
    """Delete a shot and its generations; later shots move up one index."""
    await shot_service.delete_shot(session, shot_id)
