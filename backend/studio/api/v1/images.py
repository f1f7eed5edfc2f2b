"""Image generation and selection endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from studio.database import get_session
from studio.schemas.generation import (
    DeleteResponse,
    ImageBatchResponse,
    ImageGenerateRequest,
    ImageResponse,
    ImageSelectRequest,
)
from studio.services.image_generation_service import image_generation_service
from studio.services.selection_service import selection_service

router = APIRouter()


@router.post("/generate", response_model=ImageBatchResponse)
async def generate_images(
    request: ImageGenerateRequest,
    session: AsyncSession = Depends(get_session),
):
    """
    Fill a shot's free image slots in parallel.

    Partial failure still returns 200 with the failed count; only a batch
    with no successful image is an error.
    """
    result = await image_generation_service.generate_images(
        session,
        request.shot_id,
        count=request.count,
        regenerate=request.regenerate,
        custom_prompt=request.custom_prompt,
        character_variation_ids=request.character_variation_ids,
    )
    return ImageBatchResponse(
        generated=result.generated,
        failed=result.failed,
        images=[ImageResponse.model_validate(image) for image in result.images],
    )


@router.post("/select", response_model=ImageResponse)
async def select_image(
    request: ImageSelectRequest,
    session: AsyncSession = Depends(get_session),
):
    image = await selection_service.select_image(session, request.shot_id, request.image_id)
    return ImageResponse.model_validate(image)


@router.delete("/{image_id}", response_model=DeleteResponse)
async def delete_image(image_id: UUID, session: AsyncSession = Depends(get_session)):
    promoted_id = await selection_service.delete_image(session, image_id)
    return DeleteResponse(deleted=image_id, promoted_id=promoted_id)
