"""Character library endpoints."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from studio.database import get_session
from studio.schemas.character import (
    CharacterCreateRequest,
    CharacterResponse,
    CharacterUpdateRequest,
    ReferenceImageRequest,
    ReferenceImageResponse,
    ReferenceImageUpdateRequest,
    VariationCreateRequest,
    VariationResponse,
)
from studio.services.character_service import character_service

router = APIRouter()


@router.get("", response_model=List[CharacterResponse])
async def list_characters(session: AsyncSession = Depends(get_session)):
    characters = await character_service.list_characters(session)
    return [CharacterResponse.model_validate(c) for c in characters]


@router.post("", response_model=CharacterResponse, status_code=status.HTTP_201_CREATED)
async def create_character(
    request: CharacterCreateRequest,
    session: AsyncSession = Depends(get_session),
):
    character = await character_service.create_character(
        session,
        request.name,
        request.variation_type,
        custom_label=request.custom_label,
        description=request.description,
    )
    return CharacterResponse.model_validate(character)


@router.get("/{character_id}", response_model=CharacterResponse)
async def get_character(character_id: UUID, session: AsyncSession = Depends(get_session)):
    character = await character_service.get_character(session, character_id)
    return CharacterResponse.model_validate(character)


@router.patch("/{character_id}", response_model=CharacterResponse)
async def update_character(
    character_id: UUID,
    request: CharacterUpdateRequest,
    session: AsyncSession = Depends(get_session),
):
    character = await character_service.update_character(
        session,
        character_id,
        name=request.name,
        descriptions={v.id: v.description for v in request.variations},
    )
    return CharacterResponse.model_validate(character)


@router.delete("/{character_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_character(character_id: UUID, session: AsyncSession = Depends(get_session)):
    await character_service.delete_character(session, character_id)


@router.post(
    "/{character_id}/variations",
    response_model=VariationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_variation(
    character_id: UUID,
    request: VariationCreateRequest,
    session: AsyncSession = Depends(get_session),
):
    variation = await character_service.add_variation(
        session,
        character_id,
        request.type,
        custom_label=request.custom_label,
        description=request.description,
    )
    return VariationResponse.model_validate(variation)


@router.post(
    "/variations/{variation_id}/images",
    response_model=ReferenceImageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_reference_image(
    variation_id: UUID,
    request: ReferenceImageRequest,
    session: AsyncSession = Depends(get_session),
):
    """Attach a reference image; the first one of a variation is primary."""
    image = await character_service.add_reference_image(session, variation_id, request.image_url)
    return ReferenceImageResponse.model_validate(image)


@router.patch("/images/{image_id}", response_model=ReferenceImageResponse)
async def update_reference_image(
    image_id: UUID,
    request: ReferenceImageUpdateRequest,
    session: AsyncSession = Depends(get_session),
):
    if request.is_primary:
        image = await character_service.set_primary_image(session, image_id)
    else:
        image = await character_service.get_reference_image(session, image_id)
    return ReferenceImageResponse.model_validate(image)


@router.delete("/images/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reference_image(image_id: UUID, session: AsyncSession = Depends(get_session)):
    """Delete an image; a deleted primary hands over to the oldest remaining one."""
    await character_service.delete_reference_image(session, image_id)
