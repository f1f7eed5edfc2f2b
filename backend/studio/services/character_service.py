"""
Character library: recurring characters and the descriptions that keep them
consistent across generated images.
"""
import time
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from studio.crud.character import character_crud
from studio.exceptions import NotFoundError, ValidationError
from studio.models import (
    Character,
    CharacterReferenceImage,
    CharacterVariation,
    VariationType,
)
from studio.services.storage_service import (
    StorageService,
    extract_key,
    is_data_uri,
    storage_service,
)
from studio.utils.logging import get_logger

logger = get_logger(__name__)

_EXTENSIONS = {"image/png": "png", "image/jpeg": "jpg", "image/webp": "webp"}


def character_prompt(variation: CharacterVariation) -> Optional[str]:
    """Prompt fragment for one variation, None when it has no description."""
    description = (variation.description or "").strip()
    if not description:
        return None
    name = variation.character.name if variation.character else None
    return f"{name}: {description}" if name else description


class CharacterService:
    def __init__(self, storage: Optional[StorageService] = None):
        self.storage = storage or storage_service

    async def get_character(self, session: AsyncSession, character_id: UUID) -> Character:
        character = await character_crud.get(session, character_id)
        if not character:
            raise NotFoundError("Character", character_id)
        return character

    async def list_characters(self, session: AsyncSession) -> List[Character]:
        return await character_crud.list_all(session)

    async def create_character(
        self,
        session: AsyncSession,
        name: str,
        variation_type: VariationType = VariationType.ADULT,
        custom_label: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Character:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Character name is required")
        variation_type = VariationType(variation_type)

        character = await character_crud.create(
            session,
            name,
            variation_type,
            custom_label=custom_label if variation_type == VariationType.CUSTOM else None,
            description=description,
        )
        logger.info("Character created", character_id=str(character.id), name=name)
        return character

    async def update_character(
        self,
        session: AsyncSession,
        character_id: UUID,
        name: Optional[str] = None,
        descriptions: Optional[Dict[UUID, Optional[str]]] = None,
    ) -> Character:
        """Rename a character and/or set descriptions of its variations."""
        character = await self.get_character(session, character_id)
        if name is not None:
            if not name.strip():
                raise ValidationError("Character name cannot be empty")
            await character_crud.rename(session, character, name.strip())
        if descriptions:
            await character_crud.update_descriptions(session, character_id, descriptions)
        return await self.get_character(session, character_id)

    async def delete_character(self, session: AsyncSession, character_id: UUID) -> None:
        await self.get_character(session, character_id)
        await character_crud.delete(session, character_id)
        logger.info("Character deleted", character_id=str(character_id))

    async def add_variation(
        self,
        session: AsyncSession,
        character_id: UUID,
        variation_type: VariationType,
        custom_label: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CharacterVariation:
        await self.get_character(session, character_id)
        variation_type = VariationType(variation_type)
        return await character_crud.add_variation(
            session,
            character_id,
            variation_type,
            custom_label=custom_label if variation_type == VariationType.CUSTOM else None,
            description=description,
        )

    async def add_reference_image(
        self, session: AsyncSession, variation_id: UUID, image_url: str
    ) -> CharacterReferenceImage:
        """
        Attach a reference image given as a URL or data URI.

        Media is copied into storage under characters/<id>/ when storage is
        configured; otherwise the URL is kept as given.
        """
        variation = await character_crud.get_variation(session, variation_id)
        if not variation:
            raise NotFoundError("Variation", variation_id)
        if not image_url or not (
            is_data_uri(image_url) or extract_key(image_url) or image_url.startswith("http")
        ):
            raise ValidationError("image_url must be an http(s) URL or a data URI")

        content_type = "image/png"
        if is_data_uri(image_url):
            content_type = image_url[5:].split(";", 1)[0].split(",", 1)[0] or content_type
        extension = _EXTENSIONS.get(content_type, "png")
        timestamp = int(time.time() * 1000)
        key = f"characters/{variation.character_id}/{variation_id}_{timestamp}.{extension}"
        stored_url = await self.storage.rehost(image_url, key, content_type)

        image = await character_crud.add_image(session, variation_id, stored_url)
        logger.info(
            "Reference image added",
            variation_id=str(variation_id),
            primary=image.is_primary,
        )
        return image

    async def get_reference_image(
        self, session: AsyncSession, image_id: UUID
    ) -> CharacterReferenceImage:
        image = await character_crud.get_image(session, image_id)
        if not image:
            raise NotFoundError("Reference image", image_id)
        return image

    async def set_primary_image(
        self, session: AsyncSession, image_id: UUID
    ) -> CharacterReferenceImage:
        image = await self.get_reference_image(session, image_id)
        await character_crud.set_primary(session, image.variation_id, image.id)
        return await character_crud.get_image(session, image_id)

    async def delete_reference_image(self, session: AsyncSession, image_id: UUID) -> None:
        image = await self.get_reference_image(session, image_id)
        image_url = image.image_url
        await character_crud.delete_image(session, image)
        await self.storage.discard(image_url)

    async def describe(
        self, session: AsyncSession, variation_ids: Sequence[UUID]
    ) -> List[str]:
        """
        Prompt fragments for the given variations, in order.

        Unknown ids raise NotFoundError; variations without a description
        contribute nothing.
        """
        variations = await character_crud.list_variations(session, variation_ids)
        found = {variation.id for variation in variations}
        missing = [v for v in variation_ids if v not in found]
        if missing:
            raise NotFoundError("Variation", missing[0])
        return [text for text in map(character_prompt, variations) if text]


character_service = CharacterService()
