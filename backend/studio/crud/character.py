"""Character library CRUD operations."""

from typing import Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from studio.models import (
    Character,
    CharacterReferenceImage,
    CharacterVariation,
    VariationType,
)


class CharacterCRUD:
    """CRUD operations for characters, their variations and reference images."""

    async def get(self, session: AsyncSession, character_id: UUID) -> Optional[Character]:
        """Get a character with variations and reference images loaded."""
        result = await session.execute(
            select(Character)
            .options(
                selectinload(Character.variations).selectinload(CharacterVariation.images)
            )
            .where(Character.id == character_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_all(self, session: AsyncSession) -> List[Character]:
        result = await session.execute(
            select(Character)
            .options(
                selectinload(Character.variations).selectinload(CharacterVariation.images)
            )
            .order_by(Character.name.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def create(
        self,
        session: AsyncSession,
        name: str,
        variation_type: VariationType = VariationType.ADULT,
        custom_label: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Character:
        """Create a character with its first variation."""
        character = Character(name=name)
        session.add(character)
        await session.flush()
        session.add(
            CharacterVariation(
                character_id=character.id,
                type=variation_type,
                custom_label=custom_label,
                description=description,
            )
        )
        await session.commit()
        return await self.get(session, character.id)

    async def rename(self, session: AsyncSession, character: Character, name: str) -> None:
        character.name = name
        session.add(character)
        await session.commit()

    async def update_descriptions(
        self,
        session: AsyncSession,
        character_id: UUID,
        descriptions: Dict[UUID, Optional[str]],
    ) -> int:
        """Set variation descriptions; ids of other characters are ignored."""
        updated = 0
        for variation_id, description in descriptions.items():
            result = await session.execute(
                update(CharacterVariation)
                .where(
                    CharacterVariation.id == variation_id,
                    CharacterVariation.character_id == character_id,
                )
                .values(description=description)
            )
            updated += result.rowcount
        await session.commit()
        return updated

    async def delete(self, session: AsyncSession, character_id: UUID) -> None:
        """Delete a character, its variations and their reference images."""
        variation_ids = select(CharacterVariation.id).where(
            CharacterVariation.character_id == character_id
        )
        await session.execute(
            delete(CharacterReferenceImage).where(
                CharacterReferenceImage.variation_id.in_(variation_ids)
            )
        )
        await session.execute(
            delete(CharacterVariation).where(CharacterVariation.character_id == character_id)
        )
        await session.execute(delete(Character).where(Character.id == character_id))
        await session.commit()

    # --- variations ---

    async def get_variation(
        self, session: AsyncSession, variation_id: UUID
    ) -> Optional[CharacterVariation]:
        result = await session.execute(
            select(CharacterVariation)
            .options(
                selectinload(CharacterVariation.character),
                selectinload(CharacterVariation.images),
            )
            .where(CharacterVariation.id == variation_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_variations(
        self, session: AsyncSession, variation_ids: Sequence[UUID]
    ) -> List[CharacterVariation]:
        """Variations by id with their characters, in the order given."""
        if not variation_ids:
            return []
        result = await session.execute(
            select(CharacterVariation)
            .options(selectinload(CharacterVariation.character))
            .where(CharacterVariation.id.in_(variation_ids))
            .execution_options(populate_existing=True)
        )
        by_id = {variation.id: variation for variation in result.scalars().all()}
        return [by_id[v] for v in variation_ids if v in by_id]

    async def add_variation(
        self,
        session: AsyncSession,
        character_id: UUID,
        variation_type: VariationType,
        custom_label: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CharacterVariation:
        variation = CharacterVariation(
            character_id=character_id,
            type=variation_type,
            custom_label=custom_label,
            description=description,
        )
        session.add(variation)
        await session.commit()
        return await self.get_variation(session, variation.id)

    # --- reference images ---

    async def get_image(
        self, session: AsyncSession, image_id: UUID
    ) -> Optional[CharacterReferenceImage]:
        result = await session.execute(
            select(CharacterReferenceImage)
            .where(CharacterReferenceImage.id == image_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def count_images(self, session: AsyncSession, variation_id: UUID) -> int:
        result = await session.execute(
            select(func.count(CharacterReferenceImage.id)).where(
                CharacterReferenceImage.variation_id == variation_id
            )
        )
        return result.scalar() or 0

    async def add_image(
        self, session: AsyncSession, variation_id: UUID, image_url: str
    ) -> CharacterReferenceImage:
        """Add a reference image; the first one of a variation becomes primary."""
        is_first = await self.count_images(session, variation_id) == 0
        image = CharacterReferenceImage(
            variation_id=variation_id,
            image_url=image_url,
            is_primary=is_first,
        )
        session.add(image)
        await session.commit()
        return await self.get_image(session, image.id)

    async def set_primary(
        self, session: AsyncSession, variation_id: UUID, image_id: UUID
    ) -> None:
        """Mark image_id primary and every sibling not, in one UPDATE."""
        await session.execute(
            update(CharacterReferenceImage)
            .where(CharacterReferenceImage.variation_id == variation_id)
            .values(is_primary=(CharacterReferenceImage.id == image_id))
            .execution_options(synchronize_session=False)
        )
        await session.commit()

    async def delete_image(
        self, session: AsyncSession, image: CharacterReferenceImage
    ) -> None:
        """Delete an image; a deleted primary hands over to the oldest remaining one."""
        variation_id, was_primary = image.variation_id, image.is_primary
        await session.execute(
            delete(CharacterReferenceImage).where(CharacterReferenceImage.id == image.id)
        )
        if was_primary:
            result = await session.execute(
                select(CharacterReferenceImage.id)
                .where(CharacterReferenceImage.variation_id == variation_id)
                .order_by(CharacterReferenceImage.created_at.asc())
                .limit(1)
            )
            next_id = result.scalar_one_or_none()
            if next_id is not None:
                await session.execute(
                    update(CharacterReferenceImage)
                    .where(CharacterReferenceImage.id == next_id)
                    .values(is_primary=True)
                    .execution_options(synchronize_session=False)
                )
        await session.commit()


character_crud = CharacterCRUD()
