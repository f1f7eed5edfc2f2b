"""
Per-shot image fan-out.

Fills a shot's candidate slots with parallel provider calls. Individual
failures are counted, not raised; only a batch with zero successes fails.
"""

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from studio.config import settings
from studio.crud.generation import image_generation_crud
from studio.crud.shot import shot_crud
from studio.exceptions import GenerationError, NotFoundError
from studio.models import ImageGeneration, Project
from studio.services.character_service import CharacterService, character_service
from studio.services.image_service import ImageService, image_service
from studio.services.prompt_builder import build_image_prompt
from studio.services.storage_service import StorageService, project_key, storage_service
from studio.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ImageBatchResult:
    """Outcome of one fan-out call."""
    generated: int = 0
    failed: int = 0
    images: List[ImageGeneration] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return self.generated > 0 and self.failed > 0


class ImageGenerationService:
    def __init__(
        self,
        images: Optional[ImageService] = None,
        storage: Optional[StorageService] = None,
        slots_per_shot: Optional[int] = None,
        characters: Optional[CharacterService] = None,
    ):
        self.images = images or image_service
        self.storage = storage or storage_service
        self.slots_per_shot = slots_per_shot or settings.image_slots_per_shot
        self.characters = characters or character_service

    async def generate_images(
        self,
        session: AsyncSession,
        shot_id: UUID,
        count: Optional[int] = None,
        regenerate: bool = False,
        custom_prompt: Optional[str] = None,
        character_variation_ids: Optional[Sequence[UUID]] = None,
    ) -> ImageBatchResult:
        """
        Generate up to `count` new candidate images for a shot.

        The request is clamped to the free slots; a full shot is a no-op.
        Descriptions of the given character variations are added to the
        built prompt; a custom prompt is used verbatim.
        """
        shot = await shot_crud.get(session, shot_id)
        if not shot:
            raise NotFoundError("Shot", shot_id)
        project = await session.get(Project, shot.project_id)

        prompt = custom_prompt
        if not prompt:
            characters = await self.characters.describe(session, character_variation_ids or [])
            prompt = build_image_prompt(
                description=shot.description,
                mood=shot.mood,
                visual_style=shot.visual_style,
                aspect_ratio=project.aspect_ratio,
                character_descriptions=characters,
            )

        if regenerate:
            logger.info("Regenerating shot images", shot_id=str(shot_id))
            await image_generation_crud.delete_for_shot(session, shot_id)

        existing = await image_generation_crud.count_for_shot(session, shot_id)
        requested = self.slots_per_shot if count is None else count
        to_generate = min(requested, self.slots_per_shot - existing)

        if to_generate <= 0:
            logger.info("Shot already at image capacity", shot_id=str(shot_id), existing=existing)
            return ImageBatchResult()

        async def generate_one(slot: int) -> Optional[str]:
            try:
                generated = await self.images.generate(prompt, project.aspect_ratio)
            except Exception as e:
                logger.error(
                    "Image generation failed",
                    shot_id=str(shot_id),
                    slot=slot,
                    error=str(e),
                )
                return None
            key = project_key(
                shot.project_id, "images", f"shot_{shot.shot_index}_{slot}.png"
            )
            return await self.storage.rehost(generated.url, key, "image/png")

        urls = await asyncio.gather(*(generate_one(slot) for slot in range(to_generate)))
        successes = [url for url in urls if url]
        failed = len(urls) - len(successes)

        if not successes:
            raise GenerationError(f"Failed to generate any images for shot {shot_id}")

        created = []
        for url in successes:
            image = await image_generation_crud.create(
                session, shot_id=shot_id, prompt=prompt, image_url=url
            )
            created.append(image)

        if existing == 0:
            created[0].selected = True
        await session.commit()
        for image in created:
            await session.refresh(image)

        logger.info(
            "Image batch complete",
            shot_id=str(shot_id),
            generated=len(created),
            failed=failed,
        )
        return ImageBatchResult(generated=len(created), failed=failed, images=created)


image_generation_service = ImageGenerationService()
