"""
Per-shot selection of the image and video that go into the timeline.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from studio.crud.generation import image_generation_crud, video_generation_crud
from studio.exceptions import NotFoundError, ValidationError
from studio.models import ImageGeneration, VideoGeneration, VideoStatus
from studio.utils.logging import get_logger

logger = get_logger(__name__)


class SelectionService:
    """
    Keeps at most one selected image and one selected video per shot.

    Selection is one UPDATE over all of a shot's rows, so two concurrent
    selections end with exactly one winner rather than two selected rows.
    """

    async def select_image(
        self, session: AsyncSession, shot_id: UUID, image_id: UUID
    ) -> ImageGeneration:
        image = await image_generation_crud.get_for_shot(session, image_id, shot_id)
        if not image:
            raise NotFoundError("Image", image_id)

        await image_generation_crud.select_exclusive(session, shot_id, image_id)
        await session.refresh(image)
        logger.info("Image selected", shot_id=str(shot_id), image_id=str(image_id))
        return image

    async def select_video(
        self, session: AsyncSession, shot_id: UUID, video_id: UUID
    ) -> VideoGeneration:
        video = await video_generation_crud.get_for_shot(session, video_id, shot_id)
        if not video:
            raise NotFoundError("Video", video_id)
        if video.status != VideoStatus.COMPLETED:
            raise ValidationError("Only completed videos can be selected")

        await video_generation_crud.select_exclusive(session, shot_id, video_id)
        await session.refresh(video)
        logger.info("Video selected", shot_id=str(shot_id), video_id=str(video_id))
        return video

    async def delete_image(self, session: AsyncSession, image_id: UUID) -> Optional[UUID]:
        """
        Delete an image. If it was selected, the earliest remaining image
        of the shot becomes selected. Returns the promoted image id, if any.
        """
        image = await image_generation_crud.get(session, image_id)
        if not image:
            raise NotFoundError("Image", image_id)

        shot_id = image.shot_id
        was_selected = image.selected
        await image_generation_crud.delete(session, image)
        await session.commit()

        if not was_selected:
            return None

        remaining = await image_generation_crud.list_for_shot(session, shot_id)
        if not remaining:
            return None

        promoted = remaining[0]
        await image_generation_crud.select_exclusive(session, shot_id, promoted.id)
        logger.info("Promoted image after delete", shot_id=str(shot_id), image_id=str(promoted.id))
        return promoted.id

    async def delete_video(self, session: AsyncSession, video_id: UUID) -> Optional[UUID]:
        """
        Delete a video. If it was selected, the earliest remaining COMPLETED
        video of the shot becomes selected. Returns the promoted id, if any.
        """
        video = await video_generation_crud.get(session, video_id)
        if not video:
            raise NotFoundError("Video", video_id)

        shot_id = video.shot_id
        was_selected = video.selected
        await video_generation_crud.delete(session, video)
        await session.commit()

        if not was_selected:
            return None

        candidates = [
            v for v in await video_generation_crud.list_for_shot(session, shot_id)
            if v.status == VideoStatus.COMPLETED
        ]
        if not candidates:
            return None

        promoted = candidates[0]
        await video_generation_crud.select_exclusive(session, shot_id, promoted.id)
        logger.info("Promoted video after delete", shot_id=str(shot_id), video_id=str(promoted.id))
        return promoted.id


selection_service = SelectionService()
