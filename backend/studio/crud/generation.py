"""Image and video generation CRUD operations."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from studio.models import ImageGeneration, Shot, VideoGeneration, VideoStatus


class ImageGenerationCRUD:
    """CRUD operations for candidate images."""

    async def get(
        self, session: AsyncSession, image_id: UUID
    ) -> Optional[ImageGeneration]:
        result = await session.execute(
            select(ImageGeneration)
            .where(ImageGeneration.id == image_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_for_shot(
        self, session: AsyncSession, image_id: UUID, shot_id: UUID
    ) -> Optional[ImageGeneration]:
        """Get an image only if it belongs to the given shot."""
        result = await session.execute(
            select(ImageGeneration).where(
                ImageGeneration.id == image_id,
                ImageGeneration.shot_id == shot_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_shot(
        self, session: AsyncSession, shot_id: UUID
    ) -> List[ImageGeneration]:
        """List a shot's images oldest first."""
        result = await session.execute(
            select(ImageGeneration)
            .where(ImageGeneration.shot_id == shot_id)
            .order_by(ImageGeneration.created_at.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def count_for_shot(self, session: AsyncSession, shot_id: UUID) -> int:
        result = await session.execute(
            select(func.count(ImageGeneration.id)).where(
                ImageGeneration.shot_id == shot_id
            )
        )
        return result.scalar() or 0

    async def create(
        self,
        session: AsyncSession,
        shot_id: UUID,
        prompt: str,
        image_url: str,
        selected: bool = False,
    ) -> ImageGeneration:
        """Stage an image; the caller commits."""
        image = ImageGeneration(
            shot_id=shot_id,
            prompt=prompt,
            image_url=image_url,
            selected=selected,
        )
        session.add(image)
        await session.flush()
        return image

    async def delete_for_shot(self, session: AsyncSession, shot_id: UUID) -> None:
        """Delete every image of a shot, detaching videos made from them."""
        image_ids = select(ImageGeneration.id).where(ImageGeneration.shot_id == shot_id)
        await session.execute(
            update(VideoGeneration)
            .where(VideoGeneration.source_image_id.in_(image_ids))
            .values(source_image_id=None)
            .execution_options(synchronize_session=False)
        )
        await session.execute(
            delete(ImageGeneration)
            .where(ImageGeneration.shot_id == shot_id)
            .execution_options(synchronize_session=False)
        )
        await session.commit()

    async def delete(self, session: AsyncSession, image: ImageGeneration) -> None:
        """Stage deletion of one image; the caller commits."""
        await session.execute(
            update(VideoGeneration)
            .where(VideoGeneration.source_image_id == image.id)
            .values(source_image_id=None)
            .execution_options(synchronize_session=False)
        )
        await session.delete(image)
        await session.flush()

    async def select_exclusive(
        self, session: AsyncSession, shot_id: UUID, image_id: UUID
    ) -> None:
        """
        Mark image_id selected and every sibling unselected.

        One UPDATE over the shot's rows: concurrent callers can never
        observe or leave zero or two selected images.
        """
        await session.execute(
            update(ImageGeneration)
            .where(ImageGeneration.shot_id == shot_id)
            .values(selected=(ImageGeneration.id == image_id))
            .execution_options(synchronize_session=False)
        )
        await session.commit()

    async def get_selected(
        self, session: AsyncSession, shot_id: UUID
    ) -> Optional[ImageGeneration]:
        result = await session.execute(
            select(ImageGeneration)
            .where(
                ImageGeneration.shot_id == shot_id,
                ImageGeneration.selected.is_(True),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()


class VideoGenerationCRUD:
    """CRUD operations for video generation attempts."""

    async def get(
        self, session: AsyncSession, video_id: UUID
    ) -> Optional[VideoGeneration]:
        result = await session.execute(
            select(VideoGeneration)
            .where(VideoGeneration.id == video_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_for_shot(
        self, session: AsyncSession, video_id: UUID, shot_id: UUID
    ) -> Optional[VideoGeneration]:
        """Get a video only if it belongs to the given shot."""
        result = await session.execute(
            select(VideoGeneration).where(
                VideoGeneration.id == video_id,
                VideoGeneration.shot_id == shot_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_shot(
        self, session: AsyncSession, shot_id: UUID
    ) -> List[VideoGeneration]:
        """List a shot's videos oldest first."""
        result = await session.execute(
            select(VideoGeneration)
            .where(VideoGeneration.shot_id == shot_id)
            .order_by(VideoGeneration.created_at.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_for_project(
        self, session: AsyncSession, project_id: UUID
    ) -> List[VideoGeneration]:
        """List every video of a project in shot order, newest first within a shot."""
        result = await session.execute(
            select(VideoGeneration)
            .join(Shot, Shot.id == VideoGeneration.shot_id)
            .where(Shot.project_id == project_id)
            .order_by(Shot.shot_index.asc(), VideoGeneration.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def list_in_flight(
        self, session: AsyncSession, project_id: Optional[UUID] = None
    ) -> List[VideoGeneration]:
        """
        List records the poller still has to drive to a terminal state.

        PENDING rows without a task id are still inside a submit call and
        are left alone.
        """
        stmt = select(VideoGeneration).where(
            VideoGeneration.status == VideoStatus.PROCESSING,
            VideoGeneration.provider_task_id.is_not(None),
        )
        if project_id is not None:
            stmt = stmt.join(Shot, Shot.id == VideoGeneration.shot_id).where(
                Shot.project_id == project_id
            )
        result = await session.execute(
            stmt.order_by(VideoGeneration.created_at.asc()).execution_options(
                populate_existing=True
            )
        )
        return list(result.scalars().all())

    async def create(self, session: AsyncSession, video: VideoGeneration) -> VideoGeneration:
        """Persist a new record immediately."""
        session.add(video)
        await session.commit()
        await session.refresh(video)
        return video

    async def save(self, session: AsyncSession, video: VideoGeneration) -> VideoGeneration:
        session.add(video)
        await session.commit()
        await session.refresh(video)
        return video

    async def delete(self, session: AsyncSession, video: VideoGeneration) -> None:
        """Stage deletion of one video; the caller commits."""
        await session.delete(video)
        await session.flush()

    async def has_selected(self, session: AsyncSession, shot_id: UUID) -> bool:
        result = await session.execute(
            select(func.count(VideoGeneration.id)).where(
                VideoGeneration.shot_id == shot_id,
                VideoGeneration.selected.is_(True),
            )
        )
        return (result.scalar() or 0) > 0

    async def select_exclusive(
        self, session: AsyncSession, shot_id: UUID, video_id: UUID
    ) -> None:
        """Mark video_id selected and every sibling unselected in one UPDATE."""
        await session.execute(
            update(VideoGeneration)
            .where(VideoGeneration.shot_id == shot_id)
            .values(selected=(VideoGeneration.id == video_id))
            .execution_options(synchronize_session=False)
        )
        await session.commit()

    async def select_if_none_selected(
        self, session: AsyncSession, shot_id: UUID, video_id: UUID
    ) -> bool:
        """
        Select video_id only when the shot has no selected video yet.

        Conditional single-row UPDATE; returns whether it took effect.
        """
        sibling = aliased(VideoGeneration)
        already_selected = (
            select(sibling.id)
            .where(
                sibling.shot_id == shot_id,
                sibling.selected.is_(True),
            )
            .exists()
        )
        result = await session.execute(
            update(VideoGeneration)
            .where(VideoGeneration.id == video_id, ~already_selected)
            .values(selected=True)
            .execution_options(synchronize_session=False)
        )
        await session.commit()
        return result.rowcount > 0

    async def complete_if_in_flight(
        self,
        session: AsyncSession,
        video_id: UUID,
        video_url: str,
        completed_at: datetime,
    ) -> bool:
        """
        Mark a PENDING or PROCESSING record COMPLETED.

        Returns False when another finalizer already moved it to a
        terminal state; the stored row is then left untouched.
        """
        result = await session.execute(
            update(VideoGeneration)
            .where(
                VideoGeneration.id == video_id,
                VideoGeneration.status.in_([VideoStatus.PENDING, VideoStatus.PROCESSING]),
            )
            .values(
                status=VideoStatus.COMPLETED,
                video_url=video_url,
                error_message=None,
                completed_at=completed_at,
            )
            .execution_options(synchronize_session=False)
        )
        await session.commit()
        return result.rowcount > 0


image_generation_crud = ImageGenerationCRUD()
video_generation_crud = VideoGenerationCRUD()
