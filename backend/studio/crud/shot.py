"""Scene and shot CRUD operations."""

from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from studio.models import ImageGeneration, Scene, Shot, VideoGeneration


class ShotCRUD:
    """CRUD operations for shots (and the scenes that group them)."""

    async def get(self, session: AsyncSession, shot_id: UUID) -> Optional[Shot]:
        return await session.get(Shot, shot_id)

    async def get_with_media(
        self, session: AsyncSession, shot_id: UUID
    ) -> Optional[Shot]:
        """Get a shot with its scene, images and videos loaded."""
        stmt = (
            select(Shot)
            .options(
                selectinload(Shot.scene),
                selectinload(Shot.images),
                selectinload(Shot.videos),
            )
            .where(Shot.id == shot_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_project(
        self,
        session: AsyncSession,
        project_id: UUID,
        with_media: bool = False,
    ) -> List[Shot]:
        """List a project's shots in timeline (shot_index) order."""
        stmt = (
            select(Shot)
            .where(Shot.project_id == project_id)
            .order_by(Shot.shot_index.asc())
            .execution_options(populate_existing=True)
        )
        if with_media:
            stmt = stmt.options(
                selectinload(Shot.scene),
                selectinload(Shot.images),
                selectinload(Shot.videos),
            )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def create_scene(
        self,
        session: AsyncSession,
        project_id: UUID,
        scene_index: int,
        title: str,
        location: Optional[str] = None,
    ) -> Scene:
        """Stage a scene; the caller commits."""
        scene = Scene(
            project_id=project_id,
            scene_index=scene_index,
            title=title,
            location=location,
        )
        session.add(scene)
        await session.flush()
        return scene

    async def update(
        self, session: AsyncSession, shot: Shot, data: Dict[str, Any]
    ) -> Shot:
        """Apply already-validated field updates."""
        for field, value in data.items():
            setattr(shot, field, value)
        session.add(shot)
        await session.commit()
        await session.refresh(shot)
        return shot

    async def delete(self, session: AsyncSession, shot: Shot) -> None:
        """Delete one shot with its generations and close the index gap."""
        project_id = shot.project_id
        await self._delete_generations(session, [shot.id])
        await session.execute(delete(Shot).where(Shot.id == shot.id))
        await session.flush()

        remaining = await self.list_by_project(session, project_id)
        await self.reindex(session, [s.id for s in remaining], remaining)

    async def reindex(
        self,
        session: AsyncSession,
        ordered_ids: Sequence[UUID],
        shots: Sequence[Shot],
    ) -> List[Shot]:
        """Assign contiguous shot indices following ordered_ids."""
        by_id = {shot.id: shot for shot in shots}
        ordered = []
        for index, shot_id in enumerate(ordered_ids):
            shot = by_id[shot_id]
            shot.shot_index = index
            session.add(shot)
            ordered.append(shot)
        await session.commit()
        return ordered

    async def delete_for_project(
        self, session: AsyncSession, project_id: UUID, commit: bool = True
    ) -> None:
        """Delete every scene, shot and generation of a project."""
        result = await session.execute(
            select(Shot.id).where(Shot.project_id == project_id)
        )
        shot_ids = list(result.scalars().all())
        await self._delete_generations(session, shot_ids)
        await session.execute(delete(Shot).where(Shot.project_id == project_id))
        await session.execute(delete(Scene).where(Scene.project_id == project_id))
        if commit:
            await session.commit()

    async def _delete_generations(
        self, session: AsyncSession, shot_ids: Sequence[UUID]
    ) -> None:
        if not shot_ids:
            return
        await session.execute(
            delete(VideoGeneration).where(VideoGeneration.shot_id.in_(shot_ids))
        )
        await session.execute(
            delete(ImageGeneration).where(ImageGeneration.shot_id.in_(shot_ids))
        )


shot_crud = ShotCRUD()
