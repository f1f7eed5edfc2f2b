"""Project CRUD operations."""

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from studio.models import (
    AspectRatio,
    MusicSource,
    NarrationSource,
    Project,
    ProjectAudio,
    ProjectStatus,
    Scene,
    Script,
)
from studio.crud.shot import shot_crud


class ProjectCRUD:
    """CRUD operations for projects and their audio record."""

    async def create(
        self,
        session: AsyncSession,
        title: str,
        aspect_ratio: AspectRatio = AspectRatio.LANDSCAPE,
    ) -> Project:
        """Create a new project."""
        project = Project(
            title=title,
            aspect_ratio=aspect_ratio,
            status=ProjectStatus.DRAFT,
        )
        session.add(project)
        await session.commit()
        await session.refresh(project)
        return project

    async def get_by_id(
        self, session: AsyncSession, project_id: UUID
    ) -> Optional[Project]:
        """Get project by ID."""
        result = await session.execute(select(Project).where(Project.id == project_id))
        return result.scalar_one_or_none()

    async def get_with_relations(
        self, session: AsyncSession, project_id: UUID
    ) -> Optional[Project]:
        """Get project with scenes, shots and audio loaded."""
        stmt = (
            select(Project)
            .options(
                selectinload(Project.scenes).selectinload(Scene.shots),
                selectinload(Project.audio),
            )
            .where(Project.id == project_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(
        self,
        session: AsyncSession,
        page: int = 1,
        page_size: int = 20,
        status: Optional[ProjectStatus] = None,
    ) -> Tuple[List[Project], int]:
        """List projects with pagination and optional status filter."""
        count_stmt = select(func.count(Project.id))
        stmt = select(Project)
        if status:
            count_stmt = count_stmt.where(Project.status == status)
            stmt = stmt.where(Project.status == status)

        total_result = await session.execute(count_stmt)
        total = total_result.scalar() or 0

        offset = (page - 1) * page_size
        stmt = stmt.order_by(Project.created_at.desc()).offset(offset).limit(page_size)
        result = await session.execute(stmt)
        items = list(result.scalars().all())

        return items, total

    async def update(
        self,
        session: AsyncSession,
        project: Project,
        title: Optional[str] = None,
        aspect_ratio: Optional[AspectRatio] = None,
        status: Optional[ProjectStatus] = None,
    ) -> Project:
        """Apply the provided fields to a project."""
        if title is not None:
            project.title = title
        if aspect_ratio is not None:
            project.aspect_ratio = aspect_ratio
        if status is not None:
            project.status = status
        session.add(project)
        await session.commit()
        await session.refresh(project)
        return project

    async def update_status(
        self,
        session: AsyncSession,
        project_id: UUID,
        status: ProjectStatus,
    ) -> Optional[Project]:
        """Update project status."""
        project = await session.get(Project, project_id)
        if project:
            project.status = status
            await session.commit()
            await session.refresh(project)
        return project

    async def delete(self, session: AsyncSession, project_id: UUID) -> None:
        """Delete a project and everything it owns."""
        await shot_crud.delete_for_project(session, project_id, commit=False)
        await session.execute(delete(Script).where(Script.project_id == project_id))
        await session.execute(
            delete(ProjectAudio).where(ProjectAudio.project_id == project_id)
        )
        await session.execute(delete(Project).where(Project.id == project_id))
        await session.commit()

    async def get_latest_script(
        self, session: AsyncSession, project_id: UUID
    ) -> Optional[Script]:
        """Get the latest script version for a project."""
        stmt = (
            select(Script)
            .where(Script.project_id == project_id)
            .order_by(Script.version.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_audio(
        self, session: AsyncSession, project_id: UUID
    ) -> Optional[ProjectAudio]:
        result = await session.execute(
            select(ProjectAudio).where(ProjectAudio.project_id == project_id)
        )
        return result.scalar_one_or_none()

    async def upsert_audio(
        self,
        session: AsyncSession,
        project_id: UUID,
        narration_url: Optional[str] = None,
        narration_source: Optional[NarrationSource] = None,
        music_url: Optional[str] = None,
        music_source: Optional[MusicSource] = None,
    ) -> ProjectAudio:
        """Create or update the project's audio record; None leaves a field as is."""
        audio = await self.get_audio(session, project_id)
        if audio is None:
            audio = ProjectAudio(project_id=project_id)

        if narration_url is not None:
            audio.narration_url = narration_url
            audio.narration_source = narration_source or NarrationSource.UPLOAD
        if music_url is not None:
            audio.music_url = music_url
            audio.music_source = music_source or MusicSource.UPLOAD

        session.add(audio)
        await session.commit()
        await session.refresh(audio)
        return audio


project_crud = ProjectCRUD()
