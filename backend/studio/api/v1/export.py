"""Timeline export endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from studio.database import get_session
from studio.services.timeline_service import (
    export_filename,
    render_edl,
    render_premiere_xml,
    timeline_service,
)

router = APIRouter()


def _attachment(content: str, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{project_id}/export/premiere")
async def export_premiere(project_id: UUID, session: AsyncSession = Depends(get_session)):
    """Download the project timeline as Premiere Pro / FCP 7 XML."""
    timeline = await timeline_service.build(session, project_id)
    return _attachment(
        render_premiere_xml(timeline),
        "application/xml",
        export_filename(timeline.title, "xml"),
    )


@router.get("/{project_id}/export/edl")
async def export_edl(project_id: UUID, session: AsyncSession = Depends(get_session)):
    """Download the video track as a CMX 3600 EDL."""
    timeline = await timeline_service.build(session, project_id)
    return _attachment(
        render_edl(timeline),
        "text/plain",
        export_filename(timeline.title, "edl"),
    )
