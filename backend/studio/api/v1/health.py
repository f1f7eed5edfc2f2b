"""Health check endpoint."""
from fastapi import APIRouter

from studio import __version__
from studio.config import settings
from studio.database import check_db_connection
from studio.services.video_poller import get_video_poller

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns 200 with "degraded" when the database is unreachable.
    """
    db_ok = await check_db_connection()
    poller = get_video_poller()

    return {
        "status": "healthy" if db_ok else "degraded",
        "database": "connected" if db_ok else "disconnected",
        "storage": "configured" if settings.storage_configured else "disabled",
        "video_poller": "running" if poller.running and not poller.paused else "idle",
        "version": __version__,
    }
