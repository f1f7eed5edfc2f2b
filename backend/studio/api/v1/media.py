"""Media proxy for privately stored objects."""

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from studio.services.storage_service import storage_service
from studio.utils.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/{key:path}")
async def get_media(key: str):
    """Stream a stored object by key."""
    if not storage_service.is_configured:
        raise HTTPException(status_code=404, detail="Storage not configured")
    if not key.startswith("projects/") or ".." in key:
        raise HTTPException(status_code=400, detail="Invalid media key")

    try:
        body, content_type = await storage_service.get(key)
    except Exception as e:
        logger.warning("Media fetch failed", key=key, error=str(e))
        raise HTTPException(status_code=404, detail="Media not found") from e

    return Response(
        content=body,
        media_type=content_type,
        headers={"Cache-Control": "public, max-age=31536000, immutable"},
    )
