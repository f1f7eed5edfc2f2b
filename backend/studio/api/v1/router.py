"""Main API v1 router aggregating all sub-routers."""
from fastapi import APIRouter

from studio.api.v1.audio import router as audio_router
from studio.api.v1.characters import router as characters_router
from studio.api.v1.export import router as export_router
from studio.api.v1.health import router as health_router
from studio.api.v1.images import router as images_router
from studio.api.v1.media import router as media_router
from studio.api.v1.projects import router as projects_router
from studio.api.v1.shots import router as shots_router
from studio.api.v1.videos import router as videos_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["Health"])
api_router.include_router(projects_router, prefix="/projects", tags=["Projects"])
api_router.include_router(shots_router, prefix="/shots", tags=["Shots"])
api_router.include_router(images_router, prefix="/images", tags=["Images"])
api_router.include_router(videos_router, tags=["Videos"])
api_router.include_router(audio_router, tags=["Audio"])
api_router.include_router(characters_router, prefix="/characters", tags=["Characters"])
api_router.include_router(export_router, prefix="/projects", tags=["Export"])
api_router.include_router(media_router, prefix="/media", tags=["Media"])
