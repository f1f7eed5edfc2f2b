"""
FastAPI application entry point.
Configures the application with all routes, middleware, and lifecycle handlers.
"""

import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from studio import __version__
from studio.api.v1.router import api_router
from studio.config import settings
from studio.database import close_db, init_db
from studio.exceptions import GenerationError, NotFoundError, StudioError, ValidationError
from studio.services.video_poller import get_video_poller
from studio.utils.logging import bind_context, clear_context, configure_logging, get_logger

# Configure logging on module load
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - Startup: create static directories, create tables in debug, start the video poller
    - Shutdown: stop the poller, close DB connections
    """
    logger.info("Starting application...", debug=settings.debug)

    static_path = Path(settings.static_dir)
    (static_path / "audio").mkdir(parents=True, exist_ok=True)

    if settings.debug:
        # Production schemas are managed by migrations
        await init_db()
        logger.info("Database tables ensured")

    poller = get_video_poller()
    if settings.enable_video_poller:
        poller.start()

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application")
    poller.stop()
    await close_db()
    logger.info("Database connection closed")


app = FastAPI(
    title=settings.app_name,
    description="Shot-by-shot image and video generation with timeline export",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

app.include_router(api_router, prefix=settings.api_v1_prefix)

# === MIDDLEWARE ===

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with a short request_id bound to the context."""
    bind_context(request_id=str(uuid.uuid4())[:8])

    logger.info("Request started", method=request.method, path=request.url.path)

    try:
        response = await call_next(request)
        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )
        return response
    except Exception as e:
        logger.exception(
            "Request failed", method=request.method, path=request.url.path, error=str(e)
        )
        raise
    finally:
        clear_context()


# === STATIC FILES ===

# Locally stored narration when object storage is not configured
Path(settings.static_dir).mkdir(parents=True, exist_ok=True)
app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": f"{settings.api_v1_prefix}/health",
    }


# === EXCEPTION HANDLERS ===


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    logger.info("Not found", error=str(exc), path=request.url.path)
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.warning("Validation error", error=str(exc), path=request.url.path)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError):
    """Every provider call of a batch failed."""
    logger.error("Generation failed", error=str(exc), path=request.url.path)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(StudioError)
async def studio_error_handler(request: Request, exc: StudioError):
    logger.error("Domain error", error=str(exc), type=type(exc).__name__, path=request.url.path)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle validation errors with 400 response."""
    logger.warning("Validation error", error=str(exc), path=request.url.path)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors with 500 response."""
    logger.exception("Unhandled exception", error=str(exc), path=request.url.path)

    if settings.debug:
        return JSONResponse(
            status_code=500, content={"detail": str(exc), "type": type(exc).__name__}
        )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
