"""Main FastAPI application."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from structlog import get_logger

from ..infrastructure.config import Settings, get_settings
from ..infrastructure.media.process_runner import ToolRunner
from ..infrastructure.observability.logfire_setup import configure_logfire
from ..infrastructure.observability.logging_setup import configure_logging
from ..infrastructure.recording.capture_strategies import strategy_for_platform
from ..infrastructure.recording.controller import RecordingController
from .dependencies import get_settings_dep
from .exceptions import setup_exception_handlers
from .middleware.logging import LoggingMiddleware
from .routes import exports, health, media, recording, video

logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Stop any active recording on shutdown so its file is finalized."""
    logger.info("application_started")
    yield
    await app.state.recording_controller.shutdown()
    logger.info("application_stopped")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app.name,
        description="Media capture, clip export and range streaming",
        version=settings.app.version,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.dependency_overrides[get_settings_dep] = lambda: settings

    # One recording slot per application
    app.state.recording_controller = RecordingController(
        runner=ToolRunner(settings.tools.ffmpeg_path, "ffmpeg"),
        strategy=strategy_for_platform(config=settings.recording),
        config=settings.recording,
    )

    setup_exception_handlers(app)

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Range", "Content-Length", "Accept-Ranges"],
    )
    app.add_middleware(LoggingMiddleware)

    # Routes
    prefix = settings.api.prefix
    app.include_router(health.router, tags=["health"])
    app.include_router(media.router, prefix=f"{prefix}/media", tags=["media"])
    app.include_router(recording.router, prefix=f"{prefix}/recording", tags=["recording"])
    app.include_router(exports.router, prefix=f"{prefix}/exports", tags=["exports"])
    app.include_router(video.router, prefix=settings.streaming.route_prefix, tags=["video"])

    configure_logfire(app, settings)
    return app
