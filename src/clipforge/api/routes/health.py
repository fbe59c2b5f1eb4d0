"""Health check endpoints."""

import shutil

from fastapi import APIRouter, Depends

from ...infrastructure.config import Settings
from ..dependencies import get_settings_dep

router = APIRouter()


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings_dep)):
    """Basic health check, including whether the media tools are on PATH."""
    return {
        "status": "healthy",
        "service": "clipforge",
        "version": settings.app.version,
        "tools": {
            "ffmpeg": shutil.which(settings.tools.ffmpeg_path) is not None,
            "ffprobe": shutil.which(settings.tools.ffprobe_path) is not None,
        },
    }
