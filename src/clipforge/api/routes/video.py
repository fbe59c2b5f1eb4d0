"""Range-aware video streaming for the playback surface."""

from typing import Optional

from fastapi import APIRouter, Depends, Header
from fastapi.responses import Response
from structlog import get_logger

from ...infrastructure.streaming.range_server import (
    RangeFileReader,
    base_headers,
    resolve_media_path,
)
from ..dependencies import get_range_reader

logger = get_logger()

router = APIRouter()


@router.api_route("/{path:path}", methods=["GET", "HEAD"])
async def stream_video(
    path: str,
    range_header: Optional[str] = Header(default=None, alias="range"),
    reader: RangeFileReader = Depends(get_range_reader),
):
    """Serve a whole file or the byte range named by the Range header."""
    result = await reader.read(resolve_media_path(path), range_header)
    if result.total_length is not None:
        logger.debug(
            "video_served",
            status_code=result.status_code,
            bytes_served=len(result.body),
            total_length=result.total_length,
        )
    return Response(
        content=result.body, status_code=result.status_code, headers=result.headers
    )


@router.options("/{path:path}")
async def video_preflight(path: str):
    """Answer CORS preflight requests."""
    return Response(status_code=200, headers=base_headers())
