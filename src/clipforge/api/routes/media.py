"""Media library endpoints."""

from fastapi import APIRouter, Depends

from ...services.media_library import MediaLibrary
from ..dependencies import get_media_library
from ..schemas.common import MessageResponse
from ..schemas.media import (
    ImportedMediaResponse,
    MediaPathRequest,
    WaveformRequest,
    WaveformResponse,
)

router = APIRouter()


@router.post("/import", response_model=ImportedMediaResponse)
async def import_video(
    request: MediaPathRequest, library: MediaLibrary = Depends(get_media_library)
):
    """Probe a file and return its metadata with a thumbnail."""
    media = await library.import_video(request.path)
    return ImportedMediaResponse.from_entity(media)


@router.post("/waveform", response_model=WaveformResponse)
async def generate_waveform(
    request: WaveformRequest, library: MediaLibrary = Depends(get_media_library)
):
    """Return normalized audio peaks for a file."""
    peaks = await library.generate_waveform(request.path, request.samples)
    return WaveformResponse(path=request.path, samples=len(peaks), peaks=peaks)


@router.post("/open", response_model=MessageResponse)
async def open_in_native_player(
    request: MediaPathRequest, library: MediaLibrary = Depends(get_media_library)
):
    """Open a file in the desktop's default player."""
    await library.open_in_native_player(request.path)
    return MessageResponse(message=f"Opened {request.path}")
