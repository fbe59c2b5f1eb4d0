"""Recording endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from structlog import get_logger

from ...infrastructure.recording.audio_devices import AudioDeviceLister
from ...infrastructure.recording.controller import RecordingController
from ..dependencies import get_device_lister, get_recording_controller
from ..schemas.common import MessageResponse
from ..schemas.recording import (
    AudioDeviceResponse,
    RecordingStatusResponse,
    StartRecordingRequest,
)

logger = get_logger()

router = APIRouter()


@router.get("/devices", response_model=List[AudioDeviceResponse])
async def list_audio_devices(lister: AudioDeviceLister = Depends(get_device_lister)):
    """List audio capture devices; never empty."""
    devices = await lister.list_audio_devices()
    return [AudioDeviceResponse.from_entity(device) for device in devices]


@router.post("/start", response_model=MessageResponse)
async def start_recording(
    request: StartRecordingRequest,
    controller: RecordingController = Depends(get_recording_controller),
):
    """Start a recording; fails with 409 while one is active."""
    routing = request.audio_settings.to_routing() if request.audio_settings else None
    logger.info("recording_start_requested", mode=request.mode.value, output=request.output_path)
    message = await controller.start(request.mode, request.output_path, routing)
    return MessageResponse(message=message)


@router.post("/stop", response_model=MessageResponse)
async def stop_recording(
    controller: RecordingController = Depends(get_recording_controller),
):
    """Stop the active recording and wait for the file to be finalized."""
    message = await controller.stop()
    logger.info("recording_stopped")
    return MessageResponse(message=message)


@router.get("/status", response_model=RecordingStatusResponse)
async def recording_status(
    controller: RecordingController = Depends(get_recording_controller),
):
    """Report whether a recording is active."""
    return RecordingStatusResponse(**controller.status().to_dict())
