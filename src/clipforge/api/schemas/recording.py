"""Recording request/response schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from ...domain.entities.audio import DEFAULT_DEVICE, AudioDevice, AudioRouting
from ...domain.enums import AudioQuality, CaptureMode, DeviceCategory, RecordingState


class AudioSettings(BaseModel):
    """Audio routing of a recording."""

    microphone_enabled: bool = Field(default=True, description="Capture the microphone")
    microphone_device: str = Field(
        default=DEFAULT_DEVICE, description="Microphone device identifier"
    )
    system_audio_enabled: bool = Field(
        default=False, description="Capture system audio through a loopback device"
    )
    system_audio_device: str = Field(
        default="", description="Loopback device identifier ('none' disables it)"
    )
    audio_quality: AudioQuality = Field(
        default=AudioQuality.STANDARD, description="Audio quality tier"
    )

    def to_routing(self) -> AudioRouting:
        return AudioRouting(
            microphone_enabled=self.microphone_enabled,
            microphone_device=self.microphone_device,
            system_audio_enabled=self.system_audio_enabled,
            system_audio_device=self.system_audio_device,
            quality=self.audio_quality,
        )


class StartRecordingRequest(BaseModel):
    """Request to start recording."""

    mode: CaptureMode = Field(description="Capture mode")
    output_path: str = Field(min_length=1, description="Destination file")
    audio_settings: Optional[AudioSettings] = Field(
        default=None, description="Audio routing (microphone only when omitted)"
    )


class AudioDeviceResponse(BaseModel):
    """Enumerated audio device."""

    id: str
    name: str
    type: DeviceCategory

    @classmethod
    def from_entity(cls, device: AudioDevice) -> "AudioDeviceResponse":
        return cls(id=device.id, name=device.name, type=device.category)


class RecordingStatusResponse(BaseModel):
    """State of the recording slot."""

    state: RecordingState
    output_path: Optional[str] = None
    mode: Optional[CaptureMode] = None
    elapsed_seconds: Optional[float] = None
