"""Audio routing and device entities."""

from dataclasses import dataclass
from typing import List

from ..enums import AudioQuality, DeviceCategory

NO_DEVICE = "none"
DEFAULT_DEVICE = "default"


@dataclass(frozen=True)
class AudioRouting:
    """Which audio sources a recording captures."""

    microphone_enabled: bool = True
    microphone_device: str = DEFAULT_DEVICE
    system_audio_enabled: bool = False
    system_audio_device: str = ""
    quality: AudioQuality = AudioQuality.STANDARD

    @property
    def microphone_active(self) -> bool:
        return self.microphone_enabled

    @property
    def system_audio_active(self) -> bool:
        """System audio counts only when enabled and pointing at a real device."""
        return (
            self.system_audio_enabled
            and bool(self.system_audio_device)
            and self.system_audio_device != NO_DEVICE
        )

    @property
    def has_audio(self) -> bool:
        return self.microphone_active or self.system_audio_active

    def active_devices(self) -> List[str]:
        """Active source devices, microphone first."""
        devices = []
        if self.microphone_active:
            devices.append(self.microphone_device or DEFAULT_DEVICE)
        if self.system_audio_active:
            devices.append(self.system_audio_device)
        return devices


@dataclass(frozen=True)
class AudioDevice:
    """An enumerated capture device."""

    id: str
    name: str
    category: DeviceCategory = DeviceCategory.INPUT

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "type": self.category.value}
