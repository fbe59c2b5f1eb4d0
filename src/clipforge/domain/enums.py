"""Domain enums for the capture and export pipeline."""

from enum import Enum


class CaptureMode(str, Enum):
    """Physical inputs a recording session opens."""

    SCREEN = "screen"
    WEBCAM = "webcam"
    COMBO = "combo"

    def __str__(self) -> str:
        return self.value


class AudioQuality(str, Enum):
    """Audio quality tiers for recordings."""

    VOICE = "voice"
    STANDARD = "standard"
    HIGH = "high"

    @property
    def bitrate(self) -> str:
        """AAC bitrate used for this tier."""
        return _AUDIO_BITRATES[self]

    def __str__(self) -> str:
        return self.value


_AUDIO_BITRATES = {
    AudioQuality.VOICE: "64k",
    AudioQuality.STANDARD: "128k",
    AudioQuality.HIGH: "256k",
}


class DeviceCategory(str, Enum):
    """Audio device categories."""

    INPUT = "input"
    VIRTUAL = "virtual"

    def __str__(self) -> str:
        return self.value


class RecordingState(str, Enum):
    """Recording session states."""

    IDLE = "idle"
    RECORDING = "recording"

    def __str__(self) -> str:
        return self.value


class Platform(str, Enum):
    """Host platforms with a capture strategy."""

    MACOS = "macos"
    WINDOWS = "windows"
    LINUX = "linux"

    def __str__(self) -> str:
        return self.value
