"""Screen, camera and audio capture."""

from .audio_devices import AudioDeviceLister, classify_device
from .capture_strategies import CaptureStrategy, strategy_for_platform
from .controller import RecordingController, RecordingSession, RecordingStatus
from .stderr_monitor import StderrMonitor

__all__ = [
    "AudioDeviceLister",
    "classify_device",
    "CaptureStrategy",
    "strategy_for_platform",
    "RecordingController",
    "RecordingSession",
    "RecordingStatus",
    "StderrMonitor",
]
