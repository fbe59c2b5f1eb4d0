"""Domain entities."""

from .audio import AudioDevice, AudioRouting
from .clip import ClipDescriptor, ExportJob, ExportProgress, ResolvedClip
from .media import ImportedMedia, MediaProbe

__all__ = [
    "AudioDevice",
    "AudioRouting",
    "ClipDescriptor",
    "ExportJob",
    "ExportProgress",
    "ResolvedClip",
    "ImportedMedia",
    "MediaProbe",
]
