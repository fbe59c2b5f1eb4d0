"""Clip descriptors and export jobs."""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..value_objects.time_range import TrimWindow, round_to_millis


@dataclass(frozen=True)
class ClipDescriptor:
    """One source clip of an export, with its editing decisions.

    Video and audio are trimmed independently. The audio window falls back to
    the video window when no audio-specific bounds are given, and the audio
    offset only applies while audio is unlinked from video.
    """

    source_path: Path
    trim_start: Optional[float] = None
    trim_end: Optional[float] = None
    audio_trim_start: Optional[float] = None
    audio_trim_end: Optional[float] = None
    video_muted: bool = False
    audio_muted: bool = False
    audio_linked: bool = True
    audio_offset: float = 0.0

    @property
    def video_window(self) -> TrimWindow:
        return TrimWindow.from_bounds(self.trim_start, self.trim_end)

    @property
    def audio_window(self) -> TrimWindow:
        video = self.video_window
        start = self.audio_trim_start if self.audio_trim_start is not None else video.start
        end = self.audio_trim_end if self.audio_trim_end is not None else video.end
        return TrimWindow(start=start, end=end)

    @property
    def has_independent_audio_trim(self) -> bool:
        """True whenever the resolved audio window differs from the video window."""
        return self.audio_window != self.video_window

    @property
    def effective_audio_offset(self) -> float:
        """Audio offset in seconds, zero while audio is linked."""
        if self.audio_linked:
            return 0.0
        return round_to_millis(self.audio_offset)

    def requires_filter_graph(self, source_has_audio: bool) -> bool:
        """Whether this clip needs a synthesized filter graph.

        Args:
            source_has_audio: Whether the source file carries an audio stream

        Returns:
            False when a direct stream mapping reproduces the clip faithfully
        """
        return (
            self.video_muted
            or self.audio_muted
            or not source_has_audio
            or self.has_independent_audio_trim
            or self.effective_audio_offset != 0.0
        )


@dataclass(frozen=True)
class ExportJob:
    """Ordered clips concatenated into one destination file."""

    clips: List[ClipDescriptor]
    output_path: Path

    @property
    def clip_count(self) -> int:
        return len(self.clips)


@dataclass(frozen=True)
class ExportProgress:
    """Progress notification emitted while a multi-clip job runs."""

    current: int
    total: int
    status: str

    def to_dict(self) -> dict:
        return {"current": self.current, "total": self.total, "status": self.status}


@dataclass
class ResolvedClip:
    """A clip after windows, duration and audio presence are known."""

    index: int
    descriptor: ClipDescriptor
    video_window: TrimWindow
    audio_window: TrimWindow
    duration: float
    has_audio: bool
    width: int = 1920
    height: int = 1080

    @property
    def needs_filter_graph(self) -> bool:
        return self.descriptor.requires_filter_graph(self.has_audio)
