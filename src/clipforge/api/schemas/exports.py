"""Export request/response schemas."""

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from ...domain.entities.clip import ClipDescriptor, ExportJob


class ClipSegment(BaseModel):
    """One clip of an export with its editing decisions."""

    input_path: str = Field(min_length=1, description="Source file")
    trim_start: Optional[float] = Field(default=None, ge=0, description="Video trim start")
    trim_end: Optional[float] = Field(default=None, ge=0, description="Video trim end")
    audio_trim_start: Optional[float] = Field(
        default=None, ge=0, description="Audio trim start (defaults to the video trim)"
    )
    audio_trim_end: Optional[float] = Field(
        default=None, ge=0, description="Audio trim end (defaults to the video trim)"
    )
    is_video_muted: bool = Field(default=False, description="Replace video with filler")
    is_audio_muted: bool = Field(default=False, description="Replace audio with silence")
    is_audio_linked: bool = Field(
        default=True, description="Whether audio follows the video timing"
    )
    audio_offset: float = Field(
        default=0.0, description="Audio shift in seconds, used while unlinked"
    )

    @model_validator(mode="after")
    def validate_windows(self) -> "ClipSegment":
        if (
            self.trim_start is not None
            and self.trim_end is not None
            and self.trim_end < self.trim_start
        ):
            raise ValueError("trim_end must not be before trim_start")
        if (
            self.audio_trim_start is not None
            and self.audio_trim_end is not None
            and self.audio_trim_end < self.audio_trim_start
        ):
            raise ValueError("audio_trim_end must not be before audio_trim_start")
        return self

    def to_descriptor(self) -> ClipDescriptor:
        return ClipDescriptor(
            source_path=Path(self.input_path),
            trim_start=self.trim_start,
            trim_end=self.trim_end,
            audio_trim_start=self.audio_trim_start,
            audio_trim_end=self.audio_trim_end,
            video_muted=self.is_video_muted,
            audio_muted=self.is_audio_muted,
            audio_linked=self.is_audio_linked,
            audio_offset=self.audio_offset,
        )


class ExportRequest(BaseModel):
    """Request to export clips into one file."""

    clips: List[ClipSegment] = Field(description="Clips in output order")
    output_path: str = Field(min_length=1, description="Destination file")

    def to_job(self) -> ExportJob:
        return ExportJob(
            clips=[clip.to_descriptor() for clip in self.clips],
            output_path=Path(self.output_path),
        )


class ExportProgressResponse(BaseModel):
    """Progress notification of a multi-clip export."""

    current: int
    total: int
    status: str


class ExportResponse(BaseModel):
    """Result of a completed export."""

    output_path: str
    progress: List[ExportProgressResponse] = Field(default_factory=list)
