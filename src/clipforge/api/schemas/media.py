"""Media library request/response schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field

from ...domain.entities.media import ImportedMedia


class MediaPathRequest(BaseModel):
    """Request naming a media file on disk."""

    path: str = Field(min_length=1, description="Absolute path of the media file")


class WaveformRequest(MediaPathRequest):
    """Request for waveform peaks."""

    samples: int = Field(default=200, ge=1, le=10000, description="Number of peaks")


class ImportedMediaResponse(BaseModel):
    """Metadata of an imported media file."""

    path: str
    filename: str
    duration: float
    width: int
    height: int
    has_audio: bool
    thumbnail_path: Optional[str] = None

    @classmethod
    def from_entity(cls, media: ImportedMedia) -> "ImportedMediaResponse":
        return cls(**media.to_dict())


class WaveformResponse(BaseModel):
    """Normalized audio peaks."""

    path: str
    samples: int
    peaks: List[float]
