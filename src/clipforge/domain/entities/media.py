"""Media metadata entities."""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

DEFAULT_WIDTH = 1920
DEFAULT_HEIGHT = 1080


@dataclass(frozen=True)
class MediaProbe:
    """Probe result for a media file. Never persisted."""

    duration: float
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    has_audio: bool = False

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class ImportedMedia:
    """Metadata returned when a file is imported into the library."""

    path: Path
    filename: str
    duration: float
    width: int
    height: int
    has_audio: bool
    thumbnail_path: Optional[Path] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["path"] = str(self.path)
        data["thumbnail_path"] = str(self.thumbnail_path) if self.thumbnail_path else None
        return data
