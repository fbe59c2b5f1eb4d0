import hashlib
import logging
from pathlib import Path
from typing import Optional, Union

from ...domain.exceptions import MediaError
from ...domain.value_objects.time_range import format_seconds
from .process_runner import ToolRunner

logger = logging.getLogger(__name__)

MAX_THUMBNAIL_OFFSET = 2.0


def thumbnail_offset(duration: float) -> float:
    """Seconds into the video at which the thumbnail frame is taken."""
    return min(max(duration, 0.0) * 0.1, MAX_THUMBNAIL_OFFSET)


def thumbnail_cache_name(video_path: Union[str, Path]) -> str:
    digest = hashlib.sha256(str(video_path).encode("utf-8")).hexdigest()
    return f"{digest[:16]}.jpg"


class ThumbnailGenerator:
    def __init__(
        self,
        cache_dir: Path,
        width: int = 320,
        ffmpeg_runner: Optional[ToolRunner] = None,
    ):
        self.cache_dir = Path(cache_dir)
        self.width = width
        self.ffmpeg_runner = ffmpeg_runner or ToolRunner("ffmpeg")

    async def generate_thumbnail(
        self, video_path: Union[str, Path], duration: float
    ) -> Optional[Path]:
        """Extract one frame into the thumbnail cache.

        Failures are logged and reported as ``None``; a missing thumbnail never
        fails the caller.
        """
        output_path = self.cache_dir / thumbnail_cache_name(video_path)
        if output_path.exists():
            return output_path

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            result = await self.ffmpeg_runner.run(
                [
                    "-ss",
                    format_seconds(thumbnail_offset(duration)),
                    "-i",
                    str(video_path),
                    "-vframes",
                    "1",
                    "-vf",
                    f"scale={self.width}:-2",
                    "-q:v",
                    "3",
                    "-y",
                    str(output_path),
                ]
            )
        except (MediaError, OSError) as e:
            logger.warning(f"Thumbnail generation failed for {video_path}: {e}")
            return None

        if not result.succeeded or not output_path.exists():
            logger.warning(
                f"Thumbnail generation failed for {video_path}: "
                f"{result.stderr_text.strip()[-300:]}"
            )
            return None

        return output_path
