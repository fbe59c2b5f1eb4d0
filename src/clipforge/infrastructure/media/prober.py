"""ffprobe-backed metadata prober.

Answers two questions about a media file: the full :class:`MediaProbe`
(duration, resolution, audio presence) and, as a cheaper standalone query,
whether the file has any audio stream at all.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ...domain.entities.media import DEFAULT_HEIGHT, DEFAULT_WIDTH, MediaProbe
from ...domain.exceptions import (
    ErrorContext,
    InputMissingError,
    MalformedOutputError,
    NoVideoStreamError,
    ProbeError,
)
from ..observability.decorators import traced
from .process_runner import ToolRunner

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class MediaProber:
    """Probe media files with ffprobe's JSON output."""

    def __init__(self, runner: Optional[ToolRunner] = None):
        self.runner = runner or ToolRunner("ffprobe")

    @traced("probe media")
    async def probe(self, path: PathLike) -> MediaProbe:
        """Probe a media file.

        Args:
            path: Media file to inspect

        Returns:
            MediaProbe with duration, resolution and audio presence

        Raises:
            InputMissingError: If the file does not exist
            ToolUnavailableError: If ffprobe cannot be executed
            MalformedOutputError: If ffprobe output is not the expected JSON
            NoVideoStreamError: If the file has no video stream
            ProbeError: If ffprobe reports a failure
        """
        source = Path(path)
        if not source.exists():
            raise InputMissingError(str(source))

        result = await self.runner.run(
            [
                "-v",
                "quiet",
                "-print_format",
                "json",
                "-show_format",
                "-show_streams",
                str(source),
            ]
        )
        if not result.succeeded:
            raise ProbeError(
                f"ffprobe failed for {source.name}: {result.stderr_text.strip() or 'unknown error'}",
                context=ErrorContext(
                    operation="probe", path=str(source), exit_code=result.returncode
                ),
            )

        data = self._load_json(result.stdout_text, source)
        return self._parse_probe_data(data, source)

    async def has_audio_stream(self, path: PathLike) -> bool:
        """Check whether a file carries at least one audio stream.

        Args:
            path: Media file to inspect

        Returns:
            True if ffprobe lists an audio stream
        """
        source = Path(path)
        if not source.exists():
            raise InputMissingError(str(source))

        result = await self.runner.run(
            [
                "-v",
                "error",
                "-select_streams",
                "a",
                "-show_entries",
                "stream=codec_type",
                "-of",
                "json",
                str(source),
            ]
        )
        if not result.succeeded:
            logger.warning(
                f"Audio stream query failed for {source}: {result.stderr_text.strip()}"
            )
            return False

        data = self._load_json(result.stdout_text, source)
        return any(
            stream.get("codec_type") == "audio" for stream in self._streams(data, source)
        )

    @staticmethod
    def _load_json(text: str, source: Path) -> Dict[str, Any]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedOutputError(
                f"Could not parse ffprobe output for {source.name}: {e}",
                context=ErrorContext(operation="probe", path=str(source)),
            ) from e
        if not isinstance(data, dict):
            raise MalformedOutputError(
                f"Unexpected ffprobe output for {source.name}",
                context=ErrorContext(operation="probe", path=str(source)),
            )
        return data

    @staticmethod
    def _streams(data: Dict[str, Any], source: Path) -> List[Dict[str, Any]]:
        streams = data.get("streams", [])
        if not isinstance(streams, list):
            raise MalformedOutputError(
                f"Unexpected stream list in ffprobe output for {source.name}",
                context=ErrorContext(operation="probe", path=str(source)),
            )
        return [stream for stream in streams if isinstance(stream, dict)]

    @classmethod
    def _parse_probe_data(cls, data: Dict[str, Any], source: Path) -> MediaProbe:
        """Parse ffprobe JSON into a MediaProbe."""
        streams = cls._streams(data, source)
        format_info = data.get("format") or {}

        video_stream = next(
            (stream for stream in streams if stream.get("codec_type") == "video"), None
        )
        if video_stream is None:
            raise NoVideoStreamError(str(source))

        return MediaProbe(
            duration=cls._parse_duration(format_info),
            width=cls._parse_dimension(video_stream.get("width"), DEFAULT_WIDTH),
            height=cls._parse_dimension(video_stream.get("height"), DEFAULT_HEIGHT),
            has_audio=any(stream.get("codec_type") == "audio" for stream in streams),
        )

    @staticmethod
    def _parse_duration(format_info: Any) -> float:
        if not isinstance(format_info, dict):
            return 0.0
        try:
            return float(format_info.get("duration", 0.0))
        except (TypeError, ValueError):
            return 0.0

    @staticmethod
    def _parse_dimension(value: Any, default: int) -> int:
        # Streams without explicit dimensions fall back to 1080p
        try:
            dimension = int(value)
        except (TypeError, ValueError):
            return default
        return dimension if dimension > 0 else default
