"""Media library service.

Imports files into the editor: metadata from the prober, a cached thumbnail,
waveform peaks on demand and hand-off to the desktop's native player.
"""

import logging
from pathlib import Path
from typing import List, Union

from ..domain.entities.media import ImportedMedia
from ..domain.exceptions import InputMissingError
from ..infrastructure.media.prober import MediaProber
from ..infrastructure.media.thumbnail_generator import ThumbnailGenerator
from ..infrastructure.media.waveform import DEFAULT_SAMPLES, WaveformGenerator
from ..infrastructure.observability.decorators import traced
from ..infrastructure.platform_support import open_in_native_player

logger = logging.getLogger(__name__)


class MediaLibrary:
    """Imports media files and derives their display assets."""

    def __init__(
        self,
        prober: MediaProber,
        thumbnails: ThumbnailGenerator,
        waveforms: WaveformGenerator,
    ):
        self.prober = prober
        self.thumbnails = thumbnails
        self.waveforms = waveforms

    @traced("import video")
    async def import_video(self, path: Union[str, Path]) -> ImportedMedia:
        """Probe a file and attach a thumbnail.

        A failed thumbnail leaves ``thumbnail_path`` unset; it never fails the
        import.

        Raises:
            InputMissingError: If the file does not exist
            ProbeError: If the file cannot be probed
        """
        source = Path(path)
        if not source.exists():
            raise InputMissingError(str(source))

        probe = await self.prober.probe(source)
        thumbnail = await self.thumbnails.generate_thumbnail(source, probe.duration)
        if thumbnail is None:
            logger.warning(f"Imported {source.name} without a thumbnail")

        logger.info(
            f"Imported {source.name}: {probe.duration:.3f}s {probe.resolution} "
            f"audio={probe.has_audio}"
        )
        return ImportedMedia(
            path=source,
            filename=source.name or "unknown",
            duration=probe.duration,
            width=probe.width,
            height=probe.height,
            has_audio=probe.has_audio,
            thumbnail_path=thumbnail,
        )

    async def generate_waveform(
        self, path: Union[str, Path], samples: int = DEFAULT_SAMPLES
    ) -> List[float]:
        source = Path(path)
        has_audio = await self.prober.has_audio_stream(source)
        return await self.waveforms.generate(source, samples, has_audio=has_audio)

    async def open_in_native_player(self, path: Union[str, Path]) -> None:
        logger.info(f"Opening video in native player: {path}")
        await open_in_native_player(path)
