"""Audio peak extraction for waveform display."""

import logging
from pathlib import Path
from typing import List, Optional, Union

import numpy as np

from ...domain.exceptions import EncodingFailureError, ErrorContext, InputMissingError
from .diagnostics import extract_error_lines
from .process_runner import ToolRunner

logger = logging.getLogger(__name__)

DEFAULT_SAMPLES = 200
# Peaks only need a coarse signal; a low decode rate keeps stdout small
WAVEFORM_SAMPLE_RATE = 8000


def compute_peaks(pcm: np.ndarray, samples: int) -> List[float]:
    """Split samples into buckets and return each bucket's normalized peak.

    Args:
        pcm: Mono signed 16-bit samples
        samples: Number of buckets

    Returns:
        ``samples`` floats in ``[0, 1]``
    """
    if samples <= 0:
        return []
    if pcm.size == 0:
        return [0.0] * samples

    magnitudes = np.abs(pcm.astype(np.float32))
    buckets = np.array_split(magnitudes, samples)
    peaks = np.array(
        [bucket.max() if bucket.size else 0.0 for bucket in buckets], dtype=np.float32
    )

    highest = float(peaks.max())
    if highest <= 0.0:
        return [0.0] * samples
    return [float(value) for value in np.clip(peaks / highest, 0.0, 1.0)]


class WaveformGenerator:
    """Decode a file's audio through ffmpeg and reduce it to peaks."""

    def __init__(self, ffmpeg_runner: Optional[ToolRunner] = None):
        self.ffmpeg_runner = ffmpeg_runner or ToolRunner("ffmpeg")

    async def generate(
        self, path: Union[str, Path], samples: int = DEFAULT_SAMPLES, has_audio: bool = True
    ) -> List[float]:
        """Generate waveform peaks for a media file.

        Args:
            path: Media file
            samples: Number of peaks to return
            has_audio: Whether the file carries audio; silent files skip decoding

        Returns:
            Normalized peak values

        Raises:
            InputMissingError: If the file does not exist
            EncodingFailureError: If ffmpeg cannot decode the audio
        """
        source = Path(path)
        if not source.exists():
            raise InputMissingError(str(source))
        if not has_audio:
            return [0.0] * max(samples, 0)

        result = await self.ffmpeg_runner.run(
            [
                "-v",
                "error",
                "-i",
                str(source),
                "-vn",
                "-ac",
                "1",
                "-ar",
                str(WAVEFORM_SAMPLE_RATE),
                "-acodec",
                "pcm_s16le",
                "-f",
                "s16le",
                "pipe:1",
            ]
        )
        if not result.succeeded:
            details = extract_error_lines(result.stderr_text) or [
                f"exit status {result.returncode}"
            ]
            raise EncodingFailureError(
                f"Failed to decode audio for waveform: {' | '.join(details)}",
                context=ErrorContext(
                    operation="waveform", path=str(source), exit_code=result.returncode
                ),
            )

        # Drop a trailing odd byte so the buffer is whole int16 samples
        usable = len(result.stdout) - (len(result.stdout) % 2)
        pcm = np.frombuffer(result.stdout[:usable], dtype=np.int16)
        logger.debug(f"Decoded {pcm.size} samples for waveform of {source.name}")
        return compute_peaks(pcm, samples)
