"""Multi-clip export pipeline.

Each clip of a job is normalized into its own temporary file, then the files
are joined with ffmpeg's concat demuxer in stream-copy mode. A job that holds a
single clip skips the temporary stage and encodes straight to the destination.
"""

import inspect
import logging
import uuid
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Union

import aiofiles

from ...domain.entities.clip import (
    ClipDescriptor,
    ExportJob,
    ExportProgress,
    ResolvedClip,
)
from ...domain.entities.media import DEFAULT_HEIGHT, DEFAULT_WIDTH
from ...domain.exceptions import (
    EncodingFailureError,
    ErrorContext,
    ExportError,
    InputMissingError,
    ProbeError,
)
from ...domain.value_objects.time_range import format_seconds
from ..config import ExportConfig
from ..media.diagnostics import classify_export_failure
from ..media.filter_graph import Filter, FilterGraph, StreamMapping, mapping_args
from ..media.process_runner import ToolRunner
from ..media.prober import MediaProber
from ..observability.decorators import traced

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ExportProgress], Union[None, Awaitable[None]]]

VIDEO_LABEL = "v"
AUDIO_LABEL = "a"


def escape_manifest_path(path: Union[str, Path]) -> str:
    """Quote a path for a concat demuxer ``file`` directive."""
    return "'" + str(path).replace("'", "'\\''") + "'"


def build_manifest(paths: List[Path]) -> str:
    return "".join(f"file {escape_manifest_path(path)}\n" for path in paths)


class ClipFilterGraphBuilder:
    """Synthesizes the per-clip filter graph.

    The video and audio branches are built independently and both are cut to
    the clip duration, so every normalized clip has tracks of equal length.
    """

    def __init__(self, config: ExportConfig):
        self.config = config

    def build(self, clip: ResolvedClip) -> FilterGraph:
        if clip.duration <= 0:
            raise ExportError(
                f"Clip {clip.index}: could not determine the clip duration",
                context=ErrorContext(
                    operation="export",
                    path=str(clip.descriptor.source_path),
                    clip_index=clip.index,
                ),
            )

        graph = FilterGraph()
        self._add_video_branch(graph, clip)
        self._add_audio_branch(graph, clip)
        return graph

    def _add_video_branch(self, graph: FilterGraph, clip: ResolvedClip) -> None:
        if clip.descriptor.video_muted:
            graph.add(
                [],
                [
                    Filter(
                        "color",
                        c=self.config.filler_color,
                        s=f"{clip.width}x{clip.height}",
                        r=self.config.filler_framerate,
                        d=clip.duration,
                    )
                ],
                VIDEO_LABEL,
            )
            return

        graph.add(
            ["0:v"],
            [
                Filter("trim", start=clip.video_window.start, duration=clip.duration),
                Filter("setpts", "PTS-STARTPTS"),
            ],
            VIDEO_LABEL,
        )

    def _add_audio_branch(self, graph: FilterGraph, clip: ResolvedClip) -> None:
        descriptor = clip.descriptor
        fit = [Filter("apad"), Filter("atrim", duration=clip.duration)]

        if descriptor.audio_muted or not clip.has_audio:
            silence = Filter(
                "anullsrc",
                channel_layout="stereo",
                sample_rate=self.config.audio_sample_rate,
            )
            graph.add([], [silence, Filter("atrim", duration=clip.duration)], AUDIO_LABEL)
            return

        offset = descriptor.effective_audio_offset
        if not descriptor.audio_linked and offset != 0.0:
            filters = self._trim_filters(clip.audio_window.start, clip.audio_window.end)
            if offset > 0:
                filters.append(Filter("adelay", delays=round(offset * 1000), all=1))
            else:
                filters.extend(
                    [Filter("atrim", start=-offset), Filter("asetpts", "PTS-STARTPTS")]
                )
        elif descriptor.has_independent_audio_trim:
            filters = self._trim_filters(clip.audio_window.start, clip.audio_window.end)
        else:
            # Follows the video window
            filters = [
                Filter("atrim", start=clip.video_window.start),
                Filter("asetpts", "PTS-STARTPTS"),
            ]

        graph.add(["0:a"], filters + fit, AUDIO_LABEL)

    @staticmethod
    def _trim_filters(start: float, end: Optional[float]) -> List[Filter]:
        if end is None:
            trim = Filter("atrim", start=start)
        else:
            trim = Filter("atrim", start=start, end=end)
        return [trim, Filter("asetpts", "PTS-STARTPTS")]


class ClipExportPipeline:
    """Exports an ordered list of clips into one file."""

    def __init__(
        self,
        runner: Optional[ToolRunner] = None,
        prober: Optional[MediaProber] = None,
        config: Optional[ExportConfig] = None,
    ):
        self.config = config or ExportConfig()
        self.runner = runner or ToolRunner("ffmpeg")
        self.prober = prober or MediaProber()
        self.graph_builder = ClipFilterGraphBuilder(self.config)

    @traced("export clips")
    async def export(
        self, job: ExportJob, on_progress: Optional[ProgressCallback] = None
    ) -> Path:
        """Run an export job.

        Args:
            job: Clips and destination
            on_progress: Called with an ExportProgress per clip and before concatenation

        Returns:
            The destination path

        Raises:
            ExportError: If the job has no clips or a clip is invalid
            InputMissingError: If any source file is missing (checked up front)
            ToolUnavailableError: If ffmpeg or ffprobe cannot be executed
            EncodingFailureError: If a clip encode or the concatenation fails
        """
        if not job.clips:
            raise ExportError("No clips to export", context=ErrorContext(operation="export"))

        for index, clip in enumerate(job.clips, start=1):
            if not Path(clip.source_path).exists():
                raise InputMissingError(str(clip.source_path), clip_index=index)

        output_path = Path(job.output_path)
        logger.info(f"Starting export of {job.clip_count} clip(s) to {output_path}")

        if job.clip_count == 1:
            await self._export_single(job.clips[0], output_path)
        else:
            await self._export_multi(job, output_path, on_progress)

        logger.info(f"Export successful: {output_path}")
        return output_path

    async def resolve_clip(self, index: int, descriptor: ClipDescriptor) -> ResolvedClip:
        """Resolve windows, audio presence and duration of one clip.

        Args:
            index: 1-based position of the clip in its job
            descriptor: Clip to resolve

        Returns:
            ResolvedClip with millisecond-rounded values
        """
        source = Path(descriptor.source_path)
        try:
            has_audio = await self.prober.has_audio_stream(source)

            video_window = descriptor.video_window
            duration = video_window.duration()
            width, height = DEFAULT_WIDTH, DEFAULT_HEIGHT
            if duration is None or descriptor.video_muted:
                probe = await self.prober.probe(source)
                width, height = probe.width, probe.height
                if duration is None:
                    duration = video_window.duration(probe.duration)
        except ProbeError as e:
            raise ProbeError(
                f"Clip {index}: {e.message}",
                context=ErrorContext(operation="probe", path=str(source), clip_index=index),
            ) from e

        return ResolvedClip(
            index=index,
            descriptor=descriptor,
            video_window=video_window,
            audio_window=descriptor.audio_window,
            duration=duration or 0.0,
            has_audio=has_audio,
            width=width,
            height=height,
        )

    def clip_args(self, clip: ResolvedClip, output: Path, preset: str) -> List[str]:
        """Encode arguments normalizing one clip into ``output``."""
        source = str(clip.descriptor.source_path)
        if clip.needs_filter_graph:
            graph = self.graph_builder.build(clip)
            args = ["-i", source]
            args.extend(
                mapping_args(
                    graph, [StreamMapping(VIDEO_LABEL), StreamMapping(AUDIO_LABEL)]
                )
            )
        else:
            args = ["-ss", format_seconds(clip.video_window.start), "-i", source]
            args.extend(
                mapping_args(
                    None,
                    [
                        StreamMapping("0:v:0", from_graph=False),
                        StreamMapping("0:a:0", from_graph=False),
                    ],
                )
            )

        if clip.duration > 0:
            args.extend(["-t", format_seconds(clip.duration)])
        args.extend(self._encode_args(preset))
        args.extend(["-y", str(output)])
        return args

    async def _export_single(self, descriptor: ClipDescriptor, output_path: Path) -> None:
        # Audio presence only matters once a graph is needed
        if descriptor.requires_filter_graph(source_has_audio=True):
            clip = await self.resolve_clip(1, descriptor)
            args = self.clip_args(clip, output_path, self.config.final_preset)
        else:
            args = self._direct_args(descriptor, output_path)

        result = await self.runner.run(args)
        if not result.succeeded:
            self._remove_file(output_path)
            logger.error(f"FFmpeg failed: {result.stderr_text}")
            raise classify_export_failure(result.stderr_text, 1).to_exception(
                context=ErrorContext(
                    operation="export",
                    path=str(descriptor.source_path),
                    clip_index=1,
                    exit_code=result.returncode,
                )
            )

    def _direct_args(self, descriptor: ClipDescriptor, output_path: Path) -> List[str]:
        window = descriptor.video_window
        args = ["-i", str(descriptor.source_path)]
        if window.start > 0:
            args.extend(["-ss", format_seconds(window.start)])
        duration = window.duration()
        if duration is not None:
            args.extend(["-t", format_seconds(duration)])
        args.extend(
            [
                "-c:v", "libx264",
                "-preset", self.config.final_preset,
                "-crf", str(self.config.crf),
                "-c:a", "aac",
                "-b:a", self.config.audio_bitrate,
                "-y", str(output_path),
            ]
        )  # fmt: skip
        return args

    async def _export_multi(
        self,
        job: ExportJob,
        output_path: Path,
        on_progress: Optional[ProgressCallback],
    ) -> None:
        job_id = uuid.uuid4().hex[:8]
        temp_dir = Path(self.config.temp_dir)
        temp_dir.mkdir(parents=True, exist_ok=True)
        temp_files: List[Path] = []
        manifest_path = temp_dir / f"clipforge_{job_id}_concat.txt"
        total = job.clip_count

        try:
            for index, descriptor in enumerate(job.clips, start=1):
                await self._notify(
                    on_progress,
                    ExportProgress(index, total, f"Processing clip {index} of {total}"),
                )
                temp_path = temp_dir / f"clipforge_{job_id}_{index}.mp4"
                # Registered before encoding so a partial output is removed too
                temp_files.append(temp_path)
                await self._encode_clip(index, descriptor, temp_path)

            await self._notify(
                on_progress, ExportProgress(total, total, "Concatenating clips")
            )
            async with aiofiles.open(manifest_path, "w", encoding="utf-8") as manifest:
                await manifest.write(build_manifest(temp_files))
            logger.info(f"Created concat file: {manifest_path}")

            result = await self.runner.run(
                [
                    "-f", "concat",
                    "-safe", "0",
                    "-i", str(manifest_path),
                    "-c", "copy",
                    "-y", str(output_path),
                ]
            )  # fmt: skip
            if not result.succeeded:
                logger.error(f"FFmpeg concat failed: {result.stderr_text}")
                raise EncodingFailureError(
                    f"FFmpeg concat failed: {result.stderr_text}",
                    context=ErrorContext(
                        operation="concat",
                        path=str(output_path),
                        exit_code=result.returncode,
                    ),
                )
        finally:
            for path in [*temp_files, manifest_path]:
                self._remove_file(path)

    async def _encode_clip(
        self, index: int, descriptor: ClipDescriptor, temp_path: Path
    ) -> None:
        clip = await self.resolve_clip(index, descriptor)
        logger.info(
            f"Exporting clip {index} to {temp_path} "
            f"(duration={format_seconds(clip.duration)}, "
            f"filter_graph={clip.needs_filter_graph})"
        )

        result = await self.runner.run(
            self.clip_args(clip, temp_path, self.config.temp_preset)
        )
        if not result.succeeded:
            logger.error(f"FFmpeg failed for clip {index}: {result.stderr_text}")
            raise classify_export_failure(result.stderr_text, index).to_exception(
                context=ErrorContext(
                    operation="export",
                    path=str(descriptor.source_path),
                    clip_index=index,
                    exit_code=result.returncode,
                )
            )

    def _encode_args(self, preset: str) -> List[str]:
        return [
            "-c:v", "libx264",
            "-preset", preset,
            "-crf", str(self.config.crf),
            "-pix_fmt", "yuv420p",
            "-r", str(self.config.filler_framerate),
            "-c:a", "aac",
            "-b:a", self.config.audio_bitrate,
            "-ar", str(self.config.audio_sample_rate),
            "-ac", "2",
        ]  # fmt: skip

    @staticmethod
    async def _notify(
        on_progress: Optional[ProgressCallback], progress: ExportProgress
    ) -> None:
        logger.info(f"Export progress: {progress.status}")
        if on_progress is None:
            return
        result = on_progress(progress)
        if inspect.isawaitable(result):
            await result

    @staticmethod
    def _remove_file(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove {path}: {e}")