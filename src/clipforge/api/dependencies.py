"""FastAPI dependency injection."""

from fastapi import Depends, Request

from ..infrastructure.config import Settings, get_settings
from ..infrastructure.export.clip_pipeline import ClipExportPipeline
from ..infrastructure.media.process_runner import ToolRunner
from ..infrastructure.media.prober import MediaProber
from ..infrastructure.media.thumbnail_generator import ThumbnailGenerator
from ..infrastructure.media.waveform import WaveformGenerator
from ..infrastructure.recording.audio_devices import AudioDeviceLister
from ..infrastructure.recording.controller import RecordingController
from ..infrastructure.streaming.range_server import RangeFileReader
from ..services.media_library import MediaLibrary


def get_settings_dep() -> Settings:
    """Get application settings."""
    return get_settings()


def get_ffmpeg_runner(settings: Settings = Depends(get_settings_dep)) -> ToolRunner:
    return ToolRunner(settings.tools.ffmpeg_path, "ffmpeg")


def get_ffprobe_runner(settings: Settings = Depends(get_settings_dep)) -> ToolRunner:
    return ToolRunner(settings.tools.ffprobe_path, "ffprobe")


def get_prober(runner: ToolRunner = Depends(get_ffprobe_runner)) -> MediaProber:
    return MediaProber(runner)


def get_recording_controller(request: Request) -> RecordingController:
    """The application's single recording controller (created at startup)."""
    return request.app.state.recording_controller


def get_device_lister(
    ffmpeg: ToolRunner = Depends(get_ffmpeg_runner),
    settings: Settings = Depends(get_settings_dep),
) -> AudioDeviceLister:
    return AudioDeviceLister(
        ffmpeg_runner=ffmpeg,
        pactl_runner=ToolRunner(settings.tools.pactl_path, "pactl"),
    )


def get_export_pipeline(
    ffmpeg: ToolRunner = Depends(get_ffmpeg_runner),
    prober: MediaProber = Depends(get_prober),
    settings: Settings = Depends(get_settings_dep),
) -> ClipExportPipeline:
    return ClipExportPipeline(runner=ffmpeg, prober=prober, config=settings.export)


def get_media_library(
    ffmpeg: ToolRunner = Depends(get_ffmpeg_runner),
    prober: MediaProber = Depends(get_prober),
    settings: Settings = Depends(get_settings_dep),
) -> MediaLibrary:
    return MediaLibrary(
        prober=prober,
        thumbnails=ThumbnailGenerator(
            settings.thumbnails.cache_dir, settings.thumbnails.width, ffmpeg
        ),
        waveforms=WaveformGenerator(ffmpeg),
    )


def get_range_reader(settings: Settings = Depends(get_settings_dep)) -> RangeFileReader:
    return RangeFileReader(
        media_type=settings.streaming.media_type,
        max_span_bytes=settings.streaming.max_span_bytes,
    )
