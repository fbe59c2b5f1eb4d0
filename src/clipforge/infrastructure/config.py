"""Configuration settings for ClipForge.

This module provides centralized configuration management using Pydantic Settings,
with logical grouping of related settings. Every group can be overridden from the
environment using the ``CLIPFORGE_`` prefix and ``__`` as the nested delimiter,
e.g. ``CLIPFORGE_RECORDING__FRAMERATE=60``.
"""

import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseModel):
    """Core application configuration."""

    name: str = Field(default="ClipForge", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "test", "production"] = Field(
        default="development", description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


class APIConfig(BaseModel):
    """API-specific configuration."""

    prefix: str = Field(default="/api/v1", description="API route prefix")
    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8765, description="Bind port")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")


class ToolsConfig(BaseModel):
    """External tool locations."""

    ffmpeg_path: str = Field(default="ffmpeg", description="ffmpeg executable")
    ffprobe_path: str = Field(default="ffprobe", description="ffprobe executable")
    pactl_path: str = Field(
        default="pactl", description="PulseAudio control tool used for device listing"
    )


class RecordingConfig(BaseModel):
    """Capture process configuration."""

    framerate: int = Field(default=30, description="Capture and output frame rate")
    startup_grace_seconds: float = Field(
        default=0.5, description="Wait before checking that the encoder survived startup"
    )
    flush_seconds: float = Field(
        default=0.5, description="Wait after a clean stop so buffered writes land"
    )
    max_width: int = Field(default=1920, description="Output bounding box width")
    max_height: int = Field(default=1080, description="Output bounding box height")
    preset: str = Field(default="veryfast", description="x264 preset for capture")
    crf: int = Field(default=23, description="x264 constant rate factor")
    audio_sample_rate: int = Field(default=48000, description="Output audio rate")
    pip_width: int = Field(default=320, description="Camera overlay width in combo mode")
    pip_margin: int = Field(default=20, description="Camera overlay margin in pixels")
    screen_device: Optional[str] = Field(
        default=None, description="Override the platform screen capture device"
    )
    camera_device: Optional[str] = Field(
        default=None, description="Override the platform camera device"
    )
    default_microphone: Optional[str] = Field(
        default=None, description="Device used when routing asks for 'default'"
    )


class ExportConfig(BaseModel):
    """Clip export configuration."""

    temp_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Directory for intermediate clip files and manifests",
    )
    temp_preset: str = Field(
        default="veryfast", description="x264 preset for intermediate clips"
    )
    final_preset: str = Field(default="fast", description="x264 preset for direct exports")
    crf: int = Field(default=23, description="x264 constant rate factor")
    audio_bitrate: str = Field(default="128k", description="AAC bitrate")
    audio_sample_rate: int = Field(default=48000, description="Output audio rate")
    filler_color: str = Field(default="black", description="Colour used for muted video")
    filler_framerate: int = Field(default=30, description="Frame rate of generated filler")


class ThumbnailConfig(BaseModel):
    """Thumbnail cache configuration."""

    cache_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "clipforge_thumbnails",
        description="Content-addressed thumbnail cache",
    )
    width: int = Field(default=320, description="Thumbnail width in pixels")


class StreamingConfig(BaseModel):
    """Range server configuration."""

    route_prefix: str = Field(default="/video", description="Route serving media files")
    media_type: str = Field(default="video/mp4", description="Content-Type of media bytes")
    max_span_bytes: Optional[int] = Field(
        default=8 * 1024 * 1024,
        ge=1,
        description="Longest byte range answered in one response (None for no limit)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Application log level")
    format: Literal["json", "console"] = Field(
        default="console", description="Log renderer"
    )


class LogfireConfig(BaseModel):
    """Pydantic Logfire configuration."""

    enabled: bool = Field(default=False, description="Enable Logfire tracing")
    token: Optional[SecretStr] = Field(default=None, description="Logfire write token")
    service_name: str = Field(default="clipforge", description="Service name")
    console_enabled: bool = Field(
        default=False, description="Enable Logfire console output"
    )


class Settings(BaseSettings):
    """Application settings with logical grouping."""

    model_config = SettingsConfigDict(
        env_prefix="CLIPFORGE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app: AppConfig = Field(default_factory=AppConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    recording: RecordingConfig = Field(default_factory=RecordingConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    thumbnails: ThumbnailConfig = Field(default_factory=ThumbnailConfig)
    streaming: StreamingConfig = Field(default_factory=StreamingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    logfire: LogfireConfig = Field(default_factory=LogfireConfig)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app.is_production


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()
