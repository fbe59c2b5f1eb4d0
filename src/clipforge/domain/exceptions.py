"""Domain-specific exceptions.

These exceptions represent the terminal failure results of the media core:
missing tools, missing inputs, unparseable tool output, encoder failures and
recording state conflicts. Nothing raising them is retried automatically; the
caller decides what to do next.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ErrorContext:
    """Structured error context."""

    operation: Optional[str] = None
    path: Optional[str] = None
    clip_index: Optional[int] = None
    exit_code: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        result: Dict[str, Any] = {}
        if self.operation:
            result["operation"] = self.operation
        if self.path:
            result["path"] = self.path
        if self.clip_index is not None:
            result["clip_index"] = self.clip_index
        if self.exit_code is not None:
            result["exit_code"] = self.exit_code
        if self.extra:
            result.update(self.extra)
        return result


class MediaError(Exception):
    """Base exception for all media core errors.

    Provides context about what went wrong and where.
    """

    def __init__(self, message: str, *, context: Optional[ErrorContext] = None):
        """Initialize with a user-facing message and structured context.

        Args:
            message: Human-readable error message
            context: Structured error context
        """
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"context={self.context!r})"
        )


class ToolUnavailableError(MediaError):
    """Raised when ffmpeg or ffprobe cannot be executed."""

    def __init__(self, tool: str, reason: str = ""):
        message = (
            f"Failed to execute {tool}. Make sure FFmpeg is installed and on your PATH."
        )
        if reason:
            message = f"{message} Error: {reason}"
        super().__init__(message, context=ErrorContext(extra={"tool": tool}))
        self.tool = tool


class InputMissingError(MediaError):
    """Raised when a source file does not exist."""

    def __init__(self, path: str, clip_index: Optional[int] = None):
        if clip_index is not None:
            message = f"Clip {clip_index}: input file does not exist: {path}"
        else:
            message = f"File does not exist: {path}"
        super().__init__(
            message, context=ErrorContext(path=str(path), clip_index=clip_index)
        )


class ProbeError(MediaError):
    """Raised when a media file cannot be probed."""


class NoVideoStreamError(ProbeError):
    """Raised when a probed file has no video stream."""

    def __init__(self, path: str):
        super().__init__(
            f"No video stream found in {path}",
            context=ErrorContext(operation="probe", path=str(path)),
        )


class MalformedOutputError(ProbeError):
    """Raised when tool output cannot be parsed."""


class EncodingFailureError(MediaError):
    """Raised when ffmpeg exits with a failure status."""


class PermissionDeniedError(MediaError):
    """Raised when the OS refused access to a device or file."""


class ExportError(MediaError):
    """Raised when an export job itself is invalid."""


class RecordingError(MediaError):
    """Base class for recording lifecycle failures."""


class RecordingConflictError(RecordingError):
    """Raised when a recording is started while another is active."""

    def __init__(self) -> None:
        super().__init__(
            "Recording already in progress",
            context=ErrorContext(operation="start_recording"),
        )


class NoActiveRecordingError(RecordingError):
    """Raised when stop is requested with nothing recording."""

    def __init__(self) -> None:
        super().__init__(
            "No active recording", context=ErrorContext(operation="stop_recording")
        )


class RecordingStartError(RecordingError):
    """Raised when the capture process dies during startup."""


class RecordingStopError(RecordingError):
    """Raised when the capture process ends with an abnormal status."""


class InvalidDeviceError(RecordingError):
    """Raised when the capture layer rejected the selected device."""
