"""Classification of ffmpeg diagnostic text into user-facing failures.

ffmpeg exposes no structured error channel, so failures are recognised by
substring matching on stderr. This is best-effort: message wording changes
between ffmpeg releases, and every heuristic lives in this module so it can be
replaced wholesale if the tool ever reports errors in a structured form.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Type

from ...domain.exceptions import (
    EncodingFailureError,
    ErrorContext,
    InvalidDeviceError,
    MediaError,
    PermissionDeniedError,
)

ERROR_KEYWORDS = ("error", "invalid", "failed", "cannot", "unable", "not found")
MAX_ERROR_LINES = 3

# ffmpeg exits with 255 when it was asked to stop through SIGINT
INTERRUPTED_EXIT_CODE = 255

PERMISSION_PATTERNS = ("not permitted", "permission denied")
INVALID_DEVICE_PATTERNS = ("invalid device",)
INPUT_MISSING_PATTERNS = ("no such file or directory",)
CORRUPT_INPUT_PATTERNS = (
    "invalid data found when processing input",
    "moov atom not found",
    "could not find codec parameters",
)
ENCODER_TIMING_PATTERNS = (
    "end of file",
    "non-monotonous dts",
    "non monotonically increasing dts",
)


class FailureKind(str, Enum):
    """Recognised failure categories."""

    PERMISSION_DENIED = "permission_denied"
    INVALID_DEVICE = "invalid_device"
    INPUT_MISSING = "input_missing"
    CORRUPT_INPUT = "corrupt_input"
    ENCODER_TIMING = "encoder_timing"
    GENERIC = "generic"


@dataclass(frozen=True)
class Diagnosis:
    """A classified failure with the message shown to the user."""

    kind: FailureKind
    message: str

    def to_exception(
        self,
        default: Type[MediaError] = EncodingFailureError,
        context: Optional[ErrorContext] = None,
    ) -> MediaError:
        """Build the exception matching this diagnosis.

        Args:
            default: Exception class for kinds without a dedicated class
            context: Structured error context

        Returns:
            Exception instance ready to raise
        """
        if self.kind == FailureKind.PERMISSION_DENIED:
            return PermissionDeniedError(self.message, context=context)
        if self.kind == FailureKind.INVALID_DEVICE:
            return InvalidDeviceError(self.message, context=context)
        return default(self.message, context=context)


def _contains_any(text: str, patterns: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(pattern in lowered for pattern in patterns)


def extract_error_lines(stderr_text: str, limit: int = MAX_ERROR_LINES) -> List[str]:
    """Pick at most ``limit`` lines that look like errors."""
    lines = []
    for line in stderr_text.splitlines():
        stripped = line.strip()
        if stripped and _contains_any(stripped, ERROR_KEYWORDS):
            lines.append(stripped)
            if len(lines) >= limit:
                break
    return lines


def is_normal_exit(returncode: Optional[int], interrupt_signal: int = 2) -> bool:
    """Whether a stopped capture process ended the way a clean stop does.

    Success, ffmpeg's "stopped via interrupt" code, and death by the interrupt
    signal itself (reported by asyncio as a negative return code) all count.
    """
    return returncode in (0, INTERRUPTED_EXIT_CODE, -interrupt_signal)


def classify_recording_failure(
    stderr_text: str, returncode: Optional[int], during_startup: bool = False
) -> Diagnosis:
    """Translate a failed capture process into an actionable message.

    Args:
        stderr_text: Collected diagnostic output of the capture process
        returncode: Exit status of the process
        during_startup: Whether the process died inside the startup grace period

    Returns:
        Diagnosis with kind and user-facing message
    """
    if _contains_any(stderr_text, PERMISSION_PATTERNS):
        return Diagnosis(
            FailureKind.PERMISSION_DENIED,
            "Recording failed: Screen recording permission denied. Please grant "
            "permission in System Settings > Privacy & Security > Screen Recording",
        )
    if _contains_any(stderr_text, INVALID_DEVICE_PATTERNS):
        return Diagnosis(
            FailureKind.INVALID_DEVICE, "Recording failed: Invalid audio device selected"
        )

    if during_startup:
        details = extract_error_lines(stderr_text) or stderr_text.strip().splitlines()[-1:]
        if details:
            return Diagnosis(
                FailureKind.GENERIC,
                f"FFmpeg failed to start recording. Error: {' | '.join(details)}",
            )
        return Diagnosis(
            FailureKind.GENERIC,
            f"FFmpeg exited immediately with status: {returncode}",
        )

    if "Exiting normally" not in stderr_text:
        for line in stderr_text.splitlines():
            if "Error" in line:
                return Diagnosis(FailureKind.GENERIC, f"Recording failed: {line.strip()}")

    return Diagnosis(
        FailureKind.GENERIC,
        f"Recording failed with status: {returncode}. Check the logs for details.",
    )


def classify_export_failure(stderr_text: str, clip_index: int) -> Diagnosis:
    """Translate a failed per-clip encode into a targeted message.

    Args:
        stderr_text: ffmpeg stderr of the failed encode
        clip_index: 1-based position of the clip in the job

    Returns:
        Diagnosis with kind and user-facing message
    """
    if _contains_any(stderr_text, INPUT_MISSING_PATTERNS):
        return Diagnosis(
            FailureKind.INPUT_MISSING,
            f"Clip {clip_index}: the source file could not be found.",
        )
    if _contains_any(stderr_text, CORRUPT_INPUT_PATTERNS):
        return Diagnosis(
            FailureKind.CORRUPT_INPUT,
            f"Clip {clip_index}: the source file is corrupt or not a supported video.",
        )
    if _contains_any(stderr_text, PERMISSION_PATTERNS):
        return Diagnosis(
            FailureKind.PERMISSION_DENIED,
            f"Clip {clip_index}: permission denied while reading the source or "
            "writing the output. Check file permissions and privacy settings.",
        )
    if _contains_any(stderr_text, ENCODER_TIMING_PATTERNS):
        return Diagnosis(
            FailureKind.ENCODER_TIMING,
            f"Clip {clip_index}: the encoder reached the end of the source before the "
            "requested range finished. Try shortening the trim of this clip.",
        )

    details = extract_error_lines(stderr_text)
    if details:
        return Diagnosis(
            FailureKind.GENERIC, f"Clip {clip_index} failed to export: {' | '.join(details)}"
        )
    return Diagnosis(FailureKind.GENERIC, f"Clip {clip_index} failed to export.")
