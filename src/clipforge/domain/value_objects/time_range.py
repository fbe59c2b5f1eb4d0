"""Millisecond-precision time values and trim windows."""

from dataclasses import dataclass
from typing import Optional

from ..exceptions import ExportError


def round_to_millis(seconds: float) -> float:
    """Round a time value to millisecond precision.

    Rounding is idempotent: an already aligned value comes back unchanged.

    Args:
        seconds: Time value in seconds

    Returns:
        The value rounded to three decimal places
    """
    return round(float(seconds) * 1000.0) / 1000.0


def format_seconds(seconds: float) -> str:
    """Render seconds as an ffmpeg numeric literal with bounded precision."""
    return f"{round_to_millis(seconds):.3f}"


@dataclass(frozen=True)
class TrimWindow:
    """Millisecond-aligned trim window in seconds.

    An ``end`` of ``None`` means "through the end of the source".
    """

    start: float = 0.0
    end: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, "start", round_to_millis(self.start))
        if self.end is not None:
            object.__setattr__(self, "end", round_to_millis(self.end))

        if self.start < 0:
            raise ExportError(f"Trim start cannot be negative: {self.start}")
        if self.end is not None and self.end < self.start:
            raise ExportError(
                f"Trim end {self.end} must not be before trim start {self.start}"
            )

    @classmethod
    def from_bounds(
        cls, start: Optional[float], end: Optional[float]
    ) -> "TrimWindow":
        """Build a window from optional bounds, defaulting start to zero."""
        return cls(start=start if start is not None else 0.0, end=end)

    def duration(self, source_duration: Optional[float] = None) -> Optional[float]:
        """Length of the window, using the source duration for open ends.

        Args:
            source_duration: Full length of the source, if known

        Returns:
            Millisecond-rounded duration, or None when it cannot be known
        """
        end = self.end if self.end is not None else source_duration
        if end is None:
            return None
        return round_to_millis(max(end - self.start, 0.0))
