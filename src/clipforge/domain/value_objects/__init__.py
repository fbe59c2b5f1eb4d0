"""Domain value objects."""

from .time_range import TrimWindow, format_seconds, round_to_millis

__all__ = ["TrimWindow", "format_seconds", "round_to_millis"]
