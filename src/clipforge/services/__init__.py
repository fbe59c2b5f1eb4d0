"""Application services composed from infrastructure components."""

from .media_library import MediaLibrary

__all__ = ["MediaLibrary"]
