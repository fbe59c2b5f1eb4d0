"""Range-aware media file serving."""

from .range_server import (
    ByteRange,
    RangeFileReader,
    RangeResponse,
    parse_range_header,
    resolve_media_path,
)

__all__ = [
    "ByteRange",
    "RangeFileReader",
    "RangeResponse",
    "parse_range_header",
    "resolve_media_path",
]
