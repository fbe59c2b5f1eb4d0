"""Byte-range reads of media files for scrubbing playback.

Every request opens the file fresh and reads exactly the requested span. A
failed or short read is reported as an internal error with an empty body;
the reader never answers with fewer bytes than it declares.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

import aiofiles

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, HEAD, OPTIONS",
    "Access-Control-Allow-Headers": "*",
}


def base_headers() -> Dict[str, str]:
    """Headers carried by every range server response."""
    return {"Accept-Ranges": "bytes", **CORS_HEADERS}


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte interval of a resource."""

    start: int
    end: int
    total: int

    @property
    def length(self) -> int:
        return max(self.end - self.start + 1, 0)

    @property
    def is_satisfiable(self) -> bool:
        return 0 <= self.start <= self.end < self.total

    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end}/{self.total}"

    def capped(self, max_length: Optional[int]) -> "ByteRange":
        """The same range, shortened to at most ``max_length`` bytes."""
        if not max_length or self.length <= max_length:
            return self
        return ByteRange(start=self.start, end=self.start + max_length - 1, total=self.total)


@dataclass
class RangeResponse:
    """Status, payload and headers of one range server response."""

    status_code: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=base_headers)
    total_length: Optional[int] = None


def _parse_bound(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def parse_range_header(value: Optional[str], file_size: int) -> Optional[ByteRange]:
    """Parse a ``Range: bytes=start-end`` header value.

    An empty end means "through the end of the file" and any end is clamped
    to ``file_size - 1``. A malformed number falls back to its boundary
    (start 0, end ``file_size - 1``) instead of failing the request.

    Args:
        value: Header value, e.g. ``bytes=0-1023``
        file_size: Total size of the resource

    Returns:
        ByteRange, or None when no range was requested
    """
    if not value:
        return None

    _, _, spec = value.strip().partition("=")
    # Multiple ranges are not supported; serve the first
    spec = spec.split(",")[0]
    start_text, _, end_text = spec.partition("-")

    last_byte = file_size - 1
    start = _parse_bound(start_text, 0)
    end = _parse_bound(end_text, last_byte) if end_text.strip() else last_byte
    return ByteRange(start=start, end=min(end, last_byte), total=file_size)


def resolve_media_path(raw_path: str) -> Path:
    """Turn a route path parameter back into a filesystem path.

    Routes receive absolute paths without their leading slash; Windows
    drive paths (``C:/...``) are kept as they are.
    """
    if len(raw_path) > 1 and raw_path[1] == ":":
        return Path(raw_path)
    if not raw_path.startswith("/"):
        raw_path = "/" + raw_path
    return Path(raw_path)


class RangeFileReader:
    """Reads whole files or byte ranges into RangeResponses.

    A range longer than ``max_span_bytes`` is answered with its first
    ``max_span_bytes`` bytes; the Content-Range tells the client where to
    continue.
    """

    def __init__(self, media_type: str = "video/mp4", max_span_bytes: Optional[int] = None):
        self.media_type = media_type
        self.max_span_bytes = max_span_bytes

    async def read(
        self, path: Union[str, Path], range_header: Optional[str] = None
    ) -> RangeResponse:
        """Answer one request for ``path``.

        Args:
            path: File to serve
            range_header: Raw ``Range`` header value, if any

        Returns:
            200 with the whole file, 206 with the requested slice, 404 with a
            text body when the file is missing, or 500 with an empty body
            when the read cannot be satisfied
        """
        file_path = Path(path)
        if not file_path.is_file():
            logger.warning(f"Video not found: {file_path}")
            headers = base_headers()
            headers["Content-Type"] = "text/plain; charset=utf-8"
            return RangeResponse(
                status_code=404,
                body=f"Video not found: {file_path}".encode("utf-8"),
                headers=headers,
            )

        try:
            file_size = file_path.stat().st_size
            byte_range = parse_range_header(range_header, file_size)
            if byte_range is None:
                return await self._read_whole(file_path, file_size)
            return await self._read_range(file_path, byte_range)
        except OSError as e:
            logger.error(f"Failed to read {file_path}: {e}")
            return self._internal_error()

    async def _read_whole(self, file_path: Path, file_size: int) -> RangeResponse:
        async with aiofiles.open(file_path, "rb") as f:
            body = await f.read()
        if len(body) != file_size:
            logger.error(
                f"Short read of {file_path}: expected {file_size} bytes, got {len(body)}"
            )
            return self._internal_error()

        headers = base_headers()
        headers["Content-Type"] = self.media_type
        headers["Content-Length"] = str(file_size)
        return RangeResponse(
            status_code=200, body=body, headers=headers, total_length=file_size
        )

    async def _read_range(self, file_path: Path, byte_range: ByteRange) -> RangeResponse:
        if not byte_range.is_satisfiable:
            logger.error(f"Unsatisfiable range {byte_range} for {file_path}")
            return self._internal_error()

        byte_range = byte_range.capped(self.max_span_bytes)
        async with aiofiles.open(file_path, "rb") as f:
            await f.seek(byte_range.start)
            body = await f.read(byte_range.length)
        if len(body) != byte_range.length:
            logger.error(
                f"Short read of {file_path}: expected {byte_range.length} bytes, "
                f"got {len(body)}"
            )
            return self._internal_error()

        headers = base_headers()
        headers["Content-Type"] = self.media_type
        headers["Content-Length"] = str(byte_range.length)
        headers["Content-Range"] = byte_range.content_range()
        logger.debug(f"Serving {byte_range.content_range()} of {file_path.name}")
        return RangeResponse(
            status_code=206, body=body, headers=headers, total_length=byte_range.total
        )

    @staticmethod
    def _internal_error() -> RangeResponse:
        return RangeResponse(status_code=500, body=b"", headers=base_headers())
