"""Tests for byte-range file reads."""

from unittest.mock import patch

import pytest

from clipforge.infrastructure.streaming.range_server import (
    ByteRange,
    RangeFileReader,
    parse_range_header,
    resolve_media_path,
)

DATA = bytes(range(256)) * 40
SIZE = len(DATA)


@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "video.mp4"
    path.write_bytes(DATA)
    return path


class TestParseRangeHeader:
    """Test Range header parsing."""

    def test_no_header(self):
        assert parse_range_header(None, SIZE) is None
        assert parse_range_header("", SIZE) is None

    def test_closed_range(self):
        assert parse_range_header("bytes=10-99", SIZE) == ByteRange(10, 99, SIZE)

    def test_open_end(self):
        assert parse_range_header("bytes=100-", SIZE) == ByteRange(100, SIZE - 1, SIZE)

    def test_end_is_clamped(self):
        assert parse_range_header("bytes=0-999999", SIZE).end == SIZE - 1

    def test_malformed_bounds_fall_back(self):
        assert parse_range_header("bytes=abc-99", SIZE) == ByteRange(0, 99, SIZE)
        assert parse_range_header("bytes=5-xyz", SIZE) == ByteRange(5, SIZE - 1, SIZE)

    def test_first_of_multiple_ranges(self):
        assert parse_range_header("bytes=0-9, 20-29", SIZE) == ByteRange(0, 9, SIZE)

    def test_content_range(self):
        assert ByteRange(0, 99, 1000).content_range() == "bytes 0-99/1000"
        assert ByteRange(0, 99, 1000).length == 100


class TestResolveMediaPath:
    """Test route path to filesystem path conversion."""

    def test_leading_slash_restored(self):
        assert str(resolve_media_path("Users/me/clip.mp4")) == "/Users/me/clip.mp4"

    def test_absolute_path_kept(self):
        assert str(resolve_media_path("/tmp/clip.mp4")) == "/tmp/clip.mp4"

    def test_drive_letter_kept(self):
        assert resolve_media_path("C:/Videos/clip.mp4").parts[0].startswith("C:")


class TestRangeFileReader:
    """Test whole-file and partial reads."""

    @pytest.mark.asyncio
    async def test_whole_file(self, video_file):
        response = await RangeFileReader().read(video_file)

        assert response.status_code == 200
        assert response.body == DATA
        assert response.headers["Content-Length"] == str(SIZE)
        assert response.headers["Content-Type"] == "video/mp4"
        assert response.headers["Accept-Ranges"] == "bytes"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("start,end", [(0, 0), (10, 99), (1000, 5000), (100, SIZE - 1)])
    async def test_slice_matches_file(self, video_file, start, end):
        response = await RangeFileReader().read(video_file, f"bytes={start}-{end}")

        assert response.status_code == 206
        assert response.body == DATA[start : end + 1]
        assert response.headers["Content-Length"] == str(end - start + 1)
        assert response.headers["Content-Range"] == f"bytes {start}-{end}/{SIZE}"

    @pytest.mark.asyncio
    async def test_open_range_equals_explicit_end(self, video_file):
        reader = RangeFileReader()
        open_ended = await reader.read(video_file, "bytes=500-")
        explicit = await reader.read(video_file, f"bytes=500-{SIZE - 1}")

        assert open_ended.body == explicit.body
        assert open_ended.headers["Content-Range"] == explicit.headers["Content-Range"]

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        missing = tmp_path / "missing.mp4"
        response = await RangeFileReader().read(missing, "bytes=0-10")

        assert response.status_code == 404
        assert response.body.decode() == f"Video not found: {missing}"
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    @pytest.mark.asyncio
    async def test_start_beyond_end_of_file(self, video_file):
        response = await RangeFileReader().read(video_file, f"bytes={SIZE + 10}-")

        assert response.status_code == 500
        assert response.body == b""
        assert "Content-Range" not in response.headers

    @pytest.mark.asyncio
    async def test_read_error(self, video_file):
        with patch(
            "clipforge.infrastructure.streaming.range_server.aiofiles.open",
            side_effect=OSError("I/O error"),
        ):
            response = await RangeFileReader().read(video_file, "bytes=0-10")

        assert response.status_code == 500
        assert response.body == b""

    @pytest.mark.asyncio
    async def test_custom_media_type(self, video_file):
        response = await RangeFileReader(media_type="video/quicktime").read(video_file)
        assert response.headers["Content-Type"] == "video/quicktime"

    @pytest.mark.asyncio
    async def test_total_length_reported(self, video_file):
        reader = RangeFileReader()

        assert (await reader.read(video_file)).total_length == SIZE
        assert (await reader.read(video_file, "bytes=10-19")).total_length == SIZE
        assert (await reader.read(video_file.with_name("nope.mp4"))).total_length is None


class TestSpanLimit:
    """Test the per-response cap on range length."""

    @pytest.mark.asyncio
    async def test_open_range_from_start_is_bounded(self, video_file):
        response = await RangeFileReader(max_span_bytes=1024).read(video_file, "bytes=0-")

        assert response.status_code == 206
        assert response.body == DATA[:1024]
        assert response.headers["Content-Length"] == "1024"
        assert response.headers["Content-Range"] == f"bytes 0-1023/{SIZE}"
        assert response.total_length == SIZE

    @pytest.mark.asyncio
    async def test_bounded_slice_starts_at_requested_offset(self, video_file):
        response = await RangeFileReader(max_span_bytes=100).read(video_file, "bytes=5000-")

        assert response.body == DATA[5000:5100]
        assert response.headers["Content-Range"] == f"bytes 5000-5099/{SIZE}"

    @pytest.mark.asyncio
    async def test_short_range_is_not_affected(self, video_file):
        response = await RangeFileReader(max_span_bytes=1024).read(video_file, "bytes=10-19")

        assert response.body == DATA[10:20]
        assert response.headers["Content-Range"] == f"bytes 10-19/{SIZE}"

    def test_capped(self):
        byte_range = ByteRange(start=100, end=999, total=1000)

        assert byte_range.capped(None) is byte_range
        assert byte_range.capped(900) is byte_range
        assert byte_range.capped(50) == ByteRange(start=100, end=149, total=1000)
