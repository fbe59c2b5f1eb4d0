"""Tests for the capture process stderr monitor."""

import asyncio
import logging

import pytest

from clipforge.infrastructure.recording.stderr_monitor import StderrMonitor


def stream_of(*chunks: bytes) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    for chunk in chunks:
        reader.feed_data(chunk)
    reader.feed_eof()
    return reader


class TestStderrMonitor:
    """Test line splitting, tail retention and logging."""

    @pytest.mark.asyncio
    async def test_collects_lines_across_chunks(self):
        monitor = StderrMonitor(stream_of(b"Input #0, avfoundation\nOut", b"put #0, mp4\n"))
        monitor.start()
        await monitor.wait()

        assert monitor.lines == ["Input #0, avfoundation", "Output #0, mp4"]

    @pytest.mark.asyncio
    async def test_progress_redraws_become_lines(self):
        monitor = StderrMonitor(stream_of(b"frame=1 fps=0\rframe=2 fps=30\rframe=3"))
        monitor.start()
        await monitor.wait()

        assert monitor.lines == ["frame=1 fps=0", "frame=2 fps=30", "frame=3"]
        assert monitor.text == "frame=1 fps=0\nframe=2 fps=30\nframe=3"

    @pytest.mark.asyncio
    async def test_tail_is_bounded(self):
        payload = b"".join(f"line {i}\n".encode() for i in range(50))
        monitor = StderrMonitor(stream_of(payload), max_lines=5)
        monitor.start()
        await monitor.wait()

        assert monitor.lines == [f"line {i}" for i in range(45, 50)]

    @pytest.mark.asyncio
    async def test_warning_lines_are_escalated(self, caplog):
        monitor = StderrMonitor(stream_of(b"frame=10\nThread message queue blocking; 3 frames drop\n"))
        with caplog.at_level(logging.DEBUG, logger="clipforge.infrastructure.recording.stderr_monitor"):
            monitor.start()
            await monitor.wait()

        warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
        assert warnings == ["[ffmpeg] Thread message queue blocking; 3 frames drop"]

    @pytest.mark.asyncio
    async def test_no_stream(self):
        monitor = StderrMonitor(None)
        monitor.start()
        await monitor.wait()
        assert monitor.lines == []
