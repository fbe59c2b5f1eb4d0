"""Tests for ffmpeg failure classification."""

import pytest

from clipforge.domain.exceptions import (
    EncodingFailureError,
    InvalidDeviceError,
    PermissionDeniedError,
    RecordingStartError,
)
from clipforge.infrastructure.media.diagnostics import (
    FailureKind,
    classify_export_failure,
    classify_recording_failure,
    extract_error_lines,
    is_normal_exit,
)


class TestExtractErrorLines:
    """Test error line selection."""

    def test_picks_error_like_lines(self):
        text = "frame=10 fps=30\nInput #0: error reading header\nsize=10kB\nUnable to open\n"
        assert extract_error_lines(text) == ["Input #0: error reading header", "Unable to open"]

    def test_limit(self):
        text = "\n".join(f"error {i}" for i in range(10))
        assert len(extract_error_lines(text)) == 3


class TestNormalExit:
    """Test clean stop detection."""

    @pytest.mark.parametrize("code", [0, 255, -2])
    def test_normal(self, code):
        assert is_normal_exit(code)

    @pytest.mark.parametrize("code", [1, -9, None])
    def test_abnormal(self, code):
        assert not is_normal_exit(code)


class TestRecordingFailures:
    """Test recording failure classification."""

    def test_permission_denied(self):
        diagnosis = classify_recording_failure(
            "[avfoundation] Operation not permitted", 1, during_startup=True
        )
        assert diagnosis.kind == FailureKind.PERMISSION_DENIED
        assert "permission denied" in diagnosis.message
        assert isinstance(diagnosis.to_exception(RecordingStartError), PermissionDeniedError)

    def test_invalid_device(self):
        diagnosis = classify_recording_failure("Invalid device index 7", 1)
        assert diagnosis.message == "Recording failed: Invalid audio device selected"
        assert isinstance(diagnosis.to_exception(RecordingStartError), InvalidDeviceError)

    def test_startup_failure_quotes_errors(self):
        diagnosis = classify_recording_failure(
            "ffmpeg version 6\nUnknown input format: 'x11grab'\nError opening input",
            1,
            during_startup=True,
        )
        assert diagnosis.message == "FFmpeg failed to start recording. Error: Error opening input"
        assert isinstance(diagnosis.to_exception(RecordingStartError), RecordingStartError)

    def test_startup_failure_without_output(self):
        diagnosis = classify_recording_failure("", 1, during_startup=True)
        assert diagnosis.message == "FFmpeg exited immediately with status: 1"

    def test_stop_failure_uses_error_line(self):
        diagnosis = classify_recording_failure("frame=1\nError writing trailer\n", 1)
        assert diagnosis.message == "Recording failed: Error writing trailer"

    def test_stop_failure_without_error_line(self):
        diagnosis = classify_recording_failure("frame=1", 137)
        assert "status: 137" in diagnosis.message


class TestExportFailures:
    """Test per-clip export failure classification."""

    @pytest.mark.parametrize(
        "stderr,kind",
        [
            ("src.mp4: No such file or directory", FailureKind.INPUT_MISSING),
            ("moov atom not found", FailureKind.CORRUPT_INPUT),
            ("Invalid data found when processing input", FailureKind.CORRUPT_INPUT),
            ("out.mp4: Permission denied", FailureKind.PERMISSION_DENIED),
            ("Non-monotonous DTS in output stream", FailureKind.ENCODER_TIMING),
            ("Conversion failed!", FailureKind.GENERIC),
        ],
    )
    def test_kinds(self, stderr, kind):
        diagnosis = classify_export_failure(stderr, 2)
        assert diagnosis.kind == kind
        assert diagnosis.message.startswith("Clip 2")

    def test_generic_failure_is_encoding_error(self):
        diagnosis = classify_export_failure("Conversion failed!", 3)
        assert diagnosis.message == "Clip 3 failed to export: Conversion failed!"
        assert isinstance(diagnosis.to_exception(), EncodingFailureError)

    def test_silent_failure(self):
        assert classify_export_failure("", 1).message == "Clip 1 failed to export."
