"""Tests for API exception handling."""

import json
from unittest.mock import Mock

import pytest

from clipforge.api.exceptions import (
    create_error_response,
    media_exception_handler,
    status_for_media_error,
)
from clipforge.domain.exceptions import (
    EncodingFailureError,
    ErrorContext,
    ExportError,
    InputMissingError,
    InvalidDeviceError,
    MalformedOutputError,
    MediaError,
    NoActiveRecordingError,
    PermissionDeniedError,
    RecordingConflictError,
    RecordingStopError,
    ToolUnavailableError,
)


class TestCreateErrorResponse:
    """Test error response creation."""

    def test_create_error_response_minimal(self):
        """Test creating minimal error response."""
        response = create_error_response(status_code=400, message="Bad request")

        assert response == {
            "error": {"code": "ERROR", "message": "Bad request", "status_code": 400},
            "success": False,
        }

    def test_create_error_response_full(self):
        """Test creating error response with all fields."""
        response = create_error_response(
            status_code=404,
            message="File does not exist: /tmp/a.mp4",
            error_code="INPUT_MISSING",
            details={"path": "/tmp/a.mp4"},
            request_id="req-123",
        )

        assert response["error"]["details"] == {"path": "/tmp/a.mp4"}
        assert response["request_id"] == "req-123"


class TestStatusMapping:
    """Test domain exception to HTTP status mapping."""

    @pytest.mark.parametrize(
        "exc,status_code,code",
        [
            (RecordingConflictError(), 409, "RECORDING_CONFLICT"),
            (NoActiveRecordingError(), 409, "NO_ACTIVE_RECORDING"),
            (InputMissingError("/a.mp4"), 404, "INPUT_MISSING"),
            (ToolUnavailableError("ffmpeg"), 503, "TOOL_UNAVAILABLE"),
            (PermissionDeniedError("denied"), 403, "PERMISSION_DENIED"),
            (InvalidDeviceError("bad device"), 422, "INVALID_DEVICE"),
            (MalformedOutputError("garbage"), 422, "PROBE_FAILED"),
            (EncodingFailureError("Clip 2 failed"), 422, "ENCODING_FAILED"),
            (ExportError("No clips to export"), 422, "INVALID_EXPORT"),
            (RecordingStopError("Recording failed"), 500, "RECORDING_FAILED"),
            (MediaError("Failed to open video"), 500, "MEDIA_ERROR"),
        ],
    )
    def test_mapping(self, exc, status_code, code):
        assert status_for_media_error(exc) == (status_code, code)


class TestMediaExceptionHandler:
    """Test the media exception handler."""

    @pytest.mark.asyncio
    async def test_handler_includes_context(self):
        """Test the handler renders context as details."""
        request = Mock()
        request.state.request_id = "req-1"
        request.url = "http://test/api/v1/exports"
        request.method = "POST"
        exc = EncodingFailureError(
            "Clip 2 failed to export.",
            context=ErrorContext(operation="export", clip_index=2, exit_code=1),
        )

        response = await media_exception_handler(request, exc)

        assert response.status_code == 422
        body = json.loads(response.body)
        assert body["error"]["message"] == "Clip 2 failed to export."
        assert body["error"]["details"] == {"operation": "export", "clip_index": 2, "exit_code": 1}
        assert body["request_id"] == "req-1"
