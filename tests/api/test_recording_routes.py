"""Tests for recording endpoints."""

from unittest.mock import AsyncMock, Mock

import pytest

from clipforge.api.dependencies import get_device_lister, get_recording_controller
from clipforge.domain.entities.audio import AudioRouting
from clipforge.domain.enums import AudioQuality, CaptureMode, Platform
from clipforge.domain.exceptions import PermissionDeniedError, RecordingConflictError
from clipforge.infrastructure.media.process_runner import ProcessResult
from clipforge.infrastructure.recording.audio_devices import AudioDeviceLister
from tests.factories import FakeToolRunner

AVFOUNDATION_OUTPUT = b"""\
[AVFoundation indev @ 0x1] AVFoundation audio devices:
[AVFoundation indev @ 0x1] [0] MacBook Pro Microphone
[AVFoundation indev @ 0x1] [1] BlackHole 2ch
"""


@pytest.fixture
def fake_controller(app):
    controller = Mock()
    controller.start = AsyncMock(return_value="Recording started")
    controller.stop = AsyncMock(return_value="Recording stopped")
    app.dependency_overrides[get_recording_controller] = lambda: controller
    yield controller
    app.dependency_overrides.pop(get_recording_controller, None)


class TestRecordingLifecycle:
    """Test start/stop/status over HTTP."""

    @pytest.mark.asyncio
    async def test_start_passes_audio_routing(self, client, fake_controller):
        response = await client.post(
            "/api/v1/recording/start",
            json={
                "mode": "combo",
                "output_path": "/tmp/rec.mp4",
                "audio_settings": {
                    "microphone_device": "0",
                    "system_audio_enabled": True,
                    "system_audio_device": "1",
                    "audio_quality": "high",
                },
            },
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Recording started"}
        fake_controller.start.assert_awaited_once_with(
            CaptureMode.COMBO,
            "/tmp/rec.mp4",
            AudioRouting(
                microphone_device="0",
                system_audio_enabled=True,
                system_audio_device="1",
                quality=AudioQuality.HIGH,
            ),
        )

    @pytest.mark.asyncio
    async def test_start_conflict(self, client, fake_controller):
        fake_controller.start.side_effect = RecordingConflictError()

        response = await client.post(
            "/api/v1/recording/start", json={"mode": "screen", "output_path": "/tmp/rec.mp4"}
        )

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "RECORDING_CONFLICT"
        assert error["message"] == "Recording already in progress"

    @pytest.mark.asyncio
    async def test_permission_denied(self, client, fake_controller):
        fake_controller.start.side_effect = PermissionDeniedError("Recording failed: denied")

        response = await client.post(
            "/api/v1/recording/start", json={"mode": "screen", "output_path": "/tmp/rec.mp4"}
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "PERMISSION_DENIED"

    @pytest.mark.asyncio
    async def test_invalid_mode(self, client, fake_controller):
        response = await client.post(
            "/api/v1/recording/start", json={"mode": "hologram", "output_path": "/tmp/rec.mp4"}
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        fake_controller.start.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stop_while_idle(self, client):
        response = await client.post("/api/v1/recording/stop")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "NO_ACTIVE_RECORDING"

    @pytest.mark.asyncio
    async def test_status_when_idle(self, client):
        response = await client.get("/api/v1/recording/status")

        assert response.status_code == 200
        assert response.json() == {
            "state": "idle",
            "output_path": None,
            "mode": None,
            "elapsed_seconds": None,
        }


class TestDevices:
    """Test device listing."""

    @pytest.mark.asyncio
    async def test_list_devices(self, app, client):
        runner = FakeToolRunner(
            lambda args: ProcessResult(returncode=1, stderr=AVFOUNDATION_OUTPUT)
        )
        app.dependency_overrides[get_device_lister] = lambda: AudioDeviceLister(
            ffmpeg_runner=runner, platform=Platform.MACOS
        )

        response = await client.get("/api/v1/recording/devices")

        assert response.status_code == 200
        assert response.json() == [
            {"id": "0", "name": "MacBook Pro Microphone", "type": "input"},
            {"id": "1", "name": "BlackHole 2ch", "type": "virtual"},
        ]
