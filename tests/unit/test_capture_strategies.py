"""Tests for platform capture argument synthesis."""

import pytest

from clipforge.domain.entities.audio import AudioRouting
from clipforge.domain.enums import AudioQuality, CaptureMode, Platform
from clipforge.domain.exceptions import InvalidDeviceError, RecordingStartError
from clipforge.infrastructure.config import RecordingConfig
from clipforge.infrastructure.recording.capture_strategies import (
    LinuxCaptureStrategy,
    MacOSCaptureStrategy,
    WindowsCaptureStrategy,
    strategy_for_platform,
)

SCALE = "scale=1920:1080:force_original_aspect_ratio=decrease:force_divisible_by=2"


def value_after(args, flag):
    return args[args.index(flag) + 1]


def all_values(args, flag):
    return [args[i + 1] for i, arg in enumerate(args) if arg == flag]


class TestOutputContract:
    """Test the encoding options every recording shares."""

    def test_video_and_container_options(self):
        args = MacOSCaptureStrategy().build_args(CaptureMode.SCREEN, None, "/tmp/out.mp4")

        assert args[:3] == ["-hide_banner", "-nostdin", "-y"]
        assert value_after(args, "-c:v") == "libx264"
        assert value_after(args, "-pix_fmt") == "yuv420p"
        assert value_after(args, "-r") == "30"
        assert value_after(args, "-vsync") == "cfr"
        assert value_after(args, "-g") == "30"
        assert value_after(args, "-bf") == "0"
        assert value_after(args, "-movflags") == "+faststart"
        assert value_after(args, "-video_track_timescale") == "90000"
        assert args[-1] == "/tmp/out.mp4"

    @pytest.mark.parametrize(
        "quality,bitrate",
        [(AudioQuality.VOICE, "64k"), (AudioQuality.STANDARD, "128k"), (AudioQuality.HIGH, "256k")],
    )
    def test_audio_quality_bitrate(self, quality, bitrate):
        args = MacOSCaptureStrategy().build_args(
            CaptureMode.SCREEN, AudioRouting(quality=quality), "out.mp4"
        )
        assert value_after(args, "-b:a") == bitrate
        assert value_after(args, "-ar") == "48000"

    def test_no_audio_when_microphone_disabled(self):
        args = MacOSCaptureStrategy().build_args(
            CaptureMode.SCREEN, AudioRouting(microphone_enabled=False), "out.mp4"
        )
        assert "-c:a" not in args
        assert value_after(args, "-i") == "1:none"
        assert all_values(args, "-map") == ["0:v"]

    def test_invalid_mode(self):
        with pytest.raises(RecordingStartError, match="Invalid recording mode"):
            MacOSCaptureStrategy().build_args("hologram", None, "out.mp4")


class TestMacOS:
    """Test AVFoundation capture."""

    def test_screen_with_microphone(self):
        args = MacOSCaptureStrategy().build_args(CaptureMode.SCREEN, AudioRouting(), "out.mp4")

        assert all_values(args, "-i") == ["1:0"]
        assert value_after(args, "-capture_cursor") == "1"
        assert value_after(args, "-vf") == SCALE
        assert all_values(args, "-map") == ["0:v", "0:a"]
        assert "-filter_complex" not in args
        assert "-ac" not in args

    def test_configured_default_microphone(self):
        strategy = MacOSCaptureStrategy(RecordingConfig(default_microphone="2"))
        args = strategy.build_args(CaptureMode.SCREEN, AudioRouting(), "out.mp4")
        assert all_values(args, "-i") == ["1:2"]

    def test_dual_audio_is_merged(self):
        routing = AudioRouting(
            microphone_device="0", system_audio_enabled=True, system_audio_device="1"
        )
        args = MacOSCaptureStrategy().build_args(CaptureMode.SCREEN, routing, "out.mp4")

        assert all_values(args, "-i") == ["1:none", ":0", ":1"]
        assert value_after(args, "-filter_complex") == (
            f"[0:v]{SCALE}[vout];[1:a][2:a]amerge=inputs=2[aout]"
        )
        assert all_values(args, "-map") == ["[vout]", "[aout]"]
        assert value_after(args, "-ac") == "2"

    def test_system_audio_none_is_ignored(self):
        routing = AudioRouting(system_audio_enabled=True, system_audio_device="none")
        args = MacOSCaptureStrategy().build_args(CaptureMode.SCREEN, routing, "out.mp4")
        assert "amerge" not in " ".join(args)
        assert all_values(args, "-i") == ["1:0"]

    def test_combo_overlays_camera(self):
        args = MacOSCaptureStrategy().build_args(CaptureMode.COMBO, AudioRouting(), "out.mp4")

        assert all_values(args, "-i") == ["1:0", "0:none"]
        assert value_after(args, "-filter_complex") == (
            f"[0:v]{SCALE}[base];"
            "[1:v]scale=320:-2[pip];"
            "[base][pip]overlay=W-w-20:H-h-20[vout];"
            "[0:a]anull[aout]"
        )
        assert all_values(args, "-map") == ["[vout]", "[aout]"]

    def test_webcam(self):
        args = MacOSCaptureStrategy().build_args(
            CaptureMode.WEBCAM, AudioRouting(microphone_device="3"), "out.mp4"
        )
        assert all_values(args, "-i") == ["0:3"]
        assert "-capture_cursor" not in args


class TestLinux:
    """Test X11/V4L2/PulseAudio capture."""

    def test_screen_with_separate_audio_input(self):
        args = LinuxCaptureStrategy().build_args(CaptureMode.SCREEN, AudioRouting(), "out.mp4")

        assert all_values(args, "-f") == ["x11grab", "pulse"]
        assert all_values(args, "-i") == [":0.0", "default"]
        assert all_values(args, "-map") == ["0:v", "1:a"]

    def test_webcam_device_override(self):
        strategy = LinuxCaptureStrategy(RecordingConfig(camera_device="/dev/video2"))
        args = strategy.build_args(CaptureMode.WEBCAM, None, "out.mp4")
        assert value_after(args, "-f") == "v4l2"
        assert all_values(args, "-i")[0] == "/dev/video2"


class TestWindows:
    """Test GDI/DirectShow capture."""

    def test_webcam_requires_configured_camera(self):
        with pytest.raises(InvalidDeviceError):
            WindowsCaptureStrategy().build_args(CaptureMode.WEBCAM, None, "out.mp4")

    def test_webcam_carries_microphone(self):
        strategy = WindowsCaptureStrategy(RecordingConfig(camera_device="USB Camera"))
        routing = AudioRouting(microphone_device="Microphone (Realtek Audio)")
        args = strategy.build_args(CaptureMode.WEBCAM, routing, "out.mp4")
        assert all_values(args, "-i") == ["video=USB Camera:audio=Microphone (Realtek Audio)"]

    def test_screen_uses_separate_dshow_audio(self):
        routing = AudioRouting(microphone_device="Mic")
        args = WindowsCaptureStrategy().build_args(CaptureMode.SCREEN, routing, "out.mp4")
        assert all_values(args, "-i") == ["desktop", "audio=Mic"]
        assert all_values(args, "-map") == ["0:v", "1:a"]


class TestStrategySelection:
    """Test platform to strategy mapping."""

    @pytest.mark.parametrize(
        "platform,cls",
        [
            (Platform.MACOS, MacOSCaptureStrategy),
            (Platform.WINDOWS, WindowsCaptureStrategy),
            (Platform.LINUX, LinuxCaptureStrategy),
        ],
    )
    def test_selection(self, platform, cls):
        strategy = strategy_for_platform(platform, RecordingConfig(framerate=60))
        assert isinstance(strategy, cls)
        assert strategy.config.framerate == 60
