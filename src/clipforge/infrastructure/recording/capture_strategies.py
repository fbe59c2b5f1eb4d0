"""Platform capture strategies.

A strategy turns ``(CaptureMode, AudioRouting)`` into the complete ffmpeg
argument list for one recording. Only the input side differs between
platforms; stream mapping, compositing and the output contract are shared.
"""

import asyncio
import logging
import signal
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from ...domain.entities.audio import DEFAULT_DEVICE, AudioRouting
from ...domain.enums import CaptureMode, Platform
from ...domain.exceptions import InvalidDeviceError, RecordingStartError
from ..config import RecordingConfig
from ..media.filter_graph import Filter, FilterGraph, StreamMapping, mapping_args
from ..platform_support import detect_platform

logger = logging.getLogger(__name__)

VIDEO_TIMESCALE = 90000


@dataclass
class CaptureInputs:
    """Inputs of one capture invocation plus where their streams live."""

    inputs: List[List[str]] = field(default_factory=list)
    video_specs: List[str] = field(default_factory=list)
    audio_specs: List[str] = field(default_factory=list)

    def add(self, input_args: List[str]) -> int:
        self.inputs.append(input_args)
        return len(self.inputs) - 1


class CaptureStrategy(ABC):
    """Builds capture invocations for one platform."""

    platform: Platform
    # Whether the screen/camera input can carry a microphone itself
    screen_muxes_audio = False
    camera_muxes_audio = False

    def __init__(self, config: Optional[RecordingConfig] = None):
        self.config = config or RecordingConfig()

    @abstractmethod
    def screen_input(self, audio_device: Optional[str] = None) -> List[str]:
        """Input arguments for the primary display."""

    @abstractmethod
    def camera_input(self, audio_device: Optional[str] = None) -> List[str]:
        """Input arguments for the camera."""

    @abstractmethod
    def audio_input(self, device: str) -> List[str]:
        """Input arguments for a standalone audio device."""

    def resolve_device(self, device: str) -> str:
        """Translate the routing's device identifier into the input's syntax."""
        if device == DEFAULT_DEVICE and self.config.default_microphone:
            return self.config.default_microphone
        return device

    def spawn_kwargs(self) -> Dict[str, Any]:
        """Extra process creation options needed to interrupt the child later."""
        return {}

    def interrupt(self, process: asyncio.subprocess.Process) -> None:
        """Ask the capture process to finalize its output and exit."""
        process.send_signal(signal.SIGINT)

    def build_args(
        self,
        mode: CaptureMode,
        routing: Optional[AudioRouting],
        output_path: Union[str, Path],
    ) -> List[str]:
        """Synthesize the full ffmpeg argument list for a recording.

        Args:
            mode: Which physical inputs to open
            routing: Audio sources to capture (defaults to the microphone only)
            output_path: Destination file

        Returns:
            Arguments following the ffmpeg executable
        """
        routing = routing or AudioRouting()
        devices = [self.resolve_device(device) for device in routing.active_devices()]

        if mode == CaptureMode.SCREEN:
            capture = self._collect_inputs([self.screen_input], self.screen_muxes_audio, devices)
        elif mode == CaptureMode.WEBCAM:
            capture = self._collect_inputs([self.camera_input], self.camera_muxes_audio, devices)
        elif mode == CaptureMode.COMBO:
            capture = self._collect_inputs(
                [self.screen_input, self.camera_input],
                self.screen_muxes_audio,
                devices,
            )
        else:
            raise RecordingStartError(f"Invalid recording mode: {mode}")

        args = ["-hide_banner", "-nostdin", "-y"]
        for input_args in capture.inputs:
            args.extend(input_args)

        args.extend(self._mapping_args(mode, capture))
        args.extend(self._video_output_args())
        if capture.audio_specs:
            args.extend(self._audio_output_args(routing, dual=len(capture.audio_specs) > 1))
        args.extend(
            ["-movflags", "+faststart", "-video_track_timescale", str(VIDEO_TIMESCALE)]
        )
        args.append(str(output_path))
        return args

    def _collect_inputs(
        self,
        video_inputs: List[Callable[[Optional[str]], List[str]]],
        primary_muxes_audio: bool,
        devices: List[str],
    ) -> CaptureInputs:
        capture = CaptureInputs()
        remaining = list(devices)

        # A single source rides on the primary input where the platform allows it
        primary_audio = None
        if primary_muxes_audio and len(remaining) == 1:
            primary_audio = remaining.pop(0)

        for position, build_input in enumerate(video_inputs):
            audio = primary_audio if position == 0 else None
            index = capture.add(build_input(audio))
            capture.video_specs.append(f"{index}:v")
            if audio is not None:
                capture.audio_specs.append(f"{index}:a")

        for device in remaining:
            index = capture.add(self.audio_input(device))
            capture.audio_specs.append(f"{index}:a")
        return capture

    def _scale_filter(self) -> Filter:
        return Filter(
            "scale",
            self.config.max_width,
            self.config.max_height,
            force_original_aspect_ratio="decrease",
            force_divisible_by=2,
        )

    def _mapping_args(self, mode: CaptureMode, capture: CaptureInputs) -> List[str]:
        needs_graph = mode == CaptureMode.COMBO or len(capture.audio_specs) > 1
        if not needs_graph:
            mappings = [StreamMapping(capture.video_specs[0], from_graph=False)]
            mappings.extend(StreamMapping(spec, from_graph=False) for spec in capture.audio_specs)
            return ["-vf", self._scale_filter().render(), *mapping_args(None, mappings)]

        graph = FilterGraph()
        if mode == CaptureMode.COMBO:
            margin = self.config.pip_margin
            graph.add([capture.video_specs[0]], [self._scale_filter()], "base")
            graph.add([capture.video_specs[1]], [Filter("scale", self.config.pip_width, -2)], "pip")
            video_out = graph.add(
                ["base", "pip"], [Filter("overlay", f"W-w-{margin}", f"H-h-{margin}")], "vout"
            )
        else:
            video_out = graph.add([capture.video_specs[0]], [self._scale_filter()], "vout")

        mappings = [StreamMapping(video_out)]
        if len(capture.audio_specs) > 1:
            audio_out = graph.add(
                capture.audio_specs,
                [Filter("amerge", inputs=len(capture.audio_specs))],
                "aout",
            )
            mappings.append(StreamMapping(audio_out))
        elif capture.audio_specs:
            audio_out = graph.add(capture.audio_specs, [Filter("anull")], "aout")
            mappings.append(StreamMapping(audio_out))

        return mapping_args(graph, mappings)

    def _video_output_args(self) -> List[str]:
        framerate = str(self.config.framerate)
        return [
            "-c:v", "libx264",
            "-preset", self.config.preset,
            "-tune", "fastdecode",
            "-profile:v", "main",
            "-level", "4.0",
            "-crf", str(self.config.crf),
            "-pix_fmt", "yuv420p",
            "-r", framerate,
            "-vsync", "cfr",
            "-g", framerate,
            "-bf", "0",
        ]  # fmt: skip

    def _audio_output_args(self, routing: AudioRouting, dual: bool) -> List[str]:
        args = [
            "-c:a", "aac",
            "-b:a", routing.quality.bitrate,
            "-ar", str(self.config.audio_sample_rate),
        ]  # fmt: skip
        if dual:
            # amerge stacks channels; fold back to stereo
            args.extend(["-ac", "2"])
        return args


class MacOSCaptureStrategy(CaptureStrategy):
    """AVFoundation capture. Inputs are addressed as ``video:audio`` indexes."""

    platform = Platform.MACOS
    screen_muxes_audio = True
    camera_muxes_audio = True

    def resolve_device(self, device: str) -> str:
        if device == DEFAULT_DEVICE:
            return self.config.default_microphone or "0"
        return device

    def screen_input(self, audio_device: Optional[str] = None) -> List[str]:
        screen = self.config.screen_device or "1"
        return [
            "-f", "avfoundation",
            "-capture_cursor", "1",
            "-framerate", str(self.config.framerate),
            "-i", f"{screen}:{audio_device or 'none'}",
        ]  # fmt: skip

    def camera_input(self, audio_device: Optional[str] = None) -> List[str]:
        camera = self.config.camera_device or "0"
        return [
            "-f", "avfoundation",
            "-framerate", str(self.config.framerate),
            "-i", f"{camera}:{audio_device or 'none'}",
        ]  # fmt: skip

    def audio_input(self, device: str) -> List[str]:
        return ["-f", "avfoundation", "-i", f":{device}"]


class WindowsCaptureStrategy(CaptureStrategy):
    """GDI screen grabbing and DirectShow devices, addressed by name."""

    platform = Platform.WINDOWS
    camera_muxes_audio = True

    def screen_input(self, audio_device: Optional[str] = None) -> List[str]:
        return [
            "-f", "gdigrab",
            "-draw_mouse", "1",
            "-framerate", str(self.config.framerate),
            "-i", self.config.screen_device or "desktop",
        ]  # fmt: skip

    def camera_input(self, audio_device: Optional[str] = None) -> List[str]:
        if not self.config.camera_device:
            raise InvalidDeviceError(
                "Recording failed: No camera device configured. "
                "Set CLIPFORGE_RECORDING__CAMERA_DEVICE to the DirectShow camera name."
            )
        source = f"video={self.config.camera_device}"
        if audio_device:
            source = f"{source}:audio={audio_device}"
        return [
            "-f", "dshow",
            "-framerate", str(self.config.framerate),
            "-i", source,
        ]  # fmt: skip

    def audio_input(self, device: str) -> List[str]:
        return ["-f", "dshow", "-i", f"audio={device}"]

    def spawn_kwargs(self) -> Dict[str, Any]:
        # CTRL_BREAK can only target a separate process group
        return {"creationflags": getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)}

    def interrupt(self, process: asyncio.subprocess.Process) -> None:
        process.send_signal(getattr(signal, "CTRL_BREAK_EVENT", signal.SIGINT))


class LinuxCaptureStrategy(CaptureStrategy):
    """X11 screen grabbing, V4L2 cameras and PulseAudio sources."""

    platform = Platform.LINUX

    def screen_input(self, audio_device: Optional[str] = None) -> List[str]:
        return [
            "-f", "x11grab",
            "-draw_mouse", "1",
            "-framerate", str(self.config.framerate),
            "-i", self.config.screen_device or ":0.0",
        ]  # fmt: skip

    def camera_input(self, audio_device: Optional[str] = None) -> List[str]:
        return [
            "-f", "v4l2",
            "-framerate", str(self.config.framerate),
            "-i", self.config.camera_device or "/dev/video0",
        ]  # fmt: skip

    def audio_input(self, device: str) -> List[str]:
        return ["-f", "pulse", "-i", device]


_STRATEGIES = {
    Platform.MACOS: MacOSCaptureStrategy,
    Platform.WINDOWS: WindowsCaptureStrategy,
    Platform.LINUX: LinuxCaptureStrategy,
}


def strategy_for_platform(
    platform: Optional[Platform] = None, config: Optional[RecordingConfig] = None
) -> CaptureStrategy:
    """Select the capture strategy for the host (or an explicit) platform."""
    platform = platform or detect_platform()
    logger.debug(f"Using {platform} capture strategy")
    return _STRATEGIES[platform](config)
