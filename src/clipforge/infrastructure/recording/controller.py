"""Recording session controller.

Owns the single recording slot of the application. Start and stop hold the
session lock for their whole duration; a start that finds the slot occupied
or mid-transition is rejected immediately instead of waiting.
"""

import asyncio
import logging
import signal
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ...domain.entities.audio import AudioRouting
from ...domain.enums import CaptureMode, RecordingState
from ...domain.exceptions import (
    ErrorContext,
    MediaError,
    NoActiveRecordingError,
    RecordingConflictError,
    RecordingStartError,
    RecordingStopError,
)
from ..config import RecordingConfig
from ..media.diagnostics import classify_recording_failure, is_normal_exit
from ..media.process_runner import ToolRunner
from ..observability.decorators import traced
from .capture_strategies import CaptureStrategy, strategy_for_platform
from .stderr_monitor import StderrMonitor

logger = logging.getLogger(__name__)


@dataclass
class RecordingSession:
    """The mutable recording slot: at most one live capture process."""

    process: Optional[asyncio.subprocess.Process] = None
    monitor: Optional[StderrMonitor] = None
    output_path: Optional[Path] = None
    mode: Optional[CaptureMode] = None
    started_at: Optional[float] = None

    @property
    def has_process(self) -> bool:
        return self.process is not None

    @property
    def is_active(self) -> bool:
        return self.process is not None and self.process.returncode is None

    @property
    def state(self) -> RecordingState:
        return RecordingState.RECORDING if self.is_active else RecordingState.IDLE

    def elapsed_seconds(self) -> Optional[float]:
        if self.started_at is None:
            return None
        return round(time.monotonic() - self.started_at, 3)

    def clear(self) -> None:
        self.process = None
        self.monitor = None
        self.output_path = None
        self.mode = None
        self.started_at = None


@dataclass(frozen=True)
class RecordingStatus:
    """Snapshot of the recording slot."""

    state: RecordingState
    output_path: Optional[Path] = None
    mode: Optional[CaptureMode] = None
    elapsed_seconds: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "output_path": str(self.output_path) if self.output_path else None,
            "mode": self.mode.value if self.mode else None,
            "elapsed_seconds": self.elapsed_seconds,
        }


class RecordingController:
    """Drives the capture process through its start/stop lifecycle.

    One controller is created per application and shared by every request.
    """

    def __init__(
        self,
        runner: Optional[ToolRunner] = None,
        strategy: Optional[CaptureStrategy] = None,
        config: Optional[RecordingConfig] = None,
    ):
        self.config = config or RecordingConfig()
        self.runner = runner or ToolRunner("ffmpeg")
        self.strategy = strategy or strategy_for_platform(config=self.config)
        self.session = RecordingSession()
        self._lock = asyncio.Lock()

    @property
    def is_recording(self) -> bool:
        return self.session.is_active

    @traced("start recording")
    async def start(
        self,
        mode: CaptureMode,
        output_path: Union[str, Path],
        routing: Optional[AudioRouting] = None,
    ) -> str:
        """Launch a capture process.

        Args:
            mode: Capture mode
            output_path: Destination file
            routing: Audio routing (microphone only when omitted)

        Returns:
            Confirmation message

        Raises:
            RecordingConflictError: If a recording is active or a transition is running
            ToolUnavailableError: If ffmpeg cannot be executed
            RecordingStartError: If the capture process died during startup
            PermissionDeniedError: If the OS refused capture access
            InvalidDeviceError: If the capture layer rejected a device
        """
        if self._lock.locked():
            raise RecordingConflictError()

        async with self._lock:
            self._reap_exited()
            if self.session.has_process:
                raise RecordingConflictError()

            output = Path(output_path)
            args = self.strategy.build_args(mode, routing, output)
            logger.info(f"Starting {mode} recording to {output}")

            process = await self.runner.spawn(
                args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
                **self.strategy.spawn_kwargs(),
            )
            monitor = StderrMonitor(process.stderr, label="ffmpeg-capture")
            monitor.start()

            try:
                await asyncio.wait_for(
                    process.wait(), timeout=self.config.startup_grace_seconds
                )
            except asyncio.TimeoutError:
                self.session.process = process
                self.session.monitor = monitor
                self.session.output_path = output
                self.session.mode = mode
                self.session.started_at = time.monotonic()
                logger.info(f"Capture process {process.pid} started successfully")
                return "Recording started"
            except BaseException:
                # Cancelled mid-grace: nothing else owns the child
                await self._discard(process, monitor)
                raise

            await monitor.wait()
            diagnosis = classify_recording_failure(
                monitor.text, process.returncode, during_startup=True
            )
            logger.error(f"Capture process exited during startup: {monitor.text}")
            raise diagnosis.to_exception(
                RecordingStartError,
                context=ErrorContext(
                    operation="start_recording",
                    path=str(output),
                    exit_code=process.returncode,
                ),
            )

    @traced("stop recording")
    async def stop(self) -> str:
        """Gracefully stop the active capture process.

        Waits for the process to finalize its container; there is no timeout.

        Returns:
            Confirmation message

        Raises:
            NoActiveRecordingError: If nothing is recording
            RecordingStopError: If the process ended abnormally
            PermissionDeniedError: If the OS refused capture access
            InvalidDeviceError: If the capture layer rejected a device
        """
        async with self._lock:
            process = self.session.process
            monitor = self.session.monitor
            output = self.session.output_path
            if process is None:
                raise NoActiveRecordingError()

            logger.info(f"Stopping recording process {process.pid}")
            try:
                if process.returncode is None:
                    try:
                        self.strategy.interrupt(process)
                    except ProcessLookupError:
                        logger.info(f"Capture process {process.pid} already exited")
                returncode = await process.wait()
                if monitor is not None:
                    await monitor.wait()
            finally:
                self.session.clear()

            logger.info(f"Recording stopped with status: {returncode}")
            if not is_normal_exit(returncode, int(signal.SIGINT)):
                stderr_text = monitor.text if monitor else ""
                logger.error(f"FFmpeg stderr: {stderr_text}")
                diagnosis = classify_recording_failure(stderr_text, returncode)
                raise diagnosis.to_exception(
                    RecordingStopError,
                    context=ErrorContext(
                        operation="stop_recording",
                        path=str(output) if output else None,
                        exit_code=returncode,
                    ),
                )

            # Let buffered writes land before declaring the file complete
            await asyncio.sleep(self.config.flush_seconds)
            logger.info("Recording completed successfully")
            return "Recording stopped"

    def status(self) -> RecordingStatus:
        """Report the slot state, reaping a process that exited on its own."""
        self._reap_exited()
        if not self.session.is_active:
            return RecordingStatus(state=RecordingState.IDLE)
        return RecordingStatus(
            state=RecordingState.RECORDING,
            output_path=self.session.output_path,
            mode=self.session.mode,
            elapsed_seconds=self.session.elapsed_seconds(),
        )

    async def shutdown(self) -> None:
        """Stop any active recording when the application exits."""
        if self.session.is_active:
            try:
                await self.stop()
            except MediaError as e:
                logger.warning(f"Recording ended abnormally during shutdown: {e}")

    async def _discard(
        self, process: asyncio.subprocess.Process, monitor: StderrMonitor
    ) -> None:
        if process.returncode is None:
            logger.warning(f"Abandoning capture process {process.pid} during startup")
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()
        await monitor.wait()

    def _reap_exited(self) -> None:
        process = self.session.process
        if process is None or process.returncode is None:
            return
        logger.warning(
            f"Capture process {process.pid} exited on its own with status "
            f"{process.returncode}"
        )
        self.session.clear()
