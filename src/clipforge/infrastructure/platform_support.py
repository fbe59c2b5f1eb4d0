"""Host platform detection and native helpers."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

from ..domain.enums import Platform
from ..domain.exceptions import ErrorContext, InputMissingError, MediaError
from .media.process_runner import ToolRunner

logger = logging.getLogger(__name__)

OPENER_GRACE_SECONDS = 1.0


def detect_platform(system: Optional[str] = None) -> Platform:
    """Map ``sys.platform`` (or an explicit value) to a supported platform."""
    system = system or sys.platform
    if system == "darwin":
        return Platform.MACOS
    if system.startswith("win"):
        return Platform.WINDOWS
    return Platform.LINUX


def native_open_command(path: Union[str, Path], platform: Platform) -> List[str]:
    """Command line that opens a file with the desktop's default application."""
    if platform == Platform.MACOS:
        return ["open", str(path)]
    if platform == Platform.WINDOWS:
        return ["cmd", "/C", "start", "", str(path)]
    return ["xdg-open", str(path)]


async def open_in_native_player(
    path: Union[str, Path],
    platform: Optional[Platform] = None,
    launch_grace_seconds: float = OPENER_GRACE_SECONDS,
) -> None:
    """Open a file with the system's default player.

    The opener is launched detached from our pipes. An opener that exits
    non-zero within the grace period is a failure; one still running after
    it is left to the desktop.

    Raises:
        InputMissingError: If the file does not exist
        ToolUnavailableError: If the opener cannot be executed
        MediaError: If the opener reports a failure
    """
    source = Path(path)
    if not source.exists():
        raise InputMissingError(str(source))

    command = native_open_command(source, platform or detect_platform())
    runner = ToolRunner(command[0])
    process = await runner.spawn(
        command[1:],
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.DEVNULL,
    )

    try:
        returncode = await asyncio.wait_for(process.wait(), timeout=launch_grace_seconds)
    except asyncio.TimeoutError:
        logger.info(f"Opener for {source} still running, leaving it to the desktop")
        return

    if returncode != 0:
        raise MediaError(
            f"Failed to open video: {command[0]} exited with status {returncode}",
            context=ErrorContext(
                operation="open_in_native_player",
                path=str(source),
                exit_code=returncode,
            ),
        )
    logger.info(f"Opened {source} in native player")
