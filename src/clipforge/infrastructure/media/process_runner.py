"""Child process helpers for ffmpeg, ffprobe and friends.

All external tools are launched through :class:`ToolRunner`, which turns a
missing or non-executable binary into :class:`ToolUnavailableError` and hands
back exit status plus captured output for the caller to interpret.
"""

import asyncio
import logging
import shlex
from dataclasses import dataclass
from typing import Any, Sequence

from ...domain.exceptions import ToolUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """Exit status and captured output of a finished child process."""

    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")


class ToolRunner:
    """Runs one external tool as an asyncio subprocess."""

    def __init__(self, binary: str, tool_name: str = ""):
        """Initialize the runner.

        Args:
            binary: Executable name or path
            tool_name: Name used in error messages (defaults to the binary)
        """
        self.binary = binary
        self.tool_name = tool_name or binary

    def command(self, args: Sequence[str]) -> list[str]:
        """Full argv for the given tool arguments."""
        return [self.binary, *[str(arg) for arg in args]]

    async def run(self, args: Sequence[str]) -> ProcessResult:
        """Run the tool to completion and capture its output.

        Args:
            args: Arguments following the executable

        Returns:
            ProcessResult with exit status, stdout and stderr

        Raises:
            ToolUnavailableError: If the executable cannot be launched
        """
        cmd = self.command(args)
        logger.debug(f"Running {self.tool_name}: {shlex.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as e:
            logger.error(f"{self.tool_name} could not be executed: {e}")
            raise ToolUnavailableError(self.tool_name, str(e)) from e

        stdout, stderr = await process.communicate()
        return ProcessResult(returncode=process.returncode, stdout=stdout, stderr=stderr)

    async def spawn(self, args: Sequence[str], **kwargs: Any) -> asyncio.subprocess.Process:
        """Launch a long-running child without waiting for it.

        Args:
            args: Arguments following the executable
            **kwargs: Extra ``create_subprocess_exec`` options (pipes, flags)

        Returns:
            The running asyncio process handle

        Raises:
            ToolUnavailableError: If the executable cannot be launched
        """
        cmd = self.command(args)
        logger.info(f"Starting {self.tool_name} process: {shlex.join(cmd)}")

        try:
            return await asyncio.create_subprocess_exec(*cmd, **kwargs)
        except (FileNotFoundError, PermissionError) as e:
            logger.error(f"Failed to start {self.tool_name}: {e}")
            raise ToolUnavailableError(self.tool_name, str(e)) from e
