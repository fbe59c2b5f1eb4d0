"""Background reader for a capture process's diagnostic stream."""

import asyncio
import logging
from collections import deque
from typing import Deque, List, Optional

logger = logging.getLogger(__name__)

WARNING_KEYWORDS = ("drop", "underrun", "overrun", "discontinuity")
READ_CHUNK_SIZE = 4096
DEFAULT_TAIL_LINES = 200


class StderrMonitor:
    """Owns a child's stderr stream, logs it and keeps a bounded tail.

    The monitor only reads and logs. It never touches the recording session
    state, so a slow or chatty encoder cannot stall a start or stop.
    """

    def __init__(
        self,
        stream: Optional[asyncio.StreamReader],
        label: str = "ffmpeg",
        max_lines: int = DEFAULT_TAIL_LINES,
    ):
        self.stream = stream
        self.label = label
        self._tail: Deque[str] = deque(maxlen=max_lines)
        self._task: Optional[asyncio.Task] = None

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self._read(), name=f"{self.label}-stderr")
        return self._task

    async def wait(self) -> None:
        """Wait until the stream hits EOF."""
        if self._task is not None:
            await self._task

    @property
    def lines(self) -> List[str]:
        return list(self._tail)

    @property
    def text(self) -> str:
        return "\n".join(self._tail)

    async def _read(self) -> None:
        if self.stream is None:
            return
        pending = ""
        while True:
            chunk = await self.stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            # ffmpeg redraws its progress line with \r
            pending += chunk.decode("utf-8", errors="replace").replace("\r", "\n")
            *complete, pending = pending.split("\n")
            for line in complete:
                self._handle_line(line)
        if pending:
            self._handle_line(pending)

    def _handle_line(self, line: str) -> None:
        line = line.strip()
        if not line:
            return
        self._tail.append(line)
        lowered = line.lower()
        if any(keyword in lowered for keyword in WARNING_KEYWORDS):
            logger.warning(f"[{self.label}] {line}")
        else:
            logger.debug(f"[{self.label}] {line}")
