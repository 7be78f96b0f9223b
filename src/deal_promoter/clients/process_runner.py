"""
Async subprocess client for the external boost tools.

Handles:
- Spawning the tool without blocking the event loop
- Per-call timeout; the child is killed when it expires
- Killing the child when the awaiting request is cancelled
"""

import asyncio
import time
from dataclasses import dataclass

from ..errors import ProcessError, ProcessTimeoutError
from ..logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProcessOutput:
    """Captured result of one tool invocation."""

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        return self.returncode == 0


class ProcessRunner:
    """
    Runs one external binary with captured output.

    Usage:
        runner = ProcessRunner('boostx', timeout=600)
        output = await runner.run('commp', '/tmp/file.car')
    """

    def __init__(self, binary: str, timeout: float | None = None):
        """
        Args:
            binary: Executable name or path
            timeout: Seconds to wait for the process; None waits forever
        """
        self.binary = binary
        self.timeout = timeout

    async def run(self, *args: str) -> ProcessOutput:
        """
        Run the binary with `args` and wait for it to exit.

        Returns:
            ProcessOutput with decoded stdout/stderr, for any exit code

        Raises:
            ProcessError: If the binary cannot be started
            ProcessTimeoutError: If it runs longer than the timeout
        """
        cmd = (self.binary, *args)
        started = time.perf_counter()
        logger.debug('process.started', command=cmd[:2])

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProcessError(
                f'Failed to start {self.binary}: {e}',
                context={'binary': self.binary},
            ) from e

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                process.communicate(),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            await self._kill(process)
            logger.warning('process.timed_out', binary=self.binary, timeout=self.timeout)
            raise ProcessTimeoutError(
                f'{self.binary} timed out after {self.timeout} seconds',
                context={'binary': self.binary, 'timeout': self.timeout},
            )
        except asyncio.CancelledError:
            await self._kill(process)
            logger.info('process.cancelled', binary=self.binary)
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        logger.debug(
            'process.exited',
            binary=self.binary,
            returncode=process.returncode,
            duration_ms=round(duration_ms, 2),
        )
        return ProcessOutput(
            args=cmd,
            returncode=process.returncode,
            stdout=stdout_bytes.decode('utf-8', errors='replace') if stdout_bytes else '',
            stderr=stderr_bytes.decode('utf-8', errors='replace') if stderr_bytes else '',
            duration_ms=duration_ms,
        )

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()
