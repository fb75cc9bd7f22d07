"""Subprocess runner with a wall-clock timeout and partial output capture."""
from __future__ import annotations

import asyncio
import os
import signal
import time
from dataclasses import dataclass

from agentbridge.core.logging import get_logger
from agentbridge.core.types import EXIT_NOT_FOUND, EXIT_TIMEOUT

logger = get_logger("execution.process")

_POSIX = os.name == "posix"
_READ_CHUNK = 64 * 1024
# Exit code when the executable exists but cannot be run.
_EXIT_NOT_EXECUTABLE = 126


@dataclass(frozen=True, slots=True)
class ProcessResult:
    stdout: str
    stderr: str
    exit_code: int
    duration_ms: int
    timed_out: bool = False


async def _drain(stream: asyncio.StreamReader | None, sink: bytearray) -> None:
    if stream is None:
        return
    while chunk := await stream.read(_READ_CHUNK):
        sink.extend(chunk)


def _signal(proc: asyncio.subprocess.Process, *, force: bool) -> None:
    """Signal the whole process group so engine child processes go too."""
    try:
        if _POSIX:
            os.killpg(proc.pid, signal.SIGKILL if force else signal.SIGTERM)
        elif force:
            proc.kill()
        else:
            proc.terminate()
    except ProcessLookupError:
        pass


async def _terminate(proc: asyncio.subprocess.Process, grace: float) -> None:
    _signal(proc, force=False)
    try:
        await asyncio.wait_for(proc.wait(), timeout=grace)
    except TimeoutError:
        logger.warning("Process %s ignored SIGTERM; killing", proc.pid)
        _signal(proc, force=True)
        await proc.wait()


def _normalize_exit_code(returncode: int | None) -> int:
    """Map ``-N`` (killed by signal N) to the shell convention ``128 + N``."""
    if returncode is None:
        return -1
    if returncode < 0:
        return 128 - returncode
    return returncode


async def run_process(
    argv: list[str],
    *,
    cwd: str | None = None,
    timeout: float,
    kill_grace: float = 5.0,
) -> ProcessResult:
    """Run *argv* and capture its output.

    When *timeout* seconds elapse the process group receives SIGTERM,
    then SIGKILL after *kill_grace* seconds.  Output captured up to that
    point is kept and the exit code is reported as 124.  An executable
    that cannot be started yields exit code 127 (not found) or 126.
    """
    t0 = time.monotonic()

    def _elapsed_ms() -> int:
        return int((time.monotonic() - t0) * 1000)

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            start_new_session=_POSIX,
        )
    except FileNotFoundError:
        logger.error("%s not found or not on PATH", argv[0])
        return ProcessResult(
            stdout="",
            stderr=f"{argv[0]}: command not found",
            exit_code=EXIT_NOT_FOUND,
            duration_ms=_elapsed_ms(),
        )
    except PermissionError as exc:
        logger.error("Permission denied starting %s: %s", argv[0], exc)
        return ProcessResult(
            stdout="",
            stderr=f"Permission denied: {exc}",
            exit_code=_EXIT_NOT_EXECUTABLE,
            duration_ms=_elapsed_ms(),
        )

    stdout_buf = bytearray()
    stderr_buf = bytearray()
    readers = [
        asyncio.create_task(_drain(proc.stdout, stdout_buf)),
        asyncio.create_task(_drain(proc.stderr, stderr_buf)),
    ]

    timed_out = False
    try:
        await asyncio.wait_for(proc.wait(), timeout=timeout)
    except TimeoutError:
        timed_out = True
        logger.warning(
            "Process %s exceeded %.1fs timeout; terminating", proc.pid, timeout
        )
        await _terminate(proc, kill_grace)
    except asyncio.CancelledError:
        _signal(proc, force=True)
        for task in readers:
            task.cancel()
        raise

    # Orphaned grandchildren may keep the pipes open; stop reading after a
    # bounded wait instead of blocking on them.
    _, pending = await asyncio.wait(readers, timeout=max(kill_grace, 1.0))
    for task in pending:
        task.cancel()
    await asyncio.gather(*readers, return_exceptions=True)

    exit_code = EXIT_TIMEOUT if timed_out else _normalize_exit_code(proc.returncode)

    return ProcessResult(
        stdout=stdout_buf.decode("utf-8", errors="replace"),
        stderr=stderr_buf.decode("utf-8", errors="replace"),
        exit_code=exit_code,
        duration_ms=_elapsed_ms(),
        timed_out=timed_out,
    )
