"""Async subprocess helper shared by every vendor-tool wrapper."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from emurunner.shared.exceptions import EmuRunnerError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured output of one finished command."""

    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_command(
    *cmd: str,
    timeout: float,
    error: type[EmuRunnerError] = EmuRunnerError,
    stdin_data: bytes | None = None,
    cwd: str | None = None,
) -> CommandResult:
    """Run ``cmd`` to completion and capture its output.

    Args:
        *cmd: Program and arguments, passed without a shell.
        timeout: Seconds before the process is killed.
        error: Exception type raised on timeout or missing binary.
        stdin_data: Bytes written to the process stdin, if any.
        cwd: Working directory for the process.

    Returns:
        Decoded stdout/stderr (stripped) and the exit code.

    Raises:
        error: If the binary is missing or the command times out.
    """
    logger.debug("running %s", " ".join(cmd))
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.PIPE if stdin_data is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
    except FileNotFoundError as exc:
        raise error(f"binary not found: {cmd[0]}") from exc

    try:
        stdout_b, stderr_b = await asyncio.wait_for(proc.communicate(stdin_data), timeout=timeout)
    except asyncio.TimeoutError as exc:
        proc.kill()
        raise error(f"command timed out after {timeout}s: {' '.join(cmd)}") from exc

    return CommandResult(
        stdout=stdout_b.decode(errors="replace").strip(),
        stderr=stderr_b.decode(errors="replace").strip(),
        returncode=proc.returncode or 0,
    )
