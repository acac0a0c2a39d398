"""Run parsed script commands through ``sh -c``."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from emurunner.shared.exceptions import ScriptExecutionError

logger = logging.getLogger(__name__)


class ShellScriptExecutor:
    """Execute commands one at a time, stopping at the first failure.

    Output is inherited from this process so it lands in the CI log as the
    command produces it.
    """

    def __init__(self, *, shell: str = "sh") -> None:
        self._shell = shell

    async def run(self, commands: Sequence[str], *, cwd: str | None = None) -> list[str]:
        """Run ``commands`` in order.

        Args:
            commands: Shell command strings.
            cwd: Working directory for every command, if set.

        Returns:
            The commands that completed successfully.

        Raises:
            ScriptExecutionError: When a command exits non-zero or cannot start.
        """
        executed: list[str] = []
        for command in commands:
            logger.info("running: %s", command)
            try:
                proc = await asyncio.create_subprocess_exec(self._shell, "-c", command, cwd=cwd)
            except (FileNotFoundError, NotADirectoryError) as exc:
                raise ScriptExecutionError(command, 127, completed=tuple(executed)) from exc
            returncode = await proc.wait()
            if returncode != 0:
                logger.error("command exited with %d: %s", returncode, command)
                raise ScriptExecutionError(command, returncode, completed=tuple(executed))
            executed.append(command)
        return executed
