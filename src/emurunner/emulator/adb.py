"""ADB access to the emulator under test."""

from __future__ import annotations

import logging

from emurunner.shared.exceptions import AdbError
from emurunner.shared.process import CommandResult, run_command

logger = logging.getLogger(__name__)


class AdbClient:
    """Serial-targeted wrapper around the ``adb`` CLI.

    Uses ``adb`` through async subprocess calls.
    """

    def __init__(self, *, serial: str = "emulator-5554", adb_bin: str = "adb", timeout: int = 30) -> None:
        self.serial = serial
        self._adb_bin = adb_bin
        self._timeout = timeout

    async def getprop(self, name: str) -> str:
        """Read a system property.

        Raises:
            AdbError: If the device is not reachable.
        """
        result = await self._run("shell", "getprop", name)
        if not result.ok:
            raise AdbError(f"ADB getprop {name} failed (rc={result.returncode}): {result.stderr}")
        return result.stdout

    async def shell(self, cmd: str) -> str:
        """Execute shell command on the device.

        Args:
            cmd: Shell command to execute.

        Returns:
            Command output (stdout).

        Raises:
            AdbError: If command fails.
        """
        result = await self._run("shell", cmd)
        if not result.ok:
            raise AdbError(f"ADB shell failed (rc={result.returncode}): {result.stderr}")
        return result.stdout

    async def emu_kill(self) -> None:
        """Ask the emulator console to shut the device down.

        Raises:
            AdbError: If the console command fails.
        """
        result = await self._run("emu", "kill")
        if not result.ok:
            raise AdbError(f"ADB emu kill failed (rc={result.returncode}): {result.stderr or result.stdout}")
        logger.info("sent kill to %s", self.serial)

    async def _run(self, *args: str) -> CommandResult:
        return await run_command(self._adb_bin, "-s", self.serial, *args, timeout=self._timeout, error=AdbError)
