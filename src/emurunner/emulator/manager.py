"""Emulator lifecycle: AVD setup, background launch, boot polling and kill."""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
from typing import IO, Any

from emurunner.emulator.adb import AdbClient
from emurunner.emulator.avd import AvdBuilder
from emurunner.shared.enums import EmulatorState
from emurunner.shared.exceptions import AdbError, LaunchError, LaunchTimeout
from emurunner.shared.models import RunConfig

logger = logging.getLogger(__name__)

_ANIMATION_SETTINGS = (
    "window_animation_scale",
    "transition_animation_scale",
    "animator_duration_scale",
)


class EmulatorManager:
    """Owns the one emulator process of a run.

    Implements the ``EmulatorController`` protocol. States move
    ``NOT_STARTED → STARTING → RUNNING → STOPPED``; ``kill()`` is valid from
    any state and idempotent.
    """

    def __init__(
        self,
        sdk_root: str,
        avd: AvdBuilder,
        adb: AdbClient,
        *,
        poll_attempts: int = 120,
        poll_interval: float = 2.0,
        poll_backoff: float = 1.5,
        poll_max_interval: float = 10.0,
        kill_timeout: float = 30,
        log_file: str = "",
    ) -> None:
        self._sdk_root = sdk_root
        self._avd = avd
        self._adb = adb
        self._poll_attempts = poll_attempts
        self._poll_interval = poll_interval
        self._poll_backoff = poll_backoff
        self._poll_max_interval = poll_max_interval
        self._kill_timeout = kill_timeout
        self._log_file = log_file
        self._log_handle: IO[Any] | None = None
        self._process: asyncio.subprocess.Process | None = None
        self.state = EmulatorState.NOT_STARTED

    @property
    def emulator_bin(self) -> str:
        return os.path.join(self._sdk_root, "emulator", "emulator")

    def launch_command(self, config: RunConfig) -> list[str]:
        return [self.emulator_bin, "-avd", config.avd_name, *shlex.split(config.emulator_options)]

    async def launch(self, config: RunConfig) -> None:
        """Create the AVD, start the emulator and block until it has booted.

        Args:
            config: Validated run configuration.

        Raises:
            LaunchError: If the AVD cannot be created, the process fails to
                start or exits early, or the booted device does not respond.
            LaunchTimeout: If boot does not complete within the polling budget.
        """
        if self.state in (EmulatorState.STARTING, EmulatorState.RUNNING):
            raise LaunchError(f"emulator already {self.state.value}")

        self.state = EmulatorState.STARTING
        await self._avd.create(config)

        logger.info("starting emulator %s", config.avd_name)
        self._process = await self._spawn(self.launch_command(config))

        await self.wait_for_boot()

        try:
            # Also dismisses the lock screen.
            await self._adb.shell("input keyevent 82")
            if config.disable_animations:
                logger.info("disabling animations")
                for setting in _ANIMATION_SETTINGS:
                    await self._adb.shell(f"settings put global {setting} 0.0")
        except AdbError as exc:
            raise LaunchError(f"emulator booted but is not responding: {exc}") from exc

        self.state = EmulatorState.RUNNING
        logger.info("emulator %s is ready", self._adb.serial)

    async def wait_for_boot(self) -> None:
        """Poll ``sys.boot_completed`` with bounded attempts and backoff.

        Raises:
            LaunchError: If the emulator process exits while booting.
            LaunchTimeout: If attempts run out.
        """
        interval = self._poll_interval
        for attempt in range(1, self._poll_attempts + 1):
            if self._process is not None and self._process.returncode is not None:
                raise LaunchError(f"emulator process exited during boot (rc={self._process.returncode})")
            try:
                if await self._adb.getprop("sys.boot_completed") == "1":
                    logger.info("emulator booted after %d attempt(s)", attempt)
                    return
            except AdbError as exc:
                logger.debug("boot poll %d/%d: %s", attempt, self._poll_attempts, exc)
            await asyncio.sleep(interval)
            interval = min(interval * self._poll_backoff, self._poll_max_interval)

        if self._process is not None and self._process.returncode is not None:
            raise LaunchError(f"emulator process exited during boot (rc={self._process.returncode})")
        raise LaunchTimeout(f"timeout waiting for emulator to boot after {self._poll_attempts} attempts")

    async def kill(self) -> None:
        """Shut the emulator down if one was started. Always ends ``STOPPED``."""
        if self._process is None:
            self.state = EmulatorState.STOPPED
            logger.info("no emulator running, nothing to kill")
            return

        logger.info("killing emulator %s", self._adb.serial)
        try:
            await self._adb.emu_kill()
        except AdbError as exc:
            logger.warning("failed to send kill to emulator: %s", exc)

        process, self._process = self._process, None
        try:
            await self._reap(process)
        finally:
            self._close_log()
            self.state = EmulatorState.STOPPED

    async def _spawn(self, cmd: list[str]) -> asyncio.subprocess.Process:
        output: IO[Any] | int = asyncio.subprocess.DEVNULL
        if self._log_file:
            self._log_handle = open(self._log_file, "ab")
            output = self._log_handle
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=output,
                stderr=output,
            )
        except FileNotFoundError as exc:
            self._close_log()
            raise LaunchError(f"emulator binary not found: {cmd[0]}") from exc
        logger.info("emulator pid %d: %s", proc.pid, " ".join(cmd))
        return proc

    async def _reap(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            await asyncio.wait_for(process.wait(), timeout=self._kill_timeout)
            return
        except asyncio.TimeoutError:
            logger.warning("emulator did not exit within %ss, terminating pid %d", self._kill_timeout, process.pid)

        try:
            process.terminate()
            await asyncio.wait_for(process.wait(), timeout=self._kill_timeout)
        except ProcessLookupError:
            return
        except asyncio.TimeoutError:
            logger.error("emulator ignored SIGTERM, killing pid %d", process.pid)
            process.kill()
            await process.wait()

    def _close_log(self) -> None:
        if self._log_handle is not None:
            self._log_handle.close()
            self._log_handle = None
