"""Virtual device definition management via avdmanager."""

from __future__ import annotations

import logging
import os

import aiofiles  # type: ignore[import-untyped]

from emurunner.shared.exceptions import LaunchError
from emurunner.shared.models import RunConfig
from emurunner.shared.process import run_command

logger = logging.getLogger(__name__)


class AvdBuilder:
    """Create or refresh the AVD the emulator boots from."""

    def __init__(self, sdk_root: str, avd_home: str, *, timeout: int = 120) -> None:
        self._sdk_root = sdk_root
        self._avd_home = avd_home
        self._timeout = timeout

    @property
    def avdmanager(self) -> str:
        return os.path.join(self._sdk_root, "tools", "bin", "avdmanager")

    def config_ini(self, avd_name: str) -> str:
        return os.path.join(self._avd_home, f"{avd_name}.avd", "config.ini")

    def create_command(self, config: RunConfig) -> list[str]:
        image = config.system_image
        cmd = [
            self.avdmanager,
            "create",
            "avd",
            "--force",
            "-n",
            config.avd_name,
            "--abi",
            image.abi,
            "--package",
            image.package,
        ]
        if config.profile.strip():
            cmd += ["--device", config.profile.strip()]
        if config.sdcard_path_or_size:
            cmd += ["-c", config.sdcard_path_or_size]
        return cmd

    async def create(self, config: RunConfig) -> None:
        """(Re)create the AVD and apply the core count.

        Raises:
            LaunchError: If avdmanager fails.
        """
        if config.profile.strip():
            logger.info("creating AVD %s with custom profile %s", config.avd_name, config.profile)
        else:
            logger.info("creating AVD %s without custom profile", config.avd_name)

        # avdmanager asks whether to create a custom hardware profile.
        result = await run_command(
            *self.create_command(config),
            timeout=self._timeout,
            error=LaunchError,
            stdin_data=b"no\n",
        )
        if not result.ok:
            raise LaunchError(f"avdmanager create avd failed (rc={result.returncode}): {result.stderr[-500:]}")

        await self.set_property(config.avd_name, "hw.cpu.ncore", str(config.cores))

    async def set_property(self, avd_name: str, key: str, value: str) -> None:
        """Write ``key=value`` into the AVD config.ini, replacing any prior value."""
        path = self.config_ini(avd_name)
        lines: list[str] = []
        if os.path.isfile(path):
            async with aiofiles.open(path) as f:
                lines = [line for line in (await f.read()).splitlines() if not line.startswith(f"{key}=")]
        lines.append(f"{key}={value}")
        os.makedirs(os.path.dirname(path), exist_ok=True)
        async with aiofiles.open(path, "w") as f:
            await f.write("\n".join(lines) + "\n")
        logger.debug("set %s=%s in %s", key, value, path)
