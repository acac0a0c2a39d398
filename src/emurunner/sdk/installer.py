"""Android SDK provisioning through sdkmanager."""

from __future__ import annotations

import logging
import os
import sys

from emurunner.sdk.download import download_and_extract
from emurunner.shared.exceptions import InstallError
from emurunner.shared.models import SystemImage
from emurunner.shared.process import run_command

logger = logging.getLogger(__name__)

_REPOSITORY_URL = "https://dl.google.com/android/repository"
_SDK_TOOLS_REVISION = "4333796"
# Enough "y" answers for every license sdkmanager currently ships.
_LICENSE_ANSWERS = b"y\n" * 64


def host_os_name(platform: str | None = None) -> str:
    """Name used by the vendor repository for the current host."""
    return "darwin" if (platform or sys.platform) == "darwin" else "linux"


class SdkInstaller:
    """Ensure the SDK components needed for one system image are present.

    Implements the ``SdkInstaller`` protocol. Every check is against
    ``sdk_root``; a second call for an already-satisfied image spawns no
    sdkmanager process.
    """

    def __init__(
        self,
        sdk_root: str,
        *,
        build_tools_version: str = "29.0.2",
        host_os: str | None = None,
        command_timeout: int = 1800,
        download_timeout: int = 600,
    ) -> None:
        self._sdk_root = sdk_root
        self._build_tools_version = build_tools_version
        self._host_os = host_os or host_os_name()
        self._command_timeout = command_timeout
        self._download_timeout = download_timeout

    @property
    def sdkmanager(self) -> str:
        return os.path.join(self._sdk_root, "tools", "bin", "sdkmanager")

    def package_path(self, package: str) -> str:
        """``platforms;android-29`` → ``<sdk_root>/platforms/android-29``."""
        return os.path.join(self._sdk_root, *package.split(";"))

    def is_installed(self, package: str) -> bool:
        return os.path.isdir(self.package_path(package))

    def required_packages(
        self,
        image: SystemImage,
        *,
        emulator_build: str | None = None,
        ndk: str | None = None,
        cmake: str | None = None,
    ) -> list[str]:
        packages = [
            f"build-tools;{self._build_tools_version}",
            "platform-tools",
            image.platform_package,
            image.package,
        ]
        if emulator_build is None:
            packages.append("emulator")
        if ndk:
            packages.append(f"ndk;{ndk}")
        if cmake:
            packages.append(f"cmake;{cmake}")
        return packages

    async def install(
        self,
        image: SystemImage,
        *,
        emulator_build: str | None = None,
        ndk: str | None = None,
        cmake: str | None = None,
    ) -> None:
        """Install everything needed to boot ``image``.

        Args:
            image: Target platform descriptor.
            emulator_build: Pin a specific emulator build instead of the
                ``emulator`` package.
            ndk: NDK version to install alongside.
            cmake: CMake version to install alongside.

        Raises:
            InstallError: If a download or any sdkmanager step fails.
        """
        if not self._sdk_root:
            raise InstallError("Android SDK root is not configured (set ANDROID_SDK_ROOT or EMURUNNER_SDK_ROOT)")

        await self._ensure_sdk_tools()

        missing = [
            p
            for p in self.required_packages(image, emulator_build=emulator_build, ndk=ndk, cmake=cmake)
            if not self.is_installed(p)
        ]
        if missing:
            logger.info("installing %s", ", ".join(missing))
            await self._sdkmanager("--licenses", stdin_data=_LICENSE_ANSWERS)
            await self._sdkmanager("--update")
            for package in missing:
                await self._sdkmanager(package)
        else:
            logger.info("all SDK packages for %s already installed", image.package)

        if emulator_build is not None:
            await self._ensure_emulator_build(emulator_build)

    async def _ensure_sdk_tools(self) -> None:
        if os.path.isfile(self.sdkmanager):
            logger.info("Android SDK already installed")
            return
        logger.info("downloading Android SDK into %s", self._sdk_root)
        url = f"{_REPOSITORY_URL}/sdk-tools-{self._host_os}-{_SDK_TOOLS_REVISION}.zip"
        await download_and_extract(url, self._sdk_root, timeout=self._download_timeout)
        if not os.path.isfile(self.sdkmanager):
            raise InstallError(f"sdkmanager not found after unpacking {url}")

    async def _ensure_emulator_build(self, build: str) -> None:
        # Unpacked over any preinstalled emulator/ directory.
        logger.info("installing emulator build %s", build)
        url = f"{_REPOSITORY_URL}/emulator-{self._host_os}-{build}.zip"
        await download_and_extract(url, self._sdk_root, timeout=self._download_timeout)

    async def _sdkmanager(self, *args: str, stdin_data: bytes | None = None) -> None:
        result = await run_command(
            self.sdkmanager,
            *args,
            timeout=self._command_timeout,
            error=InstallError,
            stdin_data=stdin_data,
        )
        if not result.ok:
            detail = result.stderr or result.stdout
            raise InstallError(f"sdkmanager {' '.join(args)} failed (rc={result.returncode}): {detail[-500:]}")
        logger.info("sdkmanager %s ok", " ".join(args))
