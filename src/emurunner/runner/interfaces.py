"""Protocol interfaces for runner dependency injection."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from emurunner.shared.models import RunConfig, SystemImage, UploadReport


@runtime_checkable
class SdkInstaller(Protocol):
    """Protocol for provisioning SDK components."""

    async def install(
        self,
        image: SystemImage,
        *,
        emulator_build: str | None = None,
        ndk: str | None = None,
        cmake: str | None = None,
    ) -> None:
        """Make sure everything needed to boot ``image`` is installed.

        Raises:
            InstallError: If any install step fails
        """
        ...


@runtime_checkable
class EmulatorController(Protocol):
    """Protocol for the emulator lifecycle."""

    async def launch(self, config: RunConfig) -> None:
        """Start an emulator and wait until it has booted.

        Raises:
            LaunchError: If the emulator fails to start
            LaunchTimeout: If boot does not complete in time
        """
        ...

    async def kill(self) -> None:
        """Stop the emulator; a no-op when none is running."""
        ...


@runtime_checkable
class ScriptExecutor(Protocol):
    """Protocol for running user commands."""

    async def run(self, commands: Sequence[str], *, cwd: str | None = None) -> list[str]:
        """Run commands in order and return those that succeeded.

        Raises:
            ScriptExecutionError: On the first failing command
        """
        ...


@runtime_checkable
class ScreenshotUploader(Protocol):
    """Protocol for forwarding screenshots."""

    async def upload_directory(self, directory: str, *, project_token: str, ref: str) -> UploadReport:
        """Upload every file in ``directory``.

        Raises:
            UploadError: If the directory cannot be listed
        """
        ...
