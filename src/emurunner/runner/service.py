"""Core service orchestrating install -> launch -> script -> upload -> kill."""

from __future__ import annotations

import logging

from emurunner.runner.interfaces import EmulatorController, ScreenshotUploader, ScriptExecutor, SdkInstaller
from emurunner.shared.exceptions import EmuRunnerError, ScriptExecutionError
from emurunner.shared.models import RunConfig, RunResult, UploadReport

logger = logging.getLogger(__name__)


class EmulatorRunService:
    """Run one CI job against a freshly booted emulator.

    The emulator is killed exactly once per ``run`` call, whatever stage
    failed.
    """

    def __init__(
        self,
        installer: SdkInstaller,
        emulator: EmulatorController,
        executor: ScriptExecutor,
        uploader: ScreenshotUploader | None = None,
    ) -> None:
        self.installer = installer
        self.emulator = emulator
        self.executor = executor
        self.uploader = uploader

    async def run(self, config: RunConfig) -> RunResult:
        """Execute the full job and return its immutable outcome.

        A failing script command stops the remaining commands but screenshots
        are still uploaded, so the failing state can be inspected.
        """
        errors: list[str] = []
        executed: tuple[str, ...] = ()
        upload: UploadReport | None = None

        try:
            image = config.system_image
            logger.info("installing SDK components for %s", image.package)
            await self.installer.install(
                image,
                emulator_build=config.emulator_build,
                ndk=config.ndk,
                cmake=config.cmake,
            )

            logger.info("launching emulator %s", config.avd_name)
            await self.emulator.launch(config)

            try:
                executed = tuple(await self.executor.run(config.script, cwd=config.working_directory))
                logger.info("script finished (%d command(s))", len(executed))
            except ScriptExecutionError as exc:
                executed = exc.completed
                logger.error("script failed: %s", exc)
                errors.append(str(exc))

            if config.upload_enabled and self.uploader is not None:
                upload = await self.uploader.upload_directory(
                    config.screenshots_path or "",
                    project_token=config.project_token or "",
                    ref=config.ref or "",
                )
        except EmuRunnerError as exc:
            logger.error("run failed: %s", exc)
            errors.append(str(exc))
        finally:
            try:
                await self.emulator.kill()
            except Exception as exc:  # pragma: no cover - cleanup log
                logger.error("failed to kill emulator: %s", exc)
                errors.append(f"failed to kill emulator: {exc}")

        if errors:
            return RunResult(
                success=False,
                error_message="; ".join(errors),
                executed_commands=executed,
                upload=upload,
            )
        return RunResult(success=True, executed_commands=executed, upload=upload)
