"""Console entry point: wire components from settings and run one job."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Mapping

from emurunner.config import Settings, get_settings
from emurunner.emulator.adb import AdbClient
from emurunner.emulator.avd import AvdBuilder
from emurunner.emulator.manager import EmulatorManager
from emurunner.inputs.validator import build_run_config
from emurunner.layoutdiff.uploader import LayoutDiffUploader
from emurunner.runner.service import EmulatorRunService
from emurunner.script.executor import ShellScriptExecutor
from emurunner.sdk.installer import SdkInstaller
from emurunner.shared.exceptions import EmuRunnerError, UnsupportedPlatformError
from emurunner.shared.models import RunResult

logger = logging.getLogger(__name__)


def check_platform(platform: str | None = None) -> None:
    """Only macOS and Linux runners can host the emulator.

    Raises:
        UnsupportedPlatformError: On any other OS.
    """
    current = platform or sys.platform
    if current == "darwin":
        return
    if current.startswith("linux"):
        message = (
            "You're running a Linux VM where hardware acceleration is not available. "
            "Please consider using a macOS VM instead to take advantage of native hardware acceleration."
        )
        logger.warning(message)
        print(f"::warning::{message}", flush=True)
        return
    raise UnsupportedPlatformError("Unsupported virtual machine: please use either macos or ubuntu VM.")


def set_failed(message: str) -> None:
    """Report a failure through the GitHub Actions workflow command channel."""
    print(f"::error::{message}", flush=True)


def build_service(settings: Settings) -> EmulatorRunService:
    adb = AdbClient(
        serial=settings.emulator_serial,
        adb_bin=settings.adb_bin,
        timeout=settings.command_timeout_seconds,
    )
    emulator = EmulatorManager(
        settings.sdk_root,
        AvdBuilder(settings.sdk_root, settings.avd_home, timeout=settings.command_timeout_seconds),
        adb,
        poll_attempts=settings.boot_poll_attempts,
        poll_interval=settings.boot_poll_interval_seconds,
        poll_backoff=settings.boot_poll_backoff,
        poll_max_interval=settings.boot_poll_max_interval_seconds,
        kill_timeout=settings.kill_timeout_seconds,
        log_file=settings.emulator_log_file,
    )
    return EmulatorRunService(
        installer=SdkInstaller(
            settings.sdk_root,
            build_tools_version=settings.build_tools_version,
            command_timeout=settings.install_timeout_seconds,
            download_timeout=settings.download_timeout_seconds,
        ),
        emulator=emulator,
        executor=ShellScriptExecutor(),
        uploader=LayoutDiffUploader(
            settings.upload_base_url,
            timeout=settings.upload_timeout_seconds,
            concurrency=settings.upload_concurrency,
        ),
    )


async def run_from_environ(settings: Settings, environ: Mapping[str, str] | None = None) -> RunResult:
    """Validate inputs, then run the job.

    Input and platform errors are raised before any process is spawned.
    """
    check_platform()
    config = build_run_config(environ)
    service = build_service(settings)
    return await service.run(config)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        result = asyncio.run(run_from_environ(get_settings()))
    except EmuRunnerError as exc:
        logger.error("%s", exc)
        set_failed(str(exc))
        sys.exit(1)
    except Exception as exc:
        logger.exception("unexpected error: %s", exc)
        set_failed(str(exc))
        sys.exit(1)

    if not result.success:
        set_failed(result.error_message or "run failed")
        sys.exit(1)
    logger.info("run completed successfully")


if __name__ == "__main__":
    main()
