"""Tests for EmulatorRunService."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from emurunner.runner.service import EmulatorRunService
from emurunner.script.executor import ShellScriptExecutor
from emurunner.shared.exceptions import InstallError, LaunchTimeout, ScriptExecutionError, UploadError
from emurunner.shared.models import RunConfig, UploadFailure, UploadReport


@pytest.fixture
def calls() -> MagicMock:
    """Parent mock recording the order of every stage."""
    return MagicMock()


@pytest.fixture
def mock_installer(calls: MagicMock) -> AsyncMock:
    mock = AsyncMock()
    calls.attach_mock(mock.install, "install")
    return mock


@pytest.fixture
def mock_emulator(calls: MagicMock) -> AsyncMock:
    mock = AsyncMock()
    calls.attach_mock(mock.launch, "launch")
    calls.attach_mock(mock.kill, "kill")
    return mock


@pytest.fixture
def mock_executor(calls: MagicMock) -> AsyncMock:
    mock = AsyncMock()
    mock.run.return_value = ["echo hi", "pwd"]
    calls.attach_mock(mock.run, "run")
    return mock


@pytest.fixture
def mock_uploader(calls: MagicMock) -> AsyncMock:
    mock = AsyncMock()
    mock.upload_directory.return_value = UploadReport(attempted=("a.png",), uploaded=("a.png",))
    calls.attach_mock(mock.upload_directory, "upload_directory")
    return mock


@pytest.fixture
def service(
    mock_installer: AsyncMock, mock_emulator: AsyncMock, mock_executor: AsyncMock, mock_uploader: AsyncMock
) -> EmulatorRunService:
    return EmulatorRunService(
        installer=mock_installer,
        emulator=mock_emulator,
        executor=mock_executor,
        uploader=mock_uploader,
    )


@pytest.fixture
def upload_config(run_config: RunConfig) -> RunConfig:
    return run_config.model_copy(update={"screenshots_path": "shots/", "project_token": "tok", "ref": "abc"})


def _stage_names(calls: MagicMock) -> list[str]:
    return [name for name, _args, _kwargs in calls.mock_calls]


async def test_happy_path(
    service: EmulatorRunService, run_config: RunConfig, calls: MagicMock, mock_uploader: AsyncMock
) -> None:
    result = await service.run(run_config)

    assert result.success
    assert result.error_message is None
    assert result.executed_commands == ("echo hi", "pwd")
    assert _stage_names(calls) == ["install", "launch", "run", "kill"]
    mock_uploader.upload_directory.assert_not_awaited()


async def test_install_arguments(
    service: EmulatorRunService, run_config: RunConfig, mock_installer: AsyncMock
) -> None:
    config = run_config.model_copy(update={"ndk": "21.0.6113669", "emulator_build": "6061023"})

    await service.run(config)

    mock_installer.install.assert_awaited_once_with(
        config.system_image, emulator_build="6061023", ndk="21.0.6113669", cmake=None
    )


async def test_working_directory_passed(
    service: EmulatorRunService, run_config: RunConfig, mock_executor: AsyncMock
) -> None:
    await service.run(run_config.model_copy(update={"working_directory": "./android"}))

    mock_executor.run.assert_awaited_once_with(("echo hi", "pwd"), cwd="./android")


async def test_install_failure_still_kills(
    service: EmulatorRunService, run_config: RunConfig, calls: MagicMock, mock_installer: AsyncMock
) -> None:
    mock_installer.install.side_effect = InstallError("sdkmanager exploded")

    result = await service.run(run_config)

    assert not result.success
    assert result.error_message == "sdkmanager exploded"
    assert _stage_names(calls) == ["install", "kill"]


async def test_launch_timeout_kills(
    service: EmulatorRunService, run_config: RunConfig, calls: MagicMock, mock_emulator: AsyncMock
) -> None:
    mock_emulator.launch.side_effect = LaunchTimeout("timeout waiting for emulator to boot")

    result = await service.run(run_config)

    assert not result.success
    assert "timeout" in (result.error_message or "")
    assert _stage_names(calls) == ["install", "launch", "kill"]


async def test_script_failure_uploads_then_kills(
    service: EmulatorRunService, upload_config: RunConfig, calls: MagicMock, mock_executor: AsyncMock
) -> None:
    mock_executor.run.side_effect = ScriptExecutionError("pwd", 1, completed=("echo hi",))

    result = await service.run(upload_config)

    assert not result.success
    assert result.executed_commands == ("echo hi",)
    assert "exit code 1" in (result.error_message or "")
    assert _stage_names(calls) == ["install", "launch", "run", "upload_directory", "kill"]


async def test_upload_called_with_credentials(
    service: EmulatorRunService, upload_config: RunConfig, mock_uploader: AsyncMock
) -> None:
    result = await service.run(upload_config)

    assert result.success
    assert result.upload is not None and result.upload.ok
    mock_uploader.upload_directory.assert_awaited_once_with("shots/", project_token="tok", ref="abc")


async def test_per_file_upload_failures_do_not_fail_run(
    service: EmulatorRunService, upload_config: RunConfig, mock_uploader: AsyncMock
) -> None:
    mock_uploader.upload_directory.return_value = UploadReport(
        attempted=("a.png",), failures=(UploadFailure(path="a.png", error="HTTP 500"),)
    )

    result = await service.run(upload_config)

    assert result.success
    assert result.upload is not None and not result.upload.ok


async def test_unlistable_screenshot_directory_fails_run(
    service: EmulatorRunService, upload_config: RunConfig, calls: MagicMock, mock_uploader: AsyncMock
) -> None:
    mock_uploader.upload_directory.side_effect = UploadError("cannot list screenshots in shots/")

    result = await service.run(upload_config)

    assert not result.success
    assert "cannot list screenshots" in (result.error_message or "")
    assert _stage_names(calls)[-1] == "kill"


async def test_unexpected_error_propagates_after_kill(
    service: EmulatorRunService, run_config: RunConfig, mock_executor: AsyncMock, mock_emulator: AsyncMock
) -> None:
    mock_executor.run.side_effect = RuntimeError("bug")

    with pytest.raises(RuntimeError, match="bug"):
        await service.run(run_config)

    mock_emulator.kill.assert_awaited_once()


class TestWithShellExecutor:
    async def test_runs_both_commands_then_kills_once(
        self, mock_installer: AsyncMock, mock_emulator: AsyncMock, run_config: RunConfig, make_proc
    ) -> None:
        service = EmulatorRunService(mock_installer, mock_emulator, ShellScriptExecutor())

        with patch("asyncio.create_subprocess_exec", return_value=make_proc()) as mock_exec:
            result = await service.run(run_config)

        assert result.success
        assert [c.args[2] for c in mock_exec.call_args_list] == ["echo hi", "pwd"]
        mock_emulator.kill.assert_awaited_once()

    async def test_failing_command_halts_and_kills(
        self, mock_installer: AsyncMock, mock_emulator: AsyncMock, run_config: RunConfig, make_proc
    ) -> None:
        service = EmulatorRunService(mock_installer, mock_emulator, ShellScriptExecutor())
        config = run_config.model_copy(update={"script": ("false", "echo never")})

        with patch("asyncio.create_subprocess_exec", side_effect=[make_proc(returncode=1)]) as mock_exec:
            result = await service.run(config)

        assert not result.success
        assert mock_exec.call_count == 1
        mock_emulator.kill.assert_awaited_once()
