"""Shared pytest fixtures for the emurunner test suite."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from emurunner.config import Settings
from emurunner.shared.models import RunConfig


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Return a Settings instance with test defaults."""
    return Settings(
        sdk_root=str(tmp_path / "sdk"),
        avd_home=str(tmp_path / "avd"),
        boot_poll_attempts=3,
        boot_poll_interval_seconds=0,
        kill_timeout_seconds=1,
    )


@pytest.fixture()
def run_config() -> RunConfig:
    return RunConfig(
        api_level=29,
        target="google_apis",
        arch="x86",
        cores=2,
        avd_name="test",
        emulator_options="-no-window -no-snapshot",
        script=("echo hi", "pwd"),
    )


@pytest.fixture()
def make_proc() -> Callable[..., AsyncMock]:
    """Factory for a mocked ``asyncio.subprocess.Process`` that already finished."""

    def _make(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0) -> AsyncMock:
        proc = AsyncMock()
        proc.communicate.return_value = (stdout, stderr)
        proc.wait.return_value = returncode
        proc.returncode = returncode
        proc.kill = MagicMock()
        proc.terminate = MagicMock()
        return proc

    return _make
