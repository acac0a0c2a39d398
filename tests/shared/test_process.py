"""Tests for the shared subprocess helper."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from emurunner.shared.exceptions import InstallError
from emurunner.shared.process import run_command


class TestRunCommand:
    async def test_captures_output(self, make_proc) -> None:
        proc = make_proc(stdout=b"  hello\n", stderr=b"warn\n", returncode=0)

        with patch("asyncio.create_subprocess_exec", return_value=proc) as mock_exec:
            result = await run_command("tool", "--flag", timeout=5)

        assert result.stdout == "hello"
        assert result.stderr == "warn"
        assert result.ok
        assert mock_exec.call_args[0] == ("tool", "--flag")

    async def test_nonzero_exit_is_returned(self, make_proc) -> None:
        with patch("asyncio.create_subprocess_exec", return_value=make_proc(returncode=3)):
            result = await run_command("tool", timeout=5)

        assert result.returncode == 3
        assert not result.ok

    async def test_stdin_is_forwarded(self, make_proc) -> None:
        proc = make_proc()

        with patch("asyncio.create_subprocess_exec", return_value=proc) as mock_exec:
            await run_command("tool", timeout=5, stdin_data=b"y\n")

        proc.communicate.assert_awaited_once_with(b"y\n")
        assert mock_exec.call_args.kwargs["stdin"] == asyncio.subprocess.PIPE

    async def test_missing_binary_maps_to_error_type(self) -> None:
        with patch("asyncio.create_subprocess_exec", side_effect=FileNotFoundError("tool")):
            with pytest.raises(InstallError, match="binary not found"):
                await run_command("tool", timeout=5, error=InstallError)

    async def test_timeout_kills_process(self, make_proc) -> None:
        proc = make_proc()

        async def _hang(*_args: object) -> tuple[bytes, bytes]:
            await asyncio.sleep(10)
            return b"", b""

        proc.communicate.side_effect = _hang

        with patch("asyncio.create_subprocess_exec", return_value=proc):
            with pytest.raises(InstallError, match="timed out"):
                await run_command("tool", timeout=0.01, error=InstallError)

        proc.kill.assert_called_once()
