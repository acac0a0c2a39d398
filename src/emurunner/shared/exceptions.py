"""Hierarchical exception types for the emulator runner."""

from __future__ import annotations


class EmuRunnerError(Exception):
    """Base exception for all emurunner errors."""


# ── Inputs ──────────────────────────────────────────────────────


class ValidationError(EmuRunnerError):
    """A CI input is missing or outside its allow-list."""

    def __init__(self, field: str, value: str | None, message: str | None = None) -> None:
        self.field = field
        self.value = value
        super().__init__(message or f"invalid value for input '{field}': {value!r}")


class UnsupportedPlatformError(EmuRunnerError):
    """The host OS cannot run the emulator."""


# ── SDK ─────────────────────────────────────────────────────────


class InstallError(EmuRunnerError):
    """Downloading or installing an SDK component failed."""


# ── Emulator ────────────────────────────────────────────────────


class AdbError(EmuRunnerError):
    """ADB command error."""


class LaunchError(EmuRunnerError):
    """Emulator failed to start or exited before it finished booting."""


class LaunchTimeout(LaunchError):
    """Emulator did not report boot completion within the polling budget."""


# ── Script ──────────────────────────────────────────────────────


class ScriptExecutionError(EmuRunnerError):
    """A user script command exited non-zero."""

    def __init__(self, command: str, returncode: int, *, completed: tuple[str, ...] = ()) -> None:
        self.command = command
        self.returncode = returncode
        self.completed = completed
        super().__init__(f"command failed with exit code {returncode}: {command}")


# ── LayoutDiff ──────────────────────────────────────────────────


class UploadError(EmuRunnerError):
    """Screenshot upload to LayoutDiff failed."""
