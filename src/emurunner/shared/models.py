"""Frozen Pydantic domain models shared by all modules."""

from __future__ import annotations

from pydantic import BaseModel


class SystemImage(BaseModel):
    """Platform descriptor selecting one vendor system image."""

    model_config = {"frozen": True}

    api_level: int
    target: str
    arch: str

    @property
    def package(self) -> str:
        """sdkmanager package id of the system image."""
        return f"system-images;android-{self.api_level};{self.target};{self.arch}"

    @property
    def platform_package(self) -> str:
        return f"platforms;android-{self.api_level}"

    @property
    def abi(self) -> str:
        """``--abi`` value understood by avdmanager."""
        return f"{self.target}/{self.arch}"


class RunConfig(BaseModel):
    """Validated CI inputs for one run; built once and never mutated."""

    model_config = {"frozen": True}

    api_level: int
    target: str
    arch: str
    profile: str = ""
    cores: int = 2
    sdcard_path_or_size: str = "512M"
    avd_name: str = "test"
    emulator_options: str = ""
    disable_animations: bool = True
    emulator_build: str | None = None
    working_directory: str | None = None
    ndk: str | None = None
    cmake: str | None = None
    script: tuple[str, ...] = ()
    screenshots_path: str | None = None
    project_token: str | None = None
    ref: str | None = None

    @property
    def system_image(self) -> SystemImage:
        return SystemImage(api_level=self.api_level, target=self.target, arch=self.arch)

    @property
    def upload_enabled(self) -> bool:
        return bool(self.screenshots_path)


class UploadFailure(BaseModel):
    """One screenshot that could not be delivered."""

    model_config = {"frozen": True}

    path: str
    error: str


class UploadReport(BaseModel):
    """Outcome of one screenshot upload pass."""

    model_config = {"frozen": True}

    attempted: tuple[str, ...] = ()
    uploaded: tuple[str, ...] = ()
    failures: tuple[UploadFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures


class RunResult(BaseModel):
    """Final outcome of a run, reported through the CI failure channel."""

    model_config = {"frozen": True}

    success: bool
    error_message: str | None = None
    executed_commands: tuple[str, ...] = ()
    upload: UploadReport | None = None
