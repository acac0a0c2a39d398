"""Centralised runtime configuration via Pydantic Settings."""

from __future__ import annotations

import os

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Runner-wide configuration loaded from environment variables.

    CI inputs (api level, script, ...) are not settings; they are read by
    ``emurunner.inputs.reader`` and validated into a ``RunConfig``.
    """

    model_config = {"env_prefix": "EMURUNNER_", "frozen": True, "populate_by_name": True}

    # Android SDK
    sdk_root: str = Field(
        default="",
        validation_alias=AliasChoices("EMURUNNER_SDK_ROOT", "ANDROID_SDK_ROOT", "ANDROID_HOME"),
    )
    avd_home: str = Field(
        default_factory=lambda: os.path.expanduser("~/.android/avd"),
        validation_alias=AliasChoices("EMURUNNER_AVD_HOME", "ANDROID_AVD_HOME"),
    )
    build_tools_version: str = "29.0.2"

    # Vendor tool invocation
    adb_bin: str = "adb"
    command_timeout_seconds: int = 120
    install_timeout_seconds: int = 1800
    download_timeout_seconds: int = 600

    # Emulator
    emulator_serial: str = "emulator-5554"
    # Empty keeps emulator stdout/stderr out of the job log.
    emulator_log_file: str = ""
    boot_poll_attempts: int = 120
    boot_poll_interval_seconds: float = 2.0
    boot_poll_backoff: float = 1.5
    boot_poll_max_interval_seconds: float = 10.0
    kill_timeout_seconds: int = 30

    # LayoutDiff
    upload_base_url: str = "https://app.layoutdiff.com"
    upload_timeout_seconds: int = 60
    upload_concurrency: int = 4


def get_settings() -> Settings:
    """Factory, overridable in tests."""
    return Settings()
