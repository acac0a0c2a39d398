"""Read CI inputs the way GitHub Actions exposes them to a step."""

from __future__ import annotations

import os
from collections.abc import Mapping

from emurunner.shared.exceptions import ValidationError

# Mirrors the defaults declared in action.yml so local runs behave the same.
DEFAULTS: dict[str, str] = {
    "target": "default",
    "arch": "x86",
    "profile": "",
    "cores": "2",
    "sdcard-path-or-size": "512M",
    "avd-name": "test",
    "emulator-options": "-no-window -gpu swiftshader_indirect -no-snapshot -noaudio -no-boot-anim",
    "disable-animations": "true",
}


def input_env_name(name: str) -> str:
    """``api-level`` → ``INPUT_API-LEVEL`` (hyphens are kept)."""
    return "INPUT_" + name.replace(" ", "_").upper()


def get_input(
    name: str,
    *,
    required: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Return the stripped value of input ``name`` or its default.

    Raises:
        ValidationError: If ``required`` and the input is absent or blank.
    """
    env = os.environ if environ is None else environ
    value = env.get(input_env_name(name), "").strip()
    if not value:
        value = DEFAULTS.get(name, "")
    if required and not value:
        raise ValidationError(name, None, f"input required and not supplied: {name}")
    return value


def get_optional_input(name: str, *, environ: Mapping[str, str] | None = None) -> str | None:
    value = get_input(name, environ=environ)
    return value or None
