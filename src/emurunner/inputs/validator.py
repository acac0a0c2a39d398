"""Allow-list checks for CI inputs and construction of the RunConfig."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from emurunner.inputs.reader import get_input, get_optional_input
from emurunner.script.parser import parse_script
from emurunner.shared.enums import Arch, Target
from emurunner.shared.exceptions import ValidationError
from emurunner.shared.models import RunConfig

logger = logging.getLogger(__name__)

MIN_API_LEVEL = 15
MAX_API_LEVEL = 35

VALID_TARGETS = frozenset(t.value for t in Target)
VALID_ARCHS = frozenset(a.value for a in Arch)
VALID_BOOLEANS = frozenset({"true", "false"})

_TARGET_ALIASES = {"playstore": Target.GOOGLE_APIS_PLAYSTORE.value}


def _is_decimal(value: str) -> bool:
    return value.isascii() and value.isdigit()


def check_api_level(value: str) -> int:
    if not _is_decimal(value):
        raise ValidationError("api-level", value, f"Unexpected API level: '{value}'.")
    level = int(value)
    if not MIN_API_LEVEL <= level <= MAX_API_LEVEL:
        raise ValidationError(
            "api-level",
            value,
            f"API level {level} is not supported; expected {MIN_API_LEVEL}-{MAX_API_LEVEL}.",
        )
    return level


def resolve_target(value: str) -> str:
    return _TARGET_ALIASES.get(value, value)


def check_target(value: str) -> str:
    if value not in VALID_TARGETS:
        raise ValidationError(
            "target",
            value,
            f"Value for input.target '{value}' is unknown. Supported options: {sorted(VALID_TARGETS)}.",
        )
    return value


def check_arch(value: str) -> str:
    if value not in VALID_ARCHS:
        raise ValidationError(
            "arch",
            value,
            f"Value for input.arch '{value}' is unknown. Supported options: {sorted(VALID_ARCHS)}.",
        )
    return value


def check_disable_animations(value: str) -> bool:
    if value not in VALID_BOOLEANS:
        raise ValidationError(
            "disable-animations",
            value,
            "Input for input.disable-animations should be either 'true' or 'false'.",
        )
    return value == "true"


def check_emulator_build(value: str) -> str:
    if not _is_decimal(value):
        raise ValidationError("emulator-build", value, f"Unexpected emulator build: '{value}'.")
    return value


def check_cores(value: str) -> int:
    if not _is_decimal(value) or int(value) < 1:
        raise ValidationError("cores", value, f"Unexpected number of cores: '{value}'.")
    return int(value)


def build_run_config(environ: Mapping[str, str] | None = None) -> RunConfig:
    """Read, validate and freeze every CI input.

    Runs before any SDK or emulator work, so a rejected input never spawns a
    process.

    Raises:
        ValidationError: On the first missing or out-of-range input.
    """
    api_level = check_api_level(get_input("api-level", required=True, environ=environ))
    logger.info("API level: %d", api_level)

    target = check_target(resolve_target(get_input("target", environ=environ)))
    logger.info("target: %s", target)

    arch = check_arch(get_input("arch", environ=environ))
    logger.info("CPU architecture: %s", arch)

    profile = get_input("profile", environ=environ)
    logger.info("hardware profile: %s", profile or "<none>")

    cores = check_cores(get_input("cores", environ=environ))
    logger.info("cores: %d", cores)

    sdcard = get_input("sdcard-path-or-size", environ=environ)
    logger.info("SD card path or size: %s", sdcard)

    avd_name = get_input("avd-name", environ=environ)
    logger.info("AVD name: %s", avd_name)

    emulator_options = get_input("emulator-options", environ=environ)
    logger.info("emulator options: %s", emulator_options)

    disable_animations = check_disable_animations(get_input("disable-animations", environ=environ))
    logger.info("disable animations: %s", disable_animations)

    emulator_build = get_optional_input("emulator-build", environ=environ)
    if emulator_build:
        check_emulator_build(emulator_build)
        logger.info("using emulator build: %s", emulator_build)

    working_directory = get_optional_input("working-directory", environ=environ)
    if working_directory:
        logger.info("custom working directory: %s", working_directory)

    ndk = get_optional_input("ndk", environ=environ)
    if ndk:
        logger.info("version of NDK to install: %s", ndk)

    cmake = get_optional_input("cmake", environ=environ)
    if cmake:
        logger.info("version of CMake to install: %s", cmake)

    script = parse_script(get_input("script", required=True, environ=environ))
    logger.info("script:\n%s", "\n".join(script))

    screenshots_path = get_optional_input("screenshots-path", environ=environ)
    project_token: str | None = None
    ref: str | None = None
    if screenshots_path:
        project_token = get_input("project-token", required=True, environ=environ)
        ref = get_input("ref", required=True, environ=environ)
        logger.info("screenshots from %s will be sent to LayoutDiff (commit: %s)", screenshots_path, ref)

    return RunConfig(
        api_level=api_level,
        target=target,
        arch=arch,
        profile=profile,
        cores=cores,
        sdcard_path_or_size=sdcard,
        avd_name=avd_name,
        emulator_options=emulator_options,
        disable_animations=disable_animations,
        emulator_build=emulator_build,
        working_directory=working_directory,
        ndk=ndk,
        cmake=cmake,
        script=script,
        screenshots_path=screenshots_path,
        project_token=project_token,
        ref=ref,
    )
