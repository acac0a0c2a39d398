"""Domain enumerations used across all modules."""

from __future__ import annotations

from enum import Enum, unique


@unique
class EmulatorState(str, Enum):
    """Lifecycle states of the managed emulator."""

    NOT_STARTED = "not_started"
    STARTING = "starting"
    RUNNING = "running"
    STOPPED = "stopped"


@unique
class Target(str, Enum):
    """System image variants accepted for the ``target`` input."""

    DEFAULT = "default"
    GOOGLE_APIS = "google_apis"
    GOOGLE_APIS_PLAYSTORE = "google_apis_playstore"


@unique
class Arch(str, Enum):
    """CPU architectures accepted for the ``arch`` input."""

    X86 = "x86"
    X86_64 = "x86_64"
