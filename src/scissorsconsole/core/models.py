"""Shared dataclasses for console samples, host commands, and host events."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class SessionState(Enum):
    """Acquisition session state as seen by the console."""

    IDLE = "idle"
    STREAMING = "streaming"


@dataclass(frozen=True)
class Sample:
    """One point of the live window: display time in seconds plus channel values."""

    timestamp: float
    channels: tuple[float, ...]


# ---------------------------------------------------------------- commands
@dataclass(frozen=True)
class ChooseDirectory:
    pass


@dataclass(frozen=True)
class Start:
    filename: str


@dataclass(frozen=True)
class Stop:
    pass


@dataclass(frozen=True)
class ClearLog:
    pass


Command = Union[ChooseDirectory, Start, Stop, ClearLog]


# ------------------------------------------------------------------ events
@dataclass(frozen=True)
class Telemetry:
    """Raw telemetry reading; ``timestamp_ns`` is the device clock (ns since boot)."""

    timestamp_ns: int
    channels: tuple[float, ...]


@dataclass(frozen=True)
class LogLine:
    text: str


@dataclass(frozen=True)
class FolderChosen:
    path: str


Event = Union[Telemetry, LogLine, FolderChosen]


__all__ = [
    "SessionState",
    "Sample",
    "ChooseDirectory",
    "Start",
    "Stop",
    "ClearLog",
    "Command",
    "Telemetry",
    "LogLine",
    "FolderChosen",
    "Event",
]
