"""In-process stand-in for the acquisition host, used by ``--demo`` and tests."""

from __future__ import annotations

import logging
import tempfile
from typing import Callable, Optional

import numpy as np

from ..core.models import ChooseDirectory, ClearLog, Event, FolderChosen, LogLine, Start, Stop, Telemetry
from ..core.timebase import NS_PER_SECOND
from .channel import HostChannelError
from .protocol import DecodeError, encode_event, parse_command

logger = logging.getLogger(__name__)

# The rig reports nanoseconds since device boot; start the fake clock well away from zero.
DEFAULT_BOOT_NS = 3_600 * NS_PER_SECOND


class LoopbackHost:
    """
    Synthetic host that answers console commands with wire events.

    It behaves like the acquisition server: ``start`` begins a collection,
    :meth:`tick` then produces telemetry lines until ``stop``. Values are a
    pair of phase-shifted sines (force) and a slow ramp (position).
    """

    def __init__(
        self,
        channel_count: int = 1,
        *,
        emit: Callable[[str], None],
        folder: Optional[str] = None,
        sample_period_ns: int = NS_PER_SECOND // 10,
        boot_ns: int = DEFAULT_BOOT_NS,
    ) -> None:
        if channel_count <= 0:
            raise ValueError("channel_count must be positive")
        if sample_period_ns <= 0:
            raise ValueError("sample_period_ns must be positive")
        self._channel_count = int(channel_count)
        self._emit = emit
        self._folder = folder or tempfile.gettempdir()
        self._period_ns = int(sample_period_ns)
        self._clock_ns = int(boot_ns)
        self._running = False
        self._closed = False
        self._filename: Optional[str] = None
        self._log: list[str] = []

    # ------------------------------------------------------------------ state
    @property
    def running(self) -> bool:
        return self._running

    @property
    def filename(self) -> Optional[str]:
        return self._filename

    @property
    def log(self) -> list[str]:
        return list(self._log)

    def close(self) -> None:
        self._running = False
        self._closed = True

    # ------------------------------------------------------------- HostChannel
    def send(self, message: str) -> None:
        if self._closed:
            raise HostChannelError("loopback host is closed")
        try:
            command = parse_command(message)
        except DecodeError:
            self._report(f"ERROR\tUnrecognized message: {message}")
            return

        if isinstance(command, Start):
            self._start(command.filename)
        elif isinstance(command, Stop):
            self._stop()
        elif isinstance(command, ClearLog):
            self._log.clear()
        elif isinstance(command, ChooseDirectory):
            self._publish(FolderChosen(path=self._folder))

    # -------------------------------------------------------------- streaming
    def tick(self, count: int = 1) -> int:
        """Emit up to ``count`` telemetry samples; returns how many were sent."""
        if not self._running or count <= 0:
            return 0
        for _ in range(count):
            self._clock_ns += self._period_ns
            self._publish(Telemetry(timestamp_ns=self._clock_ns, channels=self._values(self._clock_ns)))
        return count

    def _values(self, clock_ns: int) -> tuple[float, ...]:
        t = clock_ns / NS_PER_SECOND
        force = 5.0 + 2.0 * np.sin(2.0 * np.pi * 0.5 * t + np.arange(2) * np.pi / 3.0)
        position = (t * 40.0) % 400.0
        values = [float(force[0]), float(force[1]), float(position)]
        if self._channel_count <= len(values):
            return tuple(values[: self._channel_count])
        return tuple(values + [0.0] * (self._channel_count - len(values)))

    def _start(self, filename: str) -> None:
        if not filename:
            self._report("ERROR\tNo file name given, not starting")
            return
        if self._running:
            self._report(f"WARN\tAlready collecting into {self._filename}")
            return
        self._filename = filename
        self._running = True
        logger.info("Loopback collection started: %s", filename)
        self._report("INFO\tData collection started")

    def _stop(self) -> None:
        if not self._running:
            return
        self._running = False
        logger.info("Loopback collection stopped")
        self._report("INFO\tData collection ended")

    def _report(self, text: str) -> None:
        line = text if text.endswith("\n") else text + "\n"
        self._log.append(line)
        self._publish(LogLine(text=line))

    def _publish(self, event: Event) -> None:
        self._emit(encode_event(event))


__all__ = ["DEFAULT_BOOT_NS", "LoopbackHost"]
