"""Console controller: host events in, operator intents out."""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from ..bridge.channel import HostChannel, HostChannelError
from ..bridge.protocol import BridgeProtocol, DecodeError
from ..config.runtime import ConsoleConfig
from .models import (
    ChooseDirectory,
    ClearLog,
    Command,
    Event,
    FolderChosen,
    LogLine,
    Sample,
    SessionState,
    Start,
    Stop,
    Telemetry,
)
from .sample_buffer import ChannelCountMismatch, SampleBuffer
from .timebase import TimeBase

logger = logging.getLogger(__name__)

# Passed as ``extra`` on records the controller already wrote to the operator log.
OPERATOR_REPORTED = {"operator_reported": True}


class EmptyFilenameError(ValueError):
    """Start was requested without an output file name."""


class Presentation(Protocol):
    """What the controller needs from a chart/log view."""

    def render_append(self, t: float, channels: Sequence[float]) -> None:  # pragma: no cover - protocol
        ...

    def render_clear(self) -> None:  # pragma: no cover - protocol
        ...

    def render_log_append(self, text: str) -> None:  # pragma: no cover - protocol
        ...

    def render_log_clear(self) -> None:  # pragma: no cover - protocol
        ...

    def render_folder_path(self, path: str) -> None:  # pragma: no cover - protocol
        ...


class NullPresentation:
    """Presentation that draws nothing; used headless and as a default."""

    def render_append(self, t: float, channels: Sequence[float]) -> None:
        return

    def render_clear(self) -> None:
        return

    def render_log_append(self, text: str) -> None:
        return

    def render_log_clear(self) -> None:
        return

    def render_folder_path(self, path: str) -> None:
        return


class ConsoleController:
    """
    Owns the live window, the display clock and the status log.

    Inbound host events update state and notify the presentation; operator
    intents become host commands. Everything runs on one thread: callers on
    other threads must hand lines over through a queue (see
    :mod:`scissorsconsole.bridge.event_reader`).

    The session is ``STREAMING`` once the first telemetry sample of a
    session has been accepted, not when ``start`` is sent; the host confirms
    a start only by streaming data.
    """

    def __init__(
        self,
        channel: HostChannel,
        presentation: Optional[Presentation] = None,
        *,
        config: Optional[ConsoleConfig] = None,
    ) -> None:
        self._config = (config or ConsoleConfig()).sanitized()
        self._bridge = BridgeProtocol(channel)
        self._presentation: Presentation = presentation or NullPresentation()
        self._buffer = SampleBuffer(self._config.max_points, self._config.channel_count)
        self._timebase = TimeBase()
        self._log_text = ""
        self._folder_path = self._config.default_folder or ""
        self._state = SessionState.IDLE

    # ------------------------------------------------------------------ state
    @property
    def config(self) -> ConsoleConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def buffer(self) -> SampleBuffer:
        return self._buffer

    @property
    def timebase(self) -> TimeBase:
        return self._timebase

    @property
    def log_text(self) -> str:
        return self._log_text

    @property
    def folder_path(self) -> str:
        return self._folder_path

    @property
    def channel_count(self) -> int:
        return self._buffer.channel_count

    def attach_presentation(self, presentation: Presentation) -> None:
        """Swap in a view after construction (the window needs the controller first)."""
        self._presentation = presentation

    # --------------------------------------------------------------- inbound
    def on_telemetry(self, timestamp_ns: int, channels: Sequence[float]) -> bool:
        """Apply one telemetry reading; returns ``False`` if it was dropped."""
        values = tuple(float(v) for v in channels)
        if len(values) != self._buffer.channel_count:
            # Check before normalizing so a bad sample cannot set the origin.
            self._report_mismatch(ChannelCountMismatch(self._buffer.channel_count, len(values)))
            return False

        t = self._timebase.normalize_ns(timestamp_ns)
        self._buffer.append(Sample(timestamp=t, channels=values))
        if self._state is not SessionState.STREAMING:
            logger.debug("First sample of session at device time %d ns", timestamp_ns)
            self._state = SessionState.STREAMING
        self._presentation.render_append(t, values)
        return True

    def on_log_line(self, text: str) -> None:
        self._log_text += text
        self._presentation.render_log_append(text)

    def on_folder_chosen(self, path: str) -> None:
        self._folder_path = path
        self._presentation.render_folder_path(path)

    def handle_event(self, event: Event) -> bool:
        if isinstance(event, Telemetry):
            return self.on_telemetry(event.timestamp_ns, event.channels)
        if isinstance(event, LogLine):
            self.on_log_line(event.text)
            return True
        if isinstance(event, FolderChosen):
            self.on_folder_chosen(event.path)
            return True
        raise TypeError(f"Not a host event: {event!r}")

    def handle_line(self, line: str) -> bool:
        """Decode and apply one host line; malformed lines are dropped and noted."""
        try:
            event = self._bridge.decode(line)
        except DecodeError as exc:
            logger.warning("Dropping malformed host line: %s", exc, extra=OPERATOR_REPORTED)
            self.on_log_line(f"WARN\tDropped malformed host message: {line.strip()!r}\n")
            return False
        return self.handle_event(event)

    def append_log_record(self, text: str) -> None:
        """Entry point for :class:`OperatorLogHandler`."""
        self.on_log_line(text)

    def on_host_lost(self, reason: str) -> None:
        """End the session after the host channel failed; nothing is retried."""
        logger.error("Host channel lost: %s", reason, extra=OPERATOR_REPORTED)
        self._timebase.reset()
        self._state = SessionState.IDLE
        self.on_log_line(f"ERROR\tHost connection lost: {reason}\n")

    # ---------------------------------------------------------------- intents
    def request_clear(self) -> bool:
        """Wipe chart, clock and log locally, then tell the host to drop its log too."""
        self._buffer.clear()
        self._timebase.reset()
        self._log_text = ""
        self._state = SessionState.IDLE
        self._presentation.render_clear()
        self._presentation.render_log_clear()
        return self._send(ClearLog())

    def request_start(self, filename: str) -> bool:
        if not filename or not filename.strip():
            raise EmptyFilenameError("Enter a file name before starting")
        if not self._send(Start(filename=filename)):
            return False
        # New session: the next telemetry sample becomes t = 0.
        self._buffer.clear()
        self._timebase.reset()
        self._state = SessionState.IDLE
        self._presentation.render_clear()
        logger.info("Start requested, file: %s, folder: %s", filename, self._folder_path or "<host default>")
        return True

    def request_stop(self) -> bool:
        logger.debug("Stop requested")
        return self._send(Stop())

    def request_choose_directory(self) -> bool:
        return self._send(ChooseDirectory())

    # ---------------------------------------------------------------- helpers
    def _send(self, command: Command) -> bool:
        try:
            self._bridge.send(command)
        except HostChannelError as exc:
            self.on_host_lost(str(exc))
            return False
        return True

    def _report_mismatch(self, exc: ChannelCountMismatch) -> None:
        logger.warning("Dropping telemetry sample: %s", exc, extra=OPERATOR_REPORTED)
        self.on_log_line(f"WARN\tDropped telemetry sample: {exc}\n")


__all__ = [
    "ConsoleController",
    "EmptyFilenameError",
    "NullPresentation",
    "OPERATOR_REPORTED",
    "Presentation",
]
