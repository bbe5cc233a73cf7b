"""
Wire format between the console and the host process.

Commands (console -> host) are fixed text messages understood by the
unmodified host:

  - ``choose_dir``
  - ``start\\n<filename>``  (the filename is sent verbatim, no escaping)
  - ``stop``
  - ``clear_log``

Events (host -> console) arrive one per line. The host streams JSON objects
tagged with an ``event`` key::

  {"event": "telemetry", "timestamp_ns": 1234, "channels": [0.1, 0.2]}
  {"event": "log", "text": "INFO\\t12:00:01\\tCreated files\\n"}
  {"event": "folder", "path": "/data/run3"}
  {"event": "collection_started"}

Telemetry may carry ``t_s`` (seconds) instead of ``timestamp_ns``. The legacy
comma-separated telemetry form ``timestamp_ns,c1,c2,...`` is also accepted.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Mapping, Optional

from ..core.models import (
    ChooseDirectory,
    ClearLog,
    Command,
    Event,
    FolderChosen,
    LogLine,
    Start,
    Stop,
    Telemetry,
)
from ..core.timebase import NS_PER_SECOND
from .channel import HostChannel

logger = logging.getLogger(__name__)

CHOOSE_DIR = "choose_dir"
START = "start"
STOP = "stop"
CLEAR_LOG = "clear_log"

MAX_TIMESTAMP_NS = 2**64 - 1

_LIFECYCLE_TEXT = {
    "collection_started": "INFO\tData collection started\n",
    "collection_ended": "INFO\tData collection ended\n",
}


class DecodeError(ValueError):
    """Raised for a host line that does not decode into an event."""

    def __init__(self, message: str, line: str) -> None:
        super().__init__(f"{message}: {line!r}")
        self.line = line


# ---------------------------------------------------------------- commands
def encode_command(command: Command) -> str:
    """Return the exact wire text for ``command``."""
    if isinstance(command, Start):
        return f"{START}\n{command.filename}"
    if isinstance(command, Stop):
        return STOP
    if isinstance(command, ClearLog):
        return CLEAR_LOG
    if isinstance(command, ChooseDirectory):
        return CHOOSE_DIR
    raise TypeError(f"Not a console command: {command!r}")


def parse_command(message: str) -> Command:
    """Host-side inverse of :func:`encode_command`."""
    if "\n" in message and message.startswith(START):
        return Start(filename=message[len(START) + 1 :])
    if message == STOP:
        return Stop()
    if message == CLEAR_LOG:
        return ClearLog()
    if message == CHOOSE_DIR:
        return ChooseDirectory()
    raise DecodeError("Unrecognized command", message)


# ------------------------------------------------------------------ events
def _coerce_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _coerce_channels(raw: Any, line: str) -> tuple[float, ...]:
    if not isinstance(raw, (list, tuple)) or not raw:
        raise DecodeError("Telemetry needs a non-empty channel list", line)
    channels = []
    for value in raw:
        number = _coerce_number(value)
        if number is None:
            raise DecodeError("Non-numeric channel value", line)
        channels.append(number)
    return tuple(channels)


def _parse_int_text(text: str) -> Optional[int]:
    try:
        return int(text)
    except ValueError:
        return None


def _coerce_timestamp_ns(value: Any, line: str) -> int:
    if isinstance(value, bool):
        raise DecodeError("Bad telemetry timestamp", line)
    if isinstance(value, int):
        ts = value
    else:
        ts = _parse_int_text(value) if isinstance(value, str) else None
        if ts is None:
            # Float forms such as "1e3"; exact only up to 2**53.
            number = _coerce_number(value)
            if number is None or not number.is_integer():
                raise DecodeError("Bad telemetry timestamp", line)
            ts = int(number)
    if ts < 0:
        raise DecodeError("Negative telemetry timestamp", line)
    if ts > MAX_TIMESTAMP_NS:
        raise DecodeError("Telemetry timestamp out of range", line)
    return ts


def _decode_telemetry(obj: Mapping[str, Any], line: str) -> Telemetry:
    if "timestamp_ns" in obj:
        timestamp_ns = _coerce_timestamp_ns(obj["timestamp_ns"], line)
    elif "t_s" in obj:
        seconds = _coerce_number(obj["t_s"])
        if seconds is None or seconds < 0:
            raise DecodeError("Bad telemetry time", line)
        timestamp_ns = int(round(seconds * NS_PER_SECOND))
    else:
        raise DecodeError("Telemetry without timestamp", line)
    return Telemetry(timestamp_ns=timestamp_ns, channels=_coerce_channels(obj.get("channels"), line))


def _decode_text_field(obj: Mapping[str, Any], key: str, line: str) -> str:
    value = obj.get(key)
    if not isinstance(value, str):
        raise DecodeError(f"Missing string field {key!r}", line)
    return value


def _decode_json_line(text: str, line: str) -> Event:
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"Bad JSON ({exc.msg})", line) from exc

    if not isinstance(obj, Mapping):
        raise DecodeError("Expected a JSON object", line)

    kind = obj.get("event")
    if kind == "telemetry":
        return _decode_telemetry(obj, line)
    if kind == "log":
        return LogLine(text=_decode_text_field(obj, "text", line))
    if kind == "folder":
        return FolderChosen(path=_decode_text_field(obj, "path", line))
    if kind in _LIFECYCLE_TEXT:
        return LogLine(text=_LIFECYCLE_TEXT[kind])
    raise DecodeError(f"Unknown event {kind!r}", line)


def _decode_csv_line(text: str, line: str) -> Telemetry:
    parts = [part.strip() for part in text.split(",")]
    if len(parts) < 2:
        raise DecodeError("Expected 'timestamp_ns,channel[,channel...]'", line)
    return Telemetry(
        timestamp_ns=_coerce_timestamp_ns(parts[0], line),
        channels=_coerce_channels(parts[1:], line),
    )


def decode_event(line: str) -> Event:
    """
    Decode one host line into an :class:`Event`.

    Raises :class:`DecodeError` for anything that is not a well-formed event;
    the caller decides whether to drop or report it.
    """
    text = line.strip()
    if not text:
        raise DecodeError("Empty line", line)
    if text[0] == "{":
        return _decode_json_line(text, line)
    return _decode_csv_line(text, line)


def encode_event(event: Event) -> str:
    """Host-side encoder producing one JSON line for ``event``."""
    if isinstance(event, Telemetry):
        payload: dict[str, Any] = {
            "event": "telemetry",
            "timestamp_ns": int(event.timestamp_ns),
            "channels": [float(v) for v in event.channels],
        }
    elif isinstance(event, LogLine):
        payload = {"event": "log", "text": event.text}
    elif isinstance(event, FolderChosen):
        payload = {"event": "folder", "path": event.path}
    else:
        raise TypeError(f"Not a host event: {event!r}")
    return json.dumps(payload)


class BridgeProtocol:
    """Typed front of the host channel: commands out, events in."""

    def __init__(self, channel: HostChannel) -> None:
        self._channel = channel

    @property
    def channel(self) -> HostChannel:
        return self._channel

    def send(self, command: Command) -> None:
        """Encode ``command`` and hand it to the host; raises ``HostChannelError``."""
        message = encode_command(command)
        logger.debug("-> host %r", message)
        self._channel.send(message)

    def decode(self, line: str) -> Event:
        return decode_event(line)


__all__ = [
    "BridgeProtocol",
    "DecodeError",
    "decode_event",
    "encode_command",
    "encode_event",
    "parse_command",
]
