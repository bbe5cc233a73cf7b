"""Outbound transports that carry encoded commands to the host process."""

from __future__ import annotations

import threading
from typing import Callable, Protocol, TextIO

__all__ = [
    "HostChannel",
    "HostChannelError",
    "CallbackChannel",
    "StreamChannel",
    "FRAME_TERMINATOR",
]

# Commands may span lines (``start\n<file>``), so stream frames end with NUL.
FRAME_TERMINATOR = "\0"


class HostChannelError(RuntimeError):
    """The host channel is closed or refused a message."""


class HostChannel(Protocol):
    """Fire-and-forget send primitive to the host."""

    def send(self, message: str) -> None:  # pragma: no cover - protocol
        ...


class CallbackChannel:
    """
    Wrap the host's own send function (for example a webview ``tether`` hook).

    Any exception raised by the callback is reported as
    :class:`HostChannelError`; after :meth:`close` every send fails.
    """

    def __init__(self, send_fn: Callable[[str], None]) -> None:
        self._send_fn = send_fn
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def send(self, message: str) -> None:
        if self._closed:
            raise HostChannelError("host channel is closed")
        try:
            self._send_fn(message)
        except Exception as exc:
            raise HostChannelError(f"host send failed: {exc}") from exc


class StreamChannel:
    """Write NUL-terminated command frames to a text stream (e.g. ``sys.stdout``)."""

    def __init__(self, stream: TextIO, *, terminator: str = FRAME_TERMINATOR) -> None:
        self._stream = stream
        self._terminator = terminator
        self._lock = threading.Lock()

    def send(self, message: str) -> None:
        with self._lock:
            try:
                self._stream.write(message + self._terminator)
                self._stream.flush()
            except (OSError, ValueError) as exc:
                raise HostChannelError(f"host stream unavailable: {exc}") from exc
