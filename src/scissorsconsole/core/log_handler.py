"""Forward Python log records into the operator-visible status log."""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional, Protocol

from ..tools.debug import debug_enabled


class LogSink(Protocol):
    def append_log_record(self, text: str) -> None:  # pragma: no cover - protocol
        ...


class OperatorLogHandler(logging.Handler):
    """
    Write records as ``LEVEL<TAB>HH:MM:SS<TAB>message`` lines into the console log.

    Defaults to DEBUG when ``SCISSORS_DEBUG`` is on and WARNING otherwise.
    Records the controller has already reported itself (``operator_reported``)
    are skipped, as is anything logged while a record is being forwarded.
    Only records from the thread that created the handler (the controller's
    thread) are forwarded; others still reach the file log.
    """

    def __init__(self, sink: LogSink, level: Optional[int] = None) -> None:
        if level is None:
            level = logging.DEBUG if debug_enabled() else logging.WARNING
        super().__init__(level)
        self._sink = sink
        self._local = threading.local()
        self._owner_thread = threading.get_ident()

    def format_line(self, record: logging.LogRecord) -> str:
        stamp = time.strftime("%H:%M:%S", time.localtime(record.created))
        return f"{record.levelname}\t{stamp}\t{record.getMessage()}\n"

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(record, "operator_reported", False):
            return
        if record.thread != self._owner_thread:
            return
        if getattr(self._local, "busy", False):
            return
        self._local.busy = True
        try:
            self._sink.append_log_record(self.format_line(record))
        except Exception:
            self.handleError(record)
        finally:
            self._local.busy = False


__all__ = ["LogSink", "OperatorLogHandler"]
