from __future__ import annotations

"""
Background ingestion of host lines and the single queue that serializes them.

Host output may be produced on any thread (a pipe reader, a socket callback),
but the console controller is single-threaded. Producers only ever ``put``
raw lines into a :class:`LineQueue`; the controller's thread drains it, so
every event is applied in arrival order and one at a time.
"""

import logging
import queue
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 10_000


class LineQueue:
    """Thread-safe FIFO of raw host lines."""

    def __init__(self, maxsize: int = DEFAULT_QUEUE_SIZE) -> None:
        self._queue: queue.Queue[str] = queue.Queue(maxsize=maxsize)

    def put(self, line: str, *, timeout: Optional[float] = None) -> None:
        """Enqueue ``line``; blocks while the consumer catches up."""
        self._queue.put(line, timeout=timeout)

    def __len__(self) -> int:
        return self._queue.qsize()

    def drain(self, handler: Callable[[str], object], max_items: Optional[int] = None) -> int:
        """
        Pass queued lines to ``handler`` in arrival order.

        Call this from the controller's thread only. Returns how many lines
        were handled; stops early after ``max_items`` when given.
        """
        handled = 0
        while max_items is None or handled < max_items:
            try:
                line = self._queue.get_nowait()
            except queue.Empty:
                break
            handled += 1
            try:
                handler(line)
            except Exception:
                logger.exception("Failed to handle host line: %r", line)
        return handled


def reader_loop(
    lines: Iterable[str],
    sink: Callable[[str], None],
    *,
    stop_event: Optional[threading.Event] = None,
) -> None:
    """Forward non-blank lines from ``lines`` to ``sink`` until exhausted or stopped."""
    for raw_line in lines:
        if stop_event is not None and stop_event.is_set():
            break

        line = raw_line.strip()
        if not line:
            continue

        try:
            sink(line)
        except Exception:
            logger.exception("Failed to forward host line: %r", line)


@dataclass
class ReaderHandle:
    thread: threading.Thread
    stop_event: threading.Event
    lines: LineQueue

    def stop(self, *, join: bool = False, timeout: Optional[float] = None) -> None:
        self.stop_event.set()
        if join:
            self.thread.join(timeout)

    def is_alive(self) -> bool:
        return self.thread.is_alive()


def start_reader(
    lines: Iterable[str],
    line_queue: Optional[LineQueue] = None,
    *,
    thread_name: Optional[str] = None,
) -> ReaderHandle:
    """Start a daemon thread that copies ``lines`` into ``line_queue``."""
    target_queue = line_queue or LineQueue()
    stop_event = threading.Event()

    def _target() -> None:
        reader_loop(lines, target_queue.put, stop_event=stop_event)
        logger.debug("Host line reader finished")

    thread = threading.Thread(
        target=_target,
        name=thread_name or "ScissorsHostReader",
        daemon=True,
    )
    thread.start()
    return ReaderHandle(thread=thread, stop_event=stop_event, lines=target_queue)


__all__ = [
    "DEFAULT_QUEUE_SIZE",
    "LineQueue",
    "ReaderHandle",
    "reader_loop",
    "start_reader",
]
