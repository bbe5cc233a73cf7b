from __future__ import annotations

import io
import time

from scissorsconsole.bridge.event_reader import LineQueue, reader_loop, start_reader


def test_reader_loop_skips_blank_lines() -> None:
    seen: list[str] = []
    reader_loop(["  1000,0.5\n", "\n", "   ", "2000,0.6"], seen.append)

    assert seen == ["1000,0.5", "2000,0.6"]


def test_reader_loop_keeps_going_after_sink_failure() -> None:
    seen: list[str] = []

    def sink(line: str) -> None:
        if line == "boom":
            raise RuntimeError("sink failed")
        seen.append(line)

    reader_loop(["a", "boom", "b"], sink)

    assert seen == ["a", "b"]


def test_drain_preserves_arrival_order_and_limit() -> None:
    lines = LineQueue()
    for item in ("one", "two", "three"):
        lines.put(item)

    handled: list[str] = []
    assert lines.drain(handled.append, max_items=2) == 2
    assert handled == ["one", "two"]
    assert len(lines) == 1

    assert lines.drain(handled.append) == 1
    assert handled == ["one", "two", "three"]
    assert lines.drain(handled.append) == 0


def test_drain_survives_handler_errors() -> None:
    lines = LineQueue()
    lines.put("bad")
    lines.put("good")
    handled: list[str] = []

    def handler(line: str) -> None:
        if line == "bad":
            raise ValueError(line)
        handled.append(line)

    assert lines.drain(handler) == 2
    assert handled == ["good"]


def test_start_reader_background_thread() -> None:
    stream = io.StringIO("1000,0.5\n2000,0.6\n")
    handle = start_reader(stream)

    # Allow background thread to process both lines
    timeout = time.time() + 1.0
    while time.time() < timeout:
        if len(handle.lines) == 2:
            break
        time.sleep(0.01)

    handle.stop(join=True, timeout=1.0)

    handled: list[str] = []
    handle.lines.drain(handled.append)
    assert handled == ["1000,0.5", "2000,0.6"]
    assert not handle.is_alive()


def test_reader_thread_is_a_daemon_and_stop_does_not_block() -> None:
    class _BlockedStream:
        def __iter__(self):
            time.sleep(10)
            return iter(())

    handle = start_reader(_BlockedStream())

    started = time.time()
    handle.stop(join=True, timeout=0.05)

    assert handle.thread.daemon
    assert time.time() - started < 1.0
