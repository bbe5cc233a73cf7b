from __future__ import annotations

import pytest

from scissorsconsole.bridge.channel import HostChannelError
from scissorsconsole.bridge.event_reader import LineQueue
from scissorsconsole.bridge.loopback import LoopbackHost
from scissorsconsole.bridge.protocol import decode_event
from scissorsconsole.config import ConsoleConfig
from scissorsconsole.core.controller import ConsoleController
from scissorsconsole.core.models import FolderChosen, LogLine, SessionState, Telemetry


def _host(channel_count: int = 1, **kwargs):
    emitted: list[str] = []
    host = LoopbackHost(channel_count, emit=emitted.append, **kwargs)
    return host, emitted


def test_idle_host_emits_nothing() -> None:
    host, emitted = _host()

    assert host.tick(5) == 0
    assert emitted == []


def test_start_tick_stop() -> None:
    host, emitted = _host(channel_count=3, sample_period_ns=1_000, boot_ns=0)

    host.send("start\nrun.csv")
    assert host.running
    assert host.filename == "run.csv"
    assert host.tick(2) == 2
    host.send("stop")

    events = [decode_event(line) for line in emitted]
    assert events[0] == LogLine("INFO\tData collection started\n")
    assert isinstance(events[1], Telemetry) and events[1].timestamp_ns == 1_000
    assert isinstance(events[2], Telemetry) and events[2].timestamp_ns == 2_000
    assert len(events[1].channels) == 3
    assert events[3] == LogLine("INFO\tData collection ended\n")
    assert host.tick() == 0


def test_force_values_stay_in_range() -> None:
    host, emitted = _host(channel_count=2)
    host.send("start\nrun.csv")
    host.tick(50)

    for line in emitted[1:]:
        event = decode_event(line)
        assert all(3.0 <= value <= 7.0 for value in event.channels)


def test_host_reports_problems_in_its_log() -> None:
    host, emitted = _host()

    host.send("start\n")
    host.send("start\na.csv")
    host.send("start\nb.csv")
    host.send("reboot")

    assert host.log == [
        "ERROR\tNo file name given, not starting\n",
        "INFO\tData collection started\n",
        "WARN\tAlready collecting into a.csv\n",
        "ERROR\tUnrecognized message: reboot\n",
    ]
    host.send("clear_log")
    assert host.log == []
    assert len(emitted) == 4


def test_choose_dir_answers_with_folder() -> None:
    host, emitted = _host(folder="/data/runs")

    host.send("choose_dir")

    assert decode_event(emitted[-1]) == FolderChosen("/data/runs")


def test_closed_host_refuses_commands() -> None:
    host, _ = _host()
    host.close()

    with pytest.raises(HostChannelError):
        host.send("stop")


def test_controller_against_loopback_host() -> None:
    lines = LineQueue()
    host = LoopbackHost(2, emit=lines.put, sample_period_ns=500_000_000)
    controller = ConsoleController(host, config=ConsoleConfig(channel_count=2, max_points=4))

    controller.request_start("session.csv")
    host.tick(6)
    lines.drain(controller.handle_line)

    assert controller.state is SessionState.STREAMING
    assert [s.timestamp for s in controller.buffer.snapshot()] == [1.0, 1.5, 2.0, 2.5]
    assert controller.log_text == "INFO\tData collection started\n"

    controller.request_stop()
    lines.drain(controller.handle_line)
    assert controller.log_text.endswith("INFO\tData collection ended\n")
