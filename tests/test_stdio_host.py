from __future__ import annotations

import io
import time

from PySide6.QtCore import QCoreApplication

from scissorsconsole.config import ConsoleConfig
from scissorsconsole.core.controller import ConsoleController
from scissorsconsole.core.models import SessionState
from scissorsconsole.gui.application import StdioHostDriver


class _NullChannel:
    def send(self, message: str) -> None:
        return


def _app() -> QCoreApplication:
    return QCoreApplication.instance() or QCoreApplication([])


def _drain_until(driver: StdioHostDriver, done, timeout: float = 1.0) -> None:
    deadline = time.time() + timeout
    while time.time() < deadline:
        driver.drain_once()
        if done():
            return
        time.sleep(0.01)


def test_host_lines_reach_controller_then_eof_ends_session() -> None:
    controller = ConsoleController(_NullChannel(), config=ConsoleConfig(channel_count=1))
    driver = StdioHostDriver(_app(), controller, io.StringIO("1000,0.5\n2000,0.6\n"))
    driver.start()

    _drain_until(driver, lambda: "Host stream closed" in controller.log_text)
    driver.stop()

    assert [s.channels[0] for s in controller.buffer.snapshot()] == [0.5, 0.6]
    assert controller.state is SessionState.IDLE
    assert controller.log_text.count("Host connection lost") == 1


def test_stop_does_not_wait_for_a_blocked_host() -> None:
    class _SilentHost:
        def __iter__(self):
            time.sleep(10)
            return iter(())

    controller = ConsoleController(_NullChannel())
    driver = StdioHostDriver(_app(), controller, _SilentHost())
    driver.start()

    started = time.time()
    driver.stop()
    driver.drain_once()

    assert time.time() - started < 1.0
    assert "Host connection lost" not in controller.log_text
