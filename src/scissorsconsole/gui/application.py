"""Qt application entry point for the Scissors Console desktop shell.

This module parses the command line, loads :class:`ConsoleConfig`, wires the
:class:`ConsoleController` to a host (the real one over stdin/stdout, or the
in-process loopback host with ``--demo``), builds the
:class:`~scissorsconsole.gui.console_window.ConsoleWindow` and runs the Qt
event loop.
"""

from __future__ import annotations

import argparse
import logging
import sys
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Optional, Tuple

import pyqtgraph as pg
from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication

from ..bridge import LineQueue, LoopbackHost, ReaderHandle, StreamChannel, start_reader
from ..config import ConsoleConfig, default_config_path, load_config
from ..core.controller import ConsoleController
from ..core.log_handler import OperatorLogHandler
from ..core.timebase import NS_PER_SECOND
from ..tools.debug import LOGGER_NAME, configure_logging
from .console_window import ConsoleWindow

logger = logging.getLogger(__name__)

_DRAIN_INTERVAL_MS = 20


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scissors Console")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML config file (default: $SCISSORS_CONSOLE_CONFIG)",
    )
    parser.add_argument(
        "--channels",
        type=int,
        choices=(1, 2, 3),
        default=None,
        help="Channels per sample for this rig variant (overrides config)",
    )
    parser.add_argument(
        "--max-points",
        type=int,
        default=None,
        help="Samples kept in the live chart (overrides config)",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Run against a synthetic in-process host instead of stdin/stdout",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="Directory for scissors_console.log (default: $SCISSORS_LOG_DIR or ./logs)",
    )
    return parser


def _parse_cli_args(argv: list[str]) -> tuple[argparse.Namespace, list[str]]:
    parser = _build_arg_parser()
    args, qt_args = parser.parse_known_args(argv[1:])
    qt_argv = [argv[0], *qt_args]
    return args, qt_argv


def resolve_config(args: argparse.Namespace) -> ConsoleConfig:
    """Load the YAML config and apply command-line overrides."""
    path = Path(args.config).expanduser() if args.config else default_config_path()
    cfg = load_config(path)
    if args.channels is not None:
        cfg = replace(cfg, channel_count=args.channels)
    if args.max_points is not None:
        cfg = replace(cfg, max_points=args.max_points)
    if not cfg.default_folder:
        cfg = replace(cfg, default_folder=tempfile.gettempdir())
    return cfg.sanitized()


class _QueueDrain:
    """Timer on the GUI thread that feeds queued host lines to the controller."""

    def __init__(self, app: QApplication, controller: ConsoleController, lines: LineQueue) -> None:
        self._controller = controller
        self._lines = lines
        self._drain_timer = QTimer(app)
        self._drain_timer.setInterval(_DRAIN_INTERVAL_MS)
        self._drain_timer.timeout.connect(self.drain_once)

    def start(self) -> None:
        self._drain_timer.start()

    def stop(self) -> None:
        self._drain_timer.stop()

    def drain_once(self) -> None:
        self._lines.drain(self._controller.handle_line)


class _DemoHostDriver(_QueueDrain):
    """Advances the loopback host on a timer and drains its output."""

    def __init__(self, app: QApplication, controller: ConsoleController, host: LoopbackHost, lines: LineQueue, rate_hz: float) -> None:
        super().__init__(app, controller, lines)
        self._host = host
        self._tick_timer = QTimer(app)
        self._tick_timer.setInterval(max(1, int(round(1000.0 / rate_hz))))
        self._tick_timer.timeout.connect(self._on_tick)

    def start(self) -> None:
        self._tick_timer.start()
        super().start()

    def stop(self) -> None:
        self._tick_timer.stop()
        super().stop()

    def _on_tick(self) -> None:
        self._host.tick(1)


class StdioHostDriver(_QueueDrain):
    """
    Reads host lines from ``stream`` on a daemon thread and drains them on the GUI thread.

    When the host closes its end of the pipe the remaining lines are applied
    and the controller is told the host is gone. The reader thread is a
    daemon, so a read still blocked at shutdown does not keep the process
    alive.
    """

    def __init__(self, app: QApplication, controller: ConsoleController, stream: Iterable[str]) -> None:
        super().__init__(app, controller, LineQueue())
        self._stream = stream
        self._reader: Optional[ReaderHandle] = None

    def start(self) -> None:
        self._reader = start_reader(self._stream, self._lines)
        super().start()

    def stop(self) -> None:
        super().stop()
        if self._reader is not None:
            self._reader.stop()
            self._reader = None

    def drain_once(self) -> None:
        super().drain_once()
        reader = self._reader
        if reader is not None and not reader.is_alive() and len(self._lines) == 0:
            self._reader = None
            super().stop()
            self._controller.on_host_lost("Host stream closed")


def create_app(
    argv: list[str] | None = None,
    *,
    config: ConsoleConfig | None = None,
    demo: bool = False,
) -> Tuple[QApplication, ConsoleWindow]:
    """
    Create the QApplication and the console window, wired to a host.

    Returns
    -------
    app:
        The QApplication instance (owned by caller).
    window:
        The console window; its controller is already connected.
    """
    qt_args = argv if argv is not None else sys.argv
    app = QApplication.instance() or QApplication(qt_args)
    pg.setConfigOptions(antialias=True)
    cfg = (config or ConsoleConfig()).sanitized()

    if demo:
        lines = LineQueue()
        host = LoopbackHost(
            cfg.channel_count,
            emit=lines.put,
            folder=cfg.default_folder,
            sample_period_ns=int(NS_PER_SECOND / cfg.demo_rate_hz),
        )
        controller = ConsoleController(host, config=cfg)
        driver: _QueueDrain = _DemoHostDriver(app, controller, host, lines, cfg.demo_rate_hz)
    else:
        controller = ConsoleController(StreamChannel(sys.stdout), config=cfg)
        driver = StdioHostDriver(app, controller, sys.stdin)

    window = ConsoleWindow(controller)
    # Keep a reference so the timers are not collected with the driver.
    setattr(window, "_host_driver", driver)
    app.aboutToQuit.connect(driver.stop)
    driver.start()

    logging.getLogger(LOGGER_NAME).addHandler(OperatorLogHandler(controller))
    logger.debug("Console ready (%d channel(s), %d points, demo=%s)", cfg.channel_count, cfg.max_points, demo)
    return app, window


def main(argv: list[str] | None = None) -> None:
    raw_argv = argv if argv is not None else sys.argv
    args, qt_argv = _parse_cli_args(raw_argv)
    configure_logging(Path(args.log_dir).expanduser() if args.log_dir else None)
    cfg = resolve_config(args)
    app, win = create_app(qt_argv, config=cfg, demo=bool(args.demo))
    win.show()
    raise SystemExit(app.exec())


if __name__ == "__main__":
    main()
