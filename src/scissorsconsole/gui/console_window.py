"""Main window: live force/position chart, status log, and acquisition controls."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import pyqtgraph as pg
from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QCloseEvent, QTextCursor
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from ..core.controller import ConsoleController, EmptyFilenameError

logger = logging.getLogger(__name__)

_PENS = ("r", "g", "b")


class ConsoleWindow(QMainWindow):
    """
    Qt implementation of the controller's presentation interface.

    Curves are redrawn from the controller's sample window
    (:meth:`SampleBuffer.as_arrays`), which already holds the last
    ``max_points`` samples.

    In the three-channel variant the third trace (encoder position) is drawn
    against a right-hand axis.
    """

    def __init__(self, controller: ConsoleController, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Scissors Console")
        self.setMinimumSize(800, 600)

        self._controller = controller
        cfg = controller.config
        self._labels = cfg.labels()
        self._right_view: pg.ViewBox | None = None

        self._build_ui()
        controller.attach_presentation(self)
        self.render_folder_path(controller.folder_path)

    # ------------------------------------------------------------------ layout
    def _build_ui(self) -> None:
        container = QWidget(self)
        layout = QVBoxLayout(container)

        folder_row = QHBoxLayout()
        folder_row.addWidget(QLabel("Folder:"))
        self._folder_edit = QLineEdit(self)
        self._folder_edit.setReadOnly(True)
        folder_row.addWidget(self._folder_edit, stretch=1)
        self._choose_button = QPushButton("Choose Directory", self)
        folder_row.addWidget(self._choose_button)
        layout.addLayout(folder_row)

        run_row = QHBoxLayout()
        run_row.addWidget(QLabel("File name:"))
        self._filename_edit = QLineEdit(self)
        run_row.addWidget(self._filename_edit, stretch=1)
        self._start_button = QPushButton("Start", self)
        self._stop_button = QPushButton("Stop", self)
        self._clear_button = QPushButton("Clear Log", self)
        for button in (self._start_button, self._stop_button, self._clear_button):
            run_row.addWidget(button)
        layout.addLayout(run_row)

        splitter = QSplitter(Qt.Vertical, self)
        splitter.addWidget(self._build_plot())

        self._log_view = QPlainTextEdit(self)
        self._log_view.setReadOnly(True)
        self._log_view.setLineWrapMode(QPlainTextEdit.NoWrap)
        splitter.addWidget(self._log_view)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 1)
        layout.addWidget(splitter, stretch=1)

        self.setCentralWidget(container)

        self._choose_button.clicked.connect(self._on_choose_clicked)
        self._start_button.clicked.connect(self._on_start_clicked)
        self._stop_button.clicked.connect(self._on_stop_clicked)
        self._clear_button.clicked.connect(self._on_clear_clicked)

    def _build_plot(self) -> pg.PlotWidget:
        self._plot_widget = pg.PlotWidget(self)
        plot_item = self._plot_widget.getPlotItem()
        plot_item.addLegend()
        plot_item.showGrid(x=True, y=True, alpha=0.3)
        plot_item.setLabel("bottom", "Time", units="s")
        plot_item.setLabel("left", "Force [V]")
        plot_item.setMenuEnabled(False)

        self._curves: list[pg.PlotDataItem] = []
        for idx, label in enumerate(self._labels):
            pen = pg.mkPen(_PENS[idx % len(_PENS)], width=1.5)
            if idx == 2:
                curve = self._make_right_axis_curve(plot_item, label, pen)
            else:
                curve = plot_item.plot([], [], pen=pen, name=label)
            self._curves.append(curve)
        return self._plot_widget

    def _make_right_axis_curve(self, plot_item: pg.PlotItem, label: str, pen) -> pg.PlotDataItem:
        view = pg.ViewBox()
        plot_item.showAxis("right")
        plot_item.setLabel("right", "Position [counts]")
        plot_item.scene().addItem(view)
        plot_item.getAxis("right").linkToView(view)
        view.setXLink(plot_item)

        def _sync_geometry() -> None:
            view.setGeometry(plot_item.vb.sceneBoundingRect())
            view.linkedViewChanged(plot_item.vb, view.XAxis)

        plot_item.vb.sigResized.connect(_sync_geometry)
        self._right_view = view

        curve = pg.PlotDataItem([], [], pen=pen, name=label)
        view.addItem(curve)
        if plot_item.legend is not None:
            plot_item.legend.addItem(curve, label)
        return curve

    # ------------------------------------------------------------ presentation
    def render_append(self, t: float, channels: Sequence[float]) -> None:
        self._redraw()

    def render_clear(self) -> None:
        self._redraw()

    def _redraw(self) -> None:
        times, values = self._controller.buffer.as_arrays()
        for idx, curve in enumerate(self._curves):
            curve.setData(times, values[:, idx])

    def render_log_append(self, text: str) -> None:
        self._log_view.moveCursor(QTextCursor.End)
        self._log_view.insertPlainText(text)
        self._log_view.moveCursor(QTextCursor.End)

    def render_log_clear(self) -> None:
        self._log_view.clear()

    def render_folder_path(self, path: str) -> None:
        self._folder_edit.setText(path)

    # ------------------------------------------------------------------- slots
    @Slot()
    def _on_choose_clicked(self) -> None:
        self._controller.request_choose_directory()

    @Slot()
    def _on_start_clicked(self) -> None:
        try:
            self._controller.request_start(self._filename_edit.text())
        except EmptyFilenameError as exc:
            QMessageBox.warning(self, "Scissors Console", str(exc))

    @Slot()
    def _on_stop_clicked(self) -> None:
        self._controller.request_stop()

    @Slot()
    def _on_clear_clicked(self) -> None:
        self._controller.request_clear()

    def closeEvent(self, event: QCloseEvent) -> None:
        try:
            self._controller.request_stop()
        except Exception:  # pragma: no cover - best-effort shutdown
            logger.exception("Failed to send stop on close")
        super().closeEvent(event)


__all__ = ["ConsoleWindow"]
