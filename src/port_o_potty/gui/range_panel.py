"""Port range editor panel."""
from __future__ import annotations

from typing import Callable, Sequence

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QGridLayout,
    QGroupBox,
    QHeaderView,
    QLabel,
    QPushButton,
    QSpinBox,
    QTableWidget,
    QTableWidgetItem,
)

from ..models import MAX_PORT, MIN_PORT, PortRange, format_ranges_label

Translator = Callable[[str], str]


class RangePanel(QGroupBox):
    """Range inputs, the watched range list and the manual refresh button."""

    add_requested = Signal(int, int)
    remove_requested = Signal(int)
    refresh_requested = Signal()

    def __init__(self, translator: Translator, parent=None):
        super().__init__(translator("ranges_title"), parent)
        self._t = translator
        self._build_ui()
        self.set_busy(False)

    def _build_ui(self) -> None:
        grid = QGridLayout(self)
        grid.setContentsMargins(12, 12, 12, 8)
        grid.setHorizontalSpacing(10)
        grid.setVerticalSpacing(6)

        self._start_input = self._port_spinbox(3000)
        self._end_input = self._port_spinbox(3999)
        grid.addWidget(self._start_input, 0, 0)
        grid.addWidget(QLabel(self._t("range_to")), 0, 1)
        grid.addWidget(self._end_input, 0, 2)

        self._add_button = QPushButton(self._t("add_range"))
        self._refresh_button = QPushButton(self._t("refresh_now"))
        self._add_button.clicked.connect(self._emit_add)
        self._refresh_button.clicked.connect(self.refresh_requested)
        grid.addWidget(self._add_button, 1, 0)
        grid.addWidget(self._refresh_button, 1, 2)

        self._watching_label = QLabel("")
        self._watching_label.setWordWrap(True)
        grid.addWidget(self._watching_label, 2, 0, 1, 3)

        self._empty_label = QLabel(self._t("ranges_empty"))
        grid.addWidget(self._empty_label, 3, 0, 1, 3)

        self._table = QTableWidget(0, 2)
        self._table.setHorizontalHeaderLabels([self._t("table_range"), ""])
        header = self._table.horizontalHeader()
        header.setSectionResizeMode(0, QHeaderView.Stretch)
        header.setSectionResizeMode(1, QHeaderView.ResizeToContents)
        self._table.verticalHeader().setVisible(False)
        self._table.setEditTriggers(QTableWidget.NoEditTriggers)
        self._table.setSelectionMode(QTableWidget.NoSelection)
        grid.addWidget(self._table, 4, 0, 1, 3)

    def _port_spinbox(self, value: int) -> QSpinBox:
        spinbox = QSpinBox()
        spinbox.setRange(MIN_PORT, MAX_PORT)
        spinbox.setValue(value)
        return spinbox

    def _emit_add(self) -> None:
        self.add_requested.emit(self._start_input.value(), self._end_input.value())

    def set_ranges(self, ranges: Sequence[PortRange]) -> None:
        self._watching_label.setText(self._t("watching").format(ranges=format_ranges_label(ranges)))
        self._empty_label.setVisible(not ranges)
        self._table.setVisible(bool(ranges))
        self._table.setRowCount(len(ranges))
        for row, port_range in enumerate(ranges):
            self._table.setItem(row, 0, QTableWidgetItem(f"{port_range.start}–{port_range.end}"))
            button = QPushButton(self._t("remove"))
            button.clicked.connect(lambda _checked=False, index=row: self.remove_requested.emit(index))
            self._table.setCellWidget(row, 1, button)

    def set_busy(self, busy: bool) -> None:
        self._refresh_button.setEnabled(not busy)
        self._refresh_button.setText(self._t("refreshing") if busy else self._t("refresh_now"))
