"""Listener table with sortable headers and per-row kill buttons."""
from __future__ import annotations

from typing import Callable, Sequence

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QGroupBox,
    QHeaderView,
    QLabel,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
)

from ..models import EMPTY_PLACEHOLDER, Listener, SortDirection, SortKey, format_uptime
from ..sorter import sort_indicator

Translator = Callable[[str], str]

PORT_COLUMN_INDEX = 0
PROCESS_COLUMN_INDEX = 1
PID_COLUMN_INDEX = 2
STARTED_COLUMN_INDEX = 3
KILL_COLUMN_INDEX = 4

COLUMN_SORT_KEYS = {
    PORT_COLUMN_INDEX: SortKey.PORT,
    PROCESS_COLUMN_INDEX: SortKey.PROCESS_NAME,
    PID_COLUMN_INDEX: SortKey.PID,
    STARTED_COLUMN_INDEX: SortKey.STARTED_SECONDS_AGO,
}
COLUMN_LABEL_KEYS = {
    PORT_COLUMN_INDEX: "table_port",
    PROCESS_COLUMN_INDEX: "table_process",
    PID_COLUMN_INDEX: "table_pid",
    STARTED_COLUMN_INDEX: "table_started",
}


class ListenerTable(QGroupBox):
    sort_requested = Signal(object)
    kill_requested = Signal(int)

    def __init__(self, translator: Translator, parent=None):
        super().__init__(translator("listeners_title"), parent)
        self._t = translator
        self._busy = False
        layout = QVBoxLayout(self)
        self._empty_label = QLabel("")
        layout.addWidget(self._empty_label)
        layout.addWidget(self._create_table())
        self.set_listeners([], SortKey.PORT, SortDirection.ASCENDING)

    def _create_table(self) -> QTableWidget:
        self._table = QTableWidget(0, 5)
        header = self._table.horizontalHeader()
        header.setSectionsClickable(True)
        header.sectionClicked.connect(self._handle_sort_request)
        header.setSectionResizeMode(PROCESS_COLUMN_INDEX, QHeaderView.Stretch)
        for index in (PORT_COLUMN_INDEX, PID_COLUMN_INDEX, STARTED_COLUMN_INDEX, KILL_COLUMN_INDEX):
            header.setSectionResizeMode(index, QHeaderView.ResizeToContents)
        self._table.verticalHeader().setVisible(False)
        self._table.setSortingEnabled(False)
        self._table.setWordWrap(False)
        self._table.setSelectionBehavior(QTableWidget.SelectRows)
        self._table.setEditTriggers(QTableWidget.NoEditTriggers)
        return self._table

    def set_busy(self, busy: bool) -> None:
        self._busy = busy
        self._update_empty_label()

    def set_listeners(
        self,
        listeners: Sequence[Listener],
        sort_key: SortKey,
        direction: SortDirection,
    ) -> None:
        self._update_headers(sort_key, direction)
        self._table.setRowCount(len(listeners))
        for row, listener in enumerate(listeners):
            self._populate_row(row, listener)
        self._table.setVisible(bool(listeners))
        self._update_empty_label()

    def _populate_row(self, row: int, listener: Listener) -> None:
        values = {
            PORT_COLUMN_INDEX: str(listener.port),
            PROCESS_COLUMN_INDEX: listener.process_name or EMPTY_PLACEHOLDER,
            PID_COLUMN_INDEX: str(listener.pid),
            STARTED_COLUMN_INDEX: format_uptime(listener.started_seconds_ago),
        }
        for column, text in values.items():
            item = QTableWidgetItem(text)
            if column != PROCESS_COLUMN_INDEX:
                item.setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
            self._table.setItem(row, column, item)
        button = QPushButton(self._t("kill"))
        button.clicked.connect(lambda _checked=False, pid=listener.pid: self.kill_requested.emit(pid))
        self._table.setCellWidget(row, KILL_COLUMN_INDEX, button)

    def _update_headers(self, sort_key: SortKey, direction: SortDirection) -> None:
        labels = []
        for column, label_key in COLUMN_LABEL_KEYS.items():
            indicator = sort_indicator(COLUMN_SORT_KEYS[column], sort_key, direction)
            labels.append(f"{self._t(label_key)} {indicator}")
        labels.append("")
        self._table.setHorizontalHeaderLabels(labels)

    def _update_empty_label(self) -> None:
        empty = self._table.rowCount() == 0
        text = self._t("listeners_empty")
        if self._busy:
            text = f"{text} {self._t('listeners_scanning')}"
        self._empty_label.setText(text)
        self._empty_label.setVisible(empty)

    def _handle_sort_request(self, column: int) -> None:
        key = COLUMN_SORT_KEYS.get(column)
        if key is not None:
            self.sort_requested.emit(key)
