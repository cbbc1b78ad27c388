"""PySide6 main window for the Port-o-Potty listener monitor."""
from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QEvent, QTimer
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QStyle,
    QVBoxLayout,
    QWidget,
)

from ..config import AppSettings, get_settings
from ..error_codes import ERROR_RANGES_NOT_SAVED, build_error
from ..i18n import detect_language, format_error_record, translate
from ..kill_coordinator import KillFn
from ..models import ErrorRecord, PortRange
from ..monitor import ListenerMonitor
from ..polling_scheduler import STATE_ACTIVE
from ..range_store import RangePersistenceError, RangeStore, YamlRangeRepository
from ..scan_pipeline import ScanPortsFn
from ..system_probe import kill_pid as system_kill_pid
from ..system_probe import scan_ports as system_scan_ports
from .focus_watcher import FocusWatcher
from .listener_table import ListenerTable
from .range_panel import RangePanel
from .tray_icon import AppTray

LOGGER = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Primary top-level window."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        app_icon: QIcon | None = None,
        scan_ports: ScanPortsFn = system_scan_ports,
        kill_pid: KillFn = system_kill_pid,
        range_store: RangeStore | None = None,
    ) -> None:
        super().__init__()
        self._settings = settings or get_settings()
        self._language = detect_language()
        self.setWindowTitle(self._t("window_title"))
        if app_icon is not None and not app_icon.isNull():
            self.setWindowIcon(app_icon)
        self.resize(900, 560)
        self._quitting = False
        store = range_store or RangeStore(
            YamlRangeRepository(self._settings.ranges.storage_file),
            self._settings.ranges.default_ranges,
        )
        self._monitor = ListenerMonitor(
            self._settings,
            store,
            scan_ports=scan_ports,
            kill_pid=kill_pid,
            confirm=self._confirm,
            confirm_template=self._t("kill_confirm_body"),
            parent=self,
        )
        self._range_panel = RangePanel(self._t, self)
        self._listener_table = ListenerTable(self._t, self)
        tray_icon = self.windowIcon()
        if tray_icon.isNull():
            tray_icon = self.style().standardIcon(QStyle.StandardPixmap.SP_ComputerIcon)
        self._tray = AppTray(self._t, tray_icon, self)
        self._build_ui()
        self._connect_signals()
        self._focus_watcher = FocusWatcher(self, self)
        self._focus_watcher.focus_changed.connect(self._monitor.scheduler.set_focused)
        self._monitor.start(self._focus_watcher.is_focused())
        self._range_panel.set_ranges(store.ranges())
        self._tray.show()

    def _t(self, key: str) -> str:
        return translate(key, self._language)

    def _build_ui(self) -> None:
        central = QWidget()
        layout = QVBoxLayout(central)

        header = QHBoxLayout()
        titles = QVBoxLayout()
        title = QLabel(self._t("window_title"))
        font = title.font()
        font.setBold(True)
        font.setPointSize(font.pointSize() + 4)
        title.setFont(font)
        titles.addWidget(title)
        titles.addWidget(QLabel(self._t("subtitle")))
        header.addLayout(titles)
        header.addStretch()
        self._state_label = QLabel("")
        header.addWidget(self._state_label)
        layout.addLayout(header)

        self._error_label = QLabel("")
        self._error_label.setWordWrap(True)
        self._error_label.setStyleSheet("color: #b00020;")
        self._error_label.setVisible(False)
        layout.addWidget(self._error_label)

        body = QHBoxLayout()
        body.addWidget(self._range_panel, 1)
        body.addWidget(self._listener_table, 2)
        layout.addLayout(body)
        self.setCentralWidget(central)

    def _connect_signals(self) -> None:
        store = self._monitor.listener_store
        store.listeners_changed.connect(self._render_listeners)
        store.sort_changed.connect(self._render_listeners)
        store.busy_changed.connect(self._on_busy_changed)
        store.error_changed.connect(self._on_error_changed)
        self._monitor.scheduler.state_changed.connect(self._on_state_changed)
        self._monitor.range_store.ranges_changed.connect(self._range_panel.set_ranges)
        self._range_panel.add_requested.connect(self._on_add_range)
        self._range_panel.remove_requested.connect(self._on_remove_range)
        self._range_panel.refresh_requested.connect(self._monitor.scheduler.refresh_now)
        self._listener_table.sort_requested.connect(store.toggle_sort)
        self._listener_table.kill_requested.connect(self._monitor.kill)
        self._tray.show_requested.connect(self.show_from_tray)
        self._tray.quit_requested.connect(self.quit_app)

    def _render_listeners(self) -> None:
        store = self._monitor.listener_store
        self._listener_table.set_listeners(
            store.sorted_listeners(), store.sort_key, store.sort_direction
        )

    def _on_busy_changed(self, busy: bool) -> None:
        self._range_panel.set_busy(busy)
        self._listener_table.set_busy(busy)

    def _on_error_changed(self, error: ErrorRecord | None) -> None:
        if error is None:
            self._error_label.clear()
            self._error_label.setVisible(False)
            return
        self._error_label.setText(format_error_record(error, self._language))
        self._error_label.setVisible(True)

    def _on_state_changed(self, state: str) -> None:
        label = self._t("state_active") if state == STATE_ACTIVE else self._t("state_paused")
        interval = self._t("refresh_interval").format(
            seconds=int(self._monitor.scheduler.interval_seconds)
        )
        self._state_label.setText(f"{label} • {interval}")

    def _on_add_range(self, start: int, end: int) -> None:
        self._mutate_ranges(lambda: self._monitor.range_store.add(PortRange(start, end)))

    def _on_remove_range(self, index: int) -> None:
        self._mutate_ranges(lambda: self._monitor.range_store.remove(index))

    def _mutate_ranges(self, mutation: Callable[[], object]) -> None:
        try:
            mutation()
        except RangePersistenceError as exc:
            LOGGER.exception("Failed to persist port ranges")
            error = build_error(ERROR_RANGES_NOT_SAVED, detail=str(exc))
            self._monitor.listener_store.set_error(error)
            QMessageBox.critical(
                self,
                self._t("config_error_title"),
                format_error_record(error, self._language),
            )

    def _confirm(self, message: str) -> bool:
        answer = QMessageBox.question(
            self,
            self._t("kill_confirm_title"),
            message,
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No,
        )
        return answer == QMessageBox.Yes

    def show_from_tray(self) -> None:
        self.showNormal()
        self.raise_()
        self.activateWindow()

    def quit_app(self) -> None:
        self._quitting = True
        self.close()

    def changeEvent(self, event):  # type: ignore[override]
        super().changeEvent(event)
        if (
            event.type() == QEvent.WindowStateChange
            and self.isMinimized()
            and self._tray.is_available()
        ):
            # Defer so the minimize completes before the window is hidden.
            QTimer.singleShot(0, self.hide)

    def closeEvent(self, event):  # type: ignore[override]
        if not self._quitting and self._tray.is_available():
            LOGGER.debug("Window closed; staying in the system tray")
            event.ignore()
            self.hide()
            return
        self._monitor.shutdown()
        self._tray.hide()
        super().closeEvent(event)
        QApplication.quit()
