"""Smoke tests for the table and range widgets on the offscreen platform."""
from __future__ import annotations

from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QSystemTrayIcon

from port_o_potty.gui.listener_table import (
    KILL_COLUMN_INDEX,
    PORT_COLUMN_INDEX,
    PROCESS_COLUMN_INDEX,
    STARTED_COLUMN_INDEX,
    ListenerTable,
)
from port_o_potty.gui.range_panel import RangePanel
from port_o_potty.gui.tray_icon import AppTray
from port_o_potty.i18n import translate
from port_o_potty.models import Listener, PortRange, SortDirection, SortKey


def _t(key: str) -> str:
    return translate(key, "en")


def test_listener_table_renders_rows_and_indicators(qapp):
    table = ListenerTable(_t)
    listeners = [
        Listener(port=3000, pid=12, process_name=None, started_seconds_ago=None),
        Listener(port=8080, pid=34, process_name="python", started_seconds_ago=7200),
    ]

    table.set_listeners(listeners, SortKey.PORT, SortDirection.DESCENDING)

    grid = table._table
    assert grid.rowCount() == 2
    assert grid.item(0, PORT_COLUMN_INDEX).text() == "3000"
    assert grid.item(0, PROCESS_COLUMN_INDEX).text() == "—"
    assert grid.item(1, STARTED_COLUMN_INDEX).text() == "2h ago"
    assert grid.horizontalHeaderItem(PORT_COLUMN_INDEX).text() == "Port ↓"
    assert grid.horizontalHeaderItem(PROCESS_COLUMN_INDEX).text() == "Process ↕"


def test_listener_table_kill_button_emits_pid(qapp):
    table = ListenerTable(_t)
    requested: list[int] = []
    table.kill_requested.connect(requested.append)
    table.set_listeners([Listener(port=3000, pid=55)], SortKey.PORT, SortDirection.ASCENDING)

    table._table.cellWidget(0, KILL_COLUMN_INDEX).click()

    assert requested == [55]


def test_listener_table_header_click_requests_sort(qapp):
    table = ListenerTable(_t)
    requested: list[SortKey] = []
    table.sort_requested.connect(requested.append)

    table._handle_sort_request(PROCESS_COLUMN_INDEX)
    table._handle_sort_request(KILL_COLUMN_INDEX)

    assert requested == [SortKey.PROCESS_NAME]


def test_range_panel_emits_add_and_remove(qapp):
    panel = RangePanel(_t)
    added: list[tuple[int, int]] = []
    removed: list[int] = []
    panel.add_requested.connect(lambda start, end: added.append((start, end)))
    panel.remove_requested.connect(removed.append)
    panel.set_ranges([PortRange(3000, 3999), PortRange(8000, 8999)])

    panel._add_button.click()
    panel._table.cellWidget(1, 1).click()

    assert added == [(3000, 3999)]
    assert removed == [1]
    assert panel._watching_label.text() == "Watching: 3000-3999, 8000-8999"


def test_range_panel_busy_state(qapp):
    panel = RangePanel(_t)

    panel.set_busy(True)

    assert not panel._refresh_button.isEnabled()
    assert panel._refresh_button.text() == "Refreshing…"


def test_tray_click_and_menu_request_window(qapp):
    tray = AppTray(_t, QIcon())
    shown: list[bool] = []
    quit_requests: list[bool] = []
    tray.show_requested.connect(lambda: shown.append(True))
    tray.quit_requested.connect(lambda: quit_requests.append(True))

    tray._on_activated(QSystemTrayIcon.ActivationReason.Trigger)
    tray._on_activated(QSystemTrayIcon.ActivationReason.Context)
    tray.show_action.trigger()
    tray.quit_action.trigger()

    assert shown == [True, True]
    assert quit_requests == [True]
    assert [tray.show_action.text(), tray.quit_action.text()] == ["Show", "Quit"]
