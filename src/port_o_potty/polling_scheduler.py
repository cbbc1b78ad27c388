"""Focus-gated polling cadence for listener scans."""
from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QObject, QTimer, Signal, Slot

LOGGER = logging.getLogger(__name__)

STATE_ACTIVE = "active"
STATE_PAUSED = "paused"


class PollingScheduler(QObject):
    """Issues scans every ``interval_seconds`` while the app has focus.

    Losing focus stops the timer outright. Regaining it issues one scan
    immediately and restarts the cadence from zero, without replaying ticks
    missed while paused. Range edits always scan at once.
    """

    state_changed = Signal(str)
    scan_requested = Signal(str)

    def __init__(
        self,
        scan_callback: Callable[[], object],
        interval_seconds: int = 15,
        is_busy: Callable[[], bool] | None = None,
        timer: QTimer | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._scan_callback = scan_callback
        self._is_busy = is_busy or (lambda: False)
        self._interval_ms = int(interval_seconds * 1000)
        self._timer = timer if timer is not None else QTimer(self)
        self._timer.setInterval(self._interval_ms)
        self._timer.timeout.connect(self._on_timeout)
        self._focused = True
        self._running = False

    @property
    def interval_seconds(self) -> float:
        return self._interval_ms / 1000

    def is_active(self) -> bool:
        return self._running and self._focused

    def state(self) -> str:
        return STATE_ACTIVE if self.is_active() else STATE_PAUSED

    def start(self, focused: bool = True) -> None:
        self._running = True
        self._focused = focused
        self._trigger("startup")
        if focused:
            self._timer.start()
        self.state_changed.emit(self.state())

    def stop(self) -> None:
        self._running = False
        self._timer.stop()
        self.state_changed.emit(self.state())

    @Slot(bool)
    def set_focused(self, focused: bool) -> None:
        if focused == self._focused:
            return
        self._focused = focused
        if not self._running:
            return
        if focused:
            LOGGER.debug("Focus regained; resuming polling")
            self._trigger("focus")
            self._timer.start()
        else:
            LOGGER.debug("Focus lost; pausing polling")
            self._timer.stop()
        self.state_changed.emit(self.state())

    @Slot(object)
    def on_ranges_changed(self, _ranges: list) -> None:
        if self._running:
            self._trigger("ranges")

    def refresh_now(self) -> bool:
        """Manual refresh; ignored while a scan is outstanding."""

        if self._is_busy():
            LOGGER.debug("Manual refresh ignored; scan already running")
            return False
        self._trigger("manual")
        return True

    @Slot()
    def _on_timeout(self) -> None:
        if self.is_active():
            self._trigger("interval")

    def _trigger(self, reason: str) -> None:
        LOGGER.debug("Scan requested (%s)", reason)
        self.scan_requested.emit(reason)
        self._scan_callback()
