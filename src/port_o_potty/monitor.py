"""Wires the range store, scan manager, scheduler and kill flow together."""
from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QObject

from .config import AppSettings
from .kill_coordinator import ConfirmFn, KillCoordinator, KillFn
from .listener_store import ListenerStore
from .polling_scheduler import PollingScheduler
from .range_store import RangeStore
from .scan_pipeline import ScanManager, ScanPipeline, ScanPortsFn

LOGGER = logging.getLogger(__name__)


def _always_confirm(_message: str) -> bool:
    return True


class ListenerMonitor(QObject):
    """Headless core of the application; the window only renders its state."""

    def __init__(
        self,
        settings: AppSettings,
        range_store: RangeStore,
        scan_ports: ScanPortsFn,
        kill_pid: KillFn,
        confirm: ConfirmFn,
        confirm_template: str | None = None,
        scan_manager: ScanManager | None = None,
        scheduler_factory: Callable[..., PollingScheduler] = PollingScheduler,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings
        self.range_store = range_store
        self.listener_store = ListenerStore(self)
        self.scan_manager = scan_manager or ScanManager(ScanPipeline(scan_ports), self)
        self.scan_manager.started.connect(self.listener_store.begin_scan)
        self.scan_manager.result_ready.connect(self.listener_store.apply_scan)
        self.scan_manager.error.connect(self.listener_store.fail_scan)
        self.scan_manager.finished.connect(self.listener_store.finish_scan)
        self.scheduler = scheduler_factory(
            self.request_scan,
            interval_seconds=settings.polling.interval_seconds,
            is_busy=self.listener_store.is_busy,
            parent=self,
        )
        self.range_store.ranges_changed.connect(self.scheduler.on_ranges_changed)
        coordinator_kwargs = {}
        if confirm_template is not None:
            coordinator_kwargs["confirm_template"] = confirm_template
        self.kill_coordinator = KillCoordinator(
            self.listener_store,
            kill_pid=kill_pid,
            confirm=confirm if settings.ui.confirm_kill else _always_confirm,
            rescan=self.request_scan,
            resync_delay_ms=settings.polling.resync_delay_ms,
            **coordinator_kwargs,
        )

    def start(self, focused: bool = True) -> None:
        self.range_store.load()
        LOGGER.info("Watching ports: %s", self.range_store.label())
        self.scheduler.start(focused)

    def shutdown(self) -> None:
        self.scheduler.stop()
        self.scan_manager.stop()

    def request_scan(self) -> int:
        return self.scan_manager.start(self.range_store.ranges())

    def kill(self, pid: int) -> bool:
        return self.kill_coordinator.kill(pid)
