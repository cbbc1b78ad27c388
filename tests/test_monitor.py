"""End-to-end wiring of the headless monitor with synchronous fakes."""
from __future__ import annotations

from PySide6.QtCore import QObject, Signal

from conftest import FakeTimer
from port_o_potty import kill_coordinator as kill_coordinator_module
from port_o_potty.config import load_settings
from port_o_potty.error_codes import ERROR_SCAN_FAILED, ScanError, build_error
from port_o_potty.models import Listener, PortRange
from port_o_potty.monitor import ListenerMonitor
from port_o_potty.polling_scheduler import PollingScheduler
from port_o_potty.range_store import MemoryRangeRepository, RangeStore
from port_o_potty.scan_pipeline import ScanPipeline


class SyncScanManager(QObject):
    started = Signal(int)
    result_ready = Signal(int, object)
    error = Signal(int, object)
    finished = Signal(int)

    def __init__(self, pipeline: ScanPipeline):
        super().__init__()
        self._pipeline = pipeline
        self.requested: list[list[PortRange]] = []
        self.stopped = False
        self._seq = 0

    def start(self, ranges):
        self._seq += 1
        self.requested.append(list(ranges))
        self.started.emit(self._seq)
        try:
            listeners = self._pipeline.scan(ranges)
        except ScanError as exc:
            self.error.emit(self._seq, build_error(ERROR_SCAN_FAILED, detail=str(exc)))
        else:
            self.result_ready.emit(self._seq, listeners)
        self.finished.emit(self._seq)
        return self._seq

    def stop(self):
        self.stopped = True


class FakeSystem:
    def __init__(self):
        self.listeners = [
            Listener(port=3000, pid=123, process_name="node"),
            Listener(port=3000, pid=123, process_name="node"),
            Listener(port=8080, pid=9, process_name="python"),
        ]
        self.fail = False
        self.killed: list[int] = []

    def scan_ports(self, ranges):
        if self.fail:
            raise OSError("access denied")
        return [item for item in self.listeners if any(r.contains(item.port) for r in ranges)]

    def kill_pid(self, pid):
        self.killed.append(pid)
        self.listeners = [item for item in self.listeners if item.pid != pid]


def _build(tmp_path, monkeypatch, confirm=lambda message: True):
    scheduled = []
    monkeypatch.setattr(
        kill_coordinator_module,
        "_qt_single_shot",
        lambda delay, callback: scheduled.append((delay, callback)),
    )
    settings = load_settings(tmp_path / "port-o-potty.config.yaml")
    system = FakeSystem()
    timer = FakeTimer()
    manager = SyncScanManager(ScanPipeline(system.scan_ports))
    monitor = ListenerMonitor(
        settings,
        RangeStore(MemoryRangeRepository(None)),
        scan_ports=system.scan_ports,
        kill_pid=system.kill_pid,
        confirm=confirm,
        scan_manager=manager,
        scheduler_factory=lambda callback, **kwargs: PollingScheduler(callback, timer=timer, **kwargs),
    )
    return monitor, system, manager, timer, scheduled


def test_start_loads_defaults_and_scans(tmp_path, monkeypatch):
    monitor, _, manager, timer, _ = _build(tmp_path, monkeypatch)

    monitor.start()

    assert manager.requested == [[PortRange(3000, 3999), PortRange(8000, 8999)]]
    assert monitor.listener_store.listeners() == [
        Listener(port=3000, pid=123, process_name="node"),
        Listener(port=8080, pid=9, process_name="python"),
    ]
    assert timer.interval == 15_000
    assert monitor.listener_store.is_busy() is False


def test_range_edit_triggers_immediate_scan(tmp_path, monkeypatch):
    monitor, _, manager, _, _ = _build(tmp_path, monkeypatch)
    monitor.start()

    monitor.range_store.remove(1)

    assert len(manager.requested) == 2
    assert manager.requested[-1] == [PortRange(3000, 3999)]
    assert [item.pid for item in monitor.listener_store.listeners()] == [123]


def test_kill_removes_rows_and_resyncs_after_delay(tmp_path, monkeypatch):
    monitor, system, manager, _, scheduled = _build(tmp_path, monkeypatch)
    monitor.start()
    system.listeners.append(Listener(port=3000, pid=124, process_name="node"))

    assert monitor.kill(123) is True

    assert system.killed == [123]
    assert [item.pid for item in monitor.listener_store.listeners()] == [9]
    assert [delay for delay, _ in scheduled] == [600]

    scheduled[0][1]()

    assert len(manager.requested) == 2
    assert sorted(item.pid for item in monitor.listener_store.listeners()) == [9, 124]


def test_scan_failure_keeps_snapshot_and_sets_error(tmp_path, monkeypatch):
    monitor, system, _, timer, _ = _build(tmp_path, monkeypatch)
    monitor.start()
    before = monitor.listener_store.listeners()
    system.fail = True

    timer.fire()

    assert monitor.listener_store.listeners() == before
    assert monitor.listener_store.error().code == ERROR_SCAN_FAILED.code


def test_confirmation_disabled_in_settings(tmp_path, monkeypatch):
    (tmp_path / "port-o-potty.config.yaml").write_text("ui:\n  confirm_kill: false\n")

    def refuse(message):
        raise AssertionError("confirmation should be skipped")

    monitor, system, _, _, _ = _build(tmp_path, monkeypatch, confirm=refuse)
    monitor.start()

    assert monitor.kill(9) is True
    assert system.killed == [9]


def test_shutdown_stops_scheduler_and_manager(tmp_path, monkeypatch):
    monitor, _, manager, timer, _ = _build(tmp_path, monkeypatch)
    monitor.start()

    monitor.shutdown()

    assert manager.stopped is True
    assert not timer.isActive()
