"""Scan -> dedup pipeline and the Qt layer that runs it off the GUI thread."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Callable, Dict

from PySide6.QtCore import QObject, QThread, Signal, Slot

from .error_codes import ERROR_SCAN_FAILED, ScanError, build_error
from .models import Listener, PortRange

LOGGER = logging.getLogger(__name__)

ScanPortsFn = Callable[[Sequence[PortRange]], Iterable[Listener]]


def dedup_listeners(records: Iterable[Listener]) -> list[Listener]:
    """Collapse records sharing a ``(port, pid)`` key; the last one wins."""

    unique: Dict[tuple[int, int], Listener] = {}
    for record in records:
        unique[record.key] = record
    return list(unique.values())


class ScanPipeline:
    """Invokes the enumeration collaborator and canonicalizes its output."""

    def __init__(self, scan_ports: ScanPortsFn) -> None:
        self._scan_ports = scan_ports

    def scan(self, ranges: Sequence[PortRange]) -> list[Listener]:
        if not ranges:
            return []
        try:
            records = list(self._scan_ports(list(ranges)))
        except ScanError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ScanError(str(exc)) from exc
        listeners = dedup_listeners(records)
        LOGGER.debug("Scan returned %d records, %d unique", len(records), len(listeners))
        return listeners


class ScanWorker(QObject):
    result_ready = Signal(int, object)
    error = Signal(int, object)
    finished = Signal(int)

    def __init__(self, seq: int, pipeline: ScanPipeline, ranges: Sequence[PortRange]):
        super().__init__()
        self._seq = seq
        self._pipeline = pipeline
        self._ranges = list(ranges)

    @property
    def seq(self) -> int:
        return self._seq

    @Slot()
    def start(self) -> None:
        try:
            listeners = self._pipeline.scan(self._ranges)
        except ScanError as exc:
            LOGGER.warning("Scan %d failed: %s", self._seq, exc)
            self.error.emit(self._seq, build_error(ERROR_SCAN_FAILED, detail=str(exc)))
        else:
            self.result_ready.emit(self._seq, listeners)
        finally:
            self.finished.emit(self._seq)


class ScanManager(QObject):
    """Dispatches scans on worker threads; several may be in flight at once."""

    started = Signal(int)
    result_ready = Signal(int, object)
    error = Signal(int, object)
    finished = Signal(int)

    def __init__(self, pipeline: ScanPipeline, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._pipeline = pipeline
        self._next_seq = 0
        self._active: Dict[int, tuple[QThread, ScanWorker]] = {}

    def start(self, ranges: Sequence[PortRange]) -> int:
        self._next_seq += 1
        seq = self._next_seq
        thread = QThread()
        worker = ScanWorker(seq, self._pipeline, ranges)
        worker.moveToThread(thread)
        thread.started.connect(worker.start)
        worker.result_ready.connect(self.result_ready)
        worker.error.connect(self.error)
        worker.finished.connect(self.finished)
        worker.finished.connect(self._on_worker_finished)
        self._active[seq] = (thread, worker)
        self.started.emit(seq)
        thread.start()
        return seq

    def latest_seq(self) -> int:
        return self._next_seq

    def is_running(self) -> bool:
        return bool(self._active)

    def stop(self) -> None:
        for seq in list(self._active):
            self._cleanup(seq, wait_ms=2000)

    @Slot(int)
    def _on_worker_finished(self, seq: int) -> None:
        self._cleanup(seq, wait_ms=1000)

    def _cleanup(self, seq: int, wait_ms: int) -> None:
        entry = self._active.pop(seq, None)
        if entry is None:
            return
        thread, worker = entry
        thread.quit()
        thread.wait(wait_ms)
        worker.deleteLater()
        thread.deleteLater()
