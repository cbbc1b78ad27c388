"""Displayed listener state shared by the scheduler, kill flow and table."""
from __future__ import annotations

import logging
from typing import List, Set

from PySide6.QtCore import QObject, Signal

from .models import ErrorRecord, Listener, SortDirection, SortKey
from .sorter import sort_listeners, toggle_sort

LOGGER = logging.getLogger(__name__)


class ListenerStore(QObject):
    """Holds the last good listener snapshot, the busy flag and the current error.

    Scan completions carry the sequence number they were dispatched with.
    A completion older than the last applied one is dropped so a slow scan
    cannot overwrite a newer snapshot; everything else is a full replace.
    """

    listeners_changed = Signal()
    busy_changed = Signal(bool)
    error_changed = Signal(object)
    sort_changed = Signal()

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._listeners: List[Listener] = []
        self._outstanding: Set[int] = set()
        self._last_applied_seq = 0
        self._error: ErrorRecord | None = None
        self._sort_key = SortKey.PORT
        self._sort_direction = SortDirection.ASCENDING

    def listeners(self) -> list[Listener]:
        return list(self._listeners)

    def sorted_listeners(self) -> list[Listener]:
        return sort_listeners(self._listeners, self._sort_key, self._sort_direction)

    def is_busy(self) -> bool:
        return bool(self._outstanding)

    def error(self) -> ErrorRecord | None:
        return self._error

    @property
    def sort_key(self) -> SortKey:
        return self._sort_key

    @property
    def sort_direction(self) -> SortDirection:
        return self._sort_direction

    def set_sort(self, key: SortKey, direction: SortDirection) -> None:
        if (key, direction) == (self._sort_key, self._sort_direction):
            return
        self._sort_key = key
        self._sort_direction = direction
        self.sort_changed.emit()

    def toggle_sort(self, key: SortKey) -> None:
        self.set_sort(*toggle_sort(self._sort_key, self._sort_direction, key))

    def begin_scan(self, seq: int) -> None:
        was_busy = self.is_busy()
        self._outstanding.add(seq)
        self.set_error(None)
        if not was_busy:
            self.busy_changed.emit(True)

    def apply_scan(self, seq: int, listeners: list[Listener]) -> bool:
        if seq < self._last_applied_seq:
            LOGGER.debug("Dropping stale scan %d (latest applied %d)", seq, self._last_applied_seq)
            return False
        self._last_applied_seq = seq
        self._listeners = list(listeners)
        self.listeners_changed.emit()
        return True

    def fail_scan(self, seq: int, error: ErrorRecord) -> bool:
        if seq < self._last_applied_seq:
            LOGGER.debug("Ignoring failure of stale scan %d (latest applied %d)", seq, self._last_applied_seq)
            return False
        LOGGER.debug("Scan %d failed; keeping %d listeners", seq, len(self._listeners))
        self.set_error(error)
        return True

    def finish_scan(self, seq: int) -> None:
        if seq not in self._outstanding:
            return
        self._outstanding.discard(seq)
        if not self._outstanding:
            self.busy_changed.emit(False)

    def remove_pid(self, pid: int) -> int:
        remaining = [listener for listener in self._listeners if listener.pid != pid]
        removed = len(self._listeners) - len(remaining)
        if removed:
            self._listeners = remaining
            self.listeners_changed.emit()
        return removed

    def set_error(self, error: ErrorRecord | None) -> None:
        if error is None and self._error is None:
            return
        self._error = error
        self.error_changed.emit(error)
