"""Kill-and-resync workflow."""
from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QTimer

from .error_codes import (
    ERROR_INVALID_PID,
    ERROR_KILL_FAILED,
    InvalidPidError,
    build_error,
)
from .listener_store import ListenerStore

LOGGER = logging.getLogger(__name__)

ConfirmFn = Callable[[str], bool]
KillFn = Callable[[int], object]
SingleShotFn = Callable[[int, Callable[[], None]], object]

DEFAULT_CONFIRM_TEMPLATE = "Kill PID {pid}?"


def _qt_single_shot(delay_ms: int, callback: Callable[[], None]) -> None:
    QTimer.singleShot(delay_ms, callback)


class KillCoordinator:
    """Terminates a pid, drops its rows at once and rescans shortly after.

    The rows are only removed once the kill collaborator reports success.
    The follow-up scan picks up ports that a supervisor rebinds quickly.
    """

    def __init__(
        self,
        listener_store: ListenerStore,
        kill_pid: KillFn,
        confirm: ConfirmFn,
        rescan: Callable[[], object],
        resync_delay_ms: int = 600,
        single_shot: SingleShotFn | None = None,
        confirm_template: str = DEFAULT_CONFIRM_TEMPLATE,
    ) -> None:
        self._store = listener_store
        self._kill_pid = kill_pid
        self._confirm = confirm
        self._rescan = rescan
        self._resync_delay_ms = resync_delay_ms
        self._single_shot = single_shot or _qt_single_shot
        self._confirm_template = confirm_template

    @property
    def resync_delay_ms(self) -> int:
        return self._resync_delay_ms

    def kill(self, pid: int) -> bool:
        if not self._confirm(self._confirm_template.format(pid=pid)):
            LOGGER.debug("Kill of PID %s declined", pid)
            return False
        self._store.set_error(None)
        try:
            self._kill_pid(pid)
        except InvalidPidError as exc:
            self._store.set_error(build_error(ERROR_INVALID_PID, pid=pid, detail=str(exc)))
            return False
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Failed to kill PID %s: %s", pid, exc)
            self._store.set_error(build_error(ERROR_KILL_FAILED, pid=pid, detail=str(exc)))
            return False
        removed = self._store.remove_pid(pid)
        LOGGER.info("Killed PID %s (%d listener rows removed)", pid, removed)
        self._single_shot(self._resync_delay_ms, self._resync)
        return True

    def _resync(self) -> None:
        self._rescan()
