"""psutil-backed listener enumeration and process termination."""
from __future__ import annotations

import logging
import time
from collections.abc import Sequence

import psutil

from .error_codes import InvalidPidError, KillError, ScanError
from .models import Listener, PortRange

LOGGER = logging.getLogger(__name__)


def _in_any_range(port: int, ranges: Sequence[PortRange]) -> bool:
    return any(item.contains(port) for item in ranges)


def _process_details(pid: int, now: float, cache: dict[int, tuple[str | None, int | None]]):
    cached = cache.get(pid)
    if cached is not None:
        return cached
    try:
        process = psutil.Process(pid)
        with process.oneshot():
            name = process.name()
            started = max(0, int(now - process.create_time()))
    except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
        details: tuple[str | None, int | None] = (None, None)
    else:
        details = (name, started)
    cache[pid] = details
    return details


def _listening_sockets() -> list[tuple[int, int]]:
    """Return ``(pid, port)`` for every TCP socket in LISTEN state.

    The system-wide table needs elevated rights on some platforms (macOS in
    particular). When it is refused, each process the user can inspect is
    asked for its own sockets instead.
    """

    try:
        connections = psutil.net_connections(kind="tcp")
    except psutil.AccessDenied as exc:
        LOGGER.debug("System-wide socket table denied (%s); reading per process", exc)
        return _per_process_sockets()
    except OSError as exc:
        raise ScanError(f"Unable to enumerate sockets: {exc}") from exc
    return [
        (int(conn.pid), int(conn.laddr.port))
        for conn in connections
        if conn.status == psutil.CONN_LISTEN and conn.laddr and conn.pid
    ]


def _per_process_sockets() -> list[tuple[int, int]]:
    sockets: list[tuple[int, int]] = []
    readable = 0
    try:
        for process in psutil.process_iter():
            try:
                connections = process.net_connections(kind="tcp")
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
            readable += 1
            sockets.extend(
                (int(process.pid), int(conn.laddr.port))
                for conn in connections
                if conn.status == psutil.CONN_LISTEN and conn.laddr
            )
    except (psutil.AccessDenied, OSError) as exc:
        raise ScanError(f"Unable to enumerate sockets: {exc}") from exc
    if not readable:
        raise ScanError("Unable to enumerate sockets: access denied for every process")
    return sockets


def scan_ports(ranges: Sequence[PortRange]) -> list[Listener]:
    """Return TCP listeners whose local port falls inside any of ``ranges``.

    Sockets reachable through several address families are reported once per
    socket, so the same ``(port, pid)`` pair can appear more than once.
    """

    if not ranges:
        return []
    sockets = _listening_sockets()

    now = time.time()
    cache: dict[int, tuple[str | None, int | None]] = {}
    listeners: list[Listener] = []
    for pid, port in sockets:
        if not _in_any_range(port, ranges):
            continue
        name, started = _process_details(pid, now, cache)
        listeners.append(
            Listener(port=port, pid=pid, process_name=name, started_seconds_ago=started)
        )
    LOGGER.debug("Enumerated %d listener sockets in %d ranges", len(listeners), len(ranges))
    return listeners


def kill_pid(pid: int) -> None:
    """Send SIGTERM to ``pid``, falling back to SIGKILL when it is refused."""

    if pid <= 0:
        raise InvalidPidError("invalid pid")
    try:
        process = psutil.Process(pid)
    except psutil.NoSuchProcess as exc:
        raise KillError(f"No process with PID {pid}") from exc
    try:
        process.terminate()
    except psutil.NoSuchProcess:
        return
    except psutil.AccessDenied as exc:
        LOGGER.debug("SIGTERM refused for %s: %s", pid, exc)
    else:
        return
    try:
        process.kill()
    except psutil.NoSuchProcess:
        return
    except psutil.AccessDenied as exc:
        raise KillError(f"Permission denied killing PID {pid}") from exc
