"""Core data models for the Port-o-Potty listener monitor."""
from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

MIN_PORT = 1
MAX_PORT = 65535
EMPTY_PLACEHOLDER = "—"


class SortKey(Enum):
    """Columns the listener table can be ordered by."""

    PORT = "port"
    PROCESS_NAME = "process_name"
    PID = "pid"
    STARTED_SECONDS_AGO = "started_seconds_ago"


class SortDirection(Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"

    def toggled(self) -> SortDirection:
        if self is SortDirection.ASCENDING:
            return SortDirection.DESCENDING
        return SortDirection.ASCENDING


@dataclass(frozen=True)
class PortRange:
    """Inclusive range of TCP ports to watch."""

    start: int
    end: int

    def contains(self, port: int) -> bool:
        return self.start <= port <= self.end

    def label(self) -> str:
        return f"{self.start}-{self.end}"

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class Listener:
    """A process accepting connections on a TCP port."""

    port: int
    pid: int
    process_name: str | None = None
    started_seconds_ago: int | None = None

    @property
    def key(self) -> tuple[int, int]:
        return (self.port, self.pid)


@dataclass
class ErrorRecord:
    """Structured error payload with translation keys and remediation hints."""

    code: str
    message_key: str
    action_key: str
    context: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "code": self.code,
            "message_key": self.message_key,
            "action_key": self.action_key,
            "context": dict(self.context),
        }


DEFAULT_RANGES: tuple[PortRange, ...] = (
    PortRange(3000, 3999),
    PortRange(8000, 8999),
)


def _clamp_port(value: float) -> int:
    return max(MIN_PORT, min(MAX_PORT, math.floor(value)))


def normalize_range(start: float, end: float) -> PortRange:
    """Floor, clamp to the valid port interval and order the bounds."""

    low = _clamp_port(start)
    high = _clamp_port(end)
    if low > high:
        low, high = high, low
    return PortRange(low, high)


def normalize_ranges(ranges: Iterable[PortRange]) -> list[PortRange]:
    return [normalize_range(item.start, item.end) for item in ranges]


def format_ranges_label(ranges: Sequence[PortRange]) -> str:
    """Return ``"3000-3999, 8000-8999"`` style text for the watched ranges."""

    if not ranges:
        return EMPTY_PLACEHOLDER
    return ", ".join(item.label() for item in ranges)


def format_uptime(seconds_ago: int | None) -> str:
    """Render how long ago a process started in a compact form."""

    if seconds_ago is None:
        return EMPTY_PLACEHOLDER
    if seconds_ago < 60:
        return f"{seconds_ago}s ago"
    minutes = seconds_ago // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 48:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"
