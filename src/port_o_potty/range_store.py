"""Persistence and normalization of the watched port ranges."""
from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from pathlib import Path
from typing import List, Protocol

import yaml
from PySide6.QtCore import QObject, Signal

from .config import ConfigurationError
from .models import DEFAULT_RANGES, PortRange, format_ranges_label, normalize_range, normalize_ranges

LOGGER = logging.getLogger(__name__)

RANGES_KEY = "port_o_potty_ranges_v1"


class RangePersistenceError(ConfigurationError):
    """Raised when the range set could not be written to durable storage."""


class RangeRepository(Protocol):
    """Load/save contract for the persisted range record."""

    def load_raw(self) -> object | None:
        """Return the stored payload, or None when nothing usable exists."""

    def save_raw(self, payload: list[dict[str, int]]) -> None:
        """Persist ``payload``; raise RangePersistenceError on failure."""


class MemoryRangeRepository:
    """Keeps the range record in memory (headless use and tests)."""

    def __init__(self, payload: object | None = None) -> None:
        self.payload = payload
        self.save_count = 0

    def load_raw(self) -> object | None:
        return self.payload

    def save_raw(self, payload: list[dict[str, int]]) -> None:
        self.payload = [dict(entry) for entry in payload]
        self.save_count += 1


class YamlRangeRepository:
    """Stores the ranges under a fixed key in a small YAML file."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load_raw(self) -> object | None:
        if not self._path.exists():
            return None
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = yaml.safe_load(handle)
        except (OSError, yaml.YAMLError) as exc:
            LOGGER.debug("Failed to read ranges %s: %s", self._path, exc)
            return None
        if isinstance(payload, dict):
            return payload.get(RANGES_KEY)
        return payload

    def save_raw(self, payload: list[dict[str, int]]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("w", encoding="utf-8") as handle:
                yaml.safe_dump({RANGES_KEY: payload}, handle, sort_keys=False)
        except OSError as exc:
            LOGGER.error("Failed to write ranges %s: %s", self._path, exc)
            raise RangePersistenceError(f"Failed to save port ranges to {self._path}: {exc}") from exc


def parse_ranges(payload: object | None, defaults: Sequence[PortRange] = DEFAULT_RANGES) -> list[PortRange]:
    """Turn a stored payload into normalized ranges.

    A missing payload or one that is not a list yields ``defaults``. Entries
    whose bounds are not finite numbers are dropped, so an explicitly stored
    empty list stays empty.
    """

    if payload is None or not isinstance(payload, list):
        if payload is not None:
            LOGGER.debug("Discarding malformed range payload of type %s", type(payload).__name__)
        return list(defaults)
    ranges: list[PortRange] = []
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        start = _finite_number(entry.get("start"))
        end = _finite_number(entry.get("end"))
        if start is None or end is None:
            continue
        ranges.append(normalize_range(start, end))
    return ranges


def _finite_number(value: object) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


class RangeStore(QObject):
    """Ordered set of watched ranges; every mutation is persisted."""

    ranges_changed = Signal(object)

    def __init__(
        self,
        repository: RangeRepository,
        defaults: Sequence[PortRange] = DEFAULT_RANGES,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._repository = repository
        self._defaults = tuple(defaults)
        self._ranges: List[PortRange] = []

    normalize = staticmethod(normalize_ranges)

    def load(self) -> list[PortRange]:
        self._ranges = parse_ranges(self._repository.load_raw(), self._defaults)
        return list(self._ranges)

    def ranges(self) -> list[PortRange]:
        return list(self._ranges)

    def label(self) -> str:
        return format_ranges_label(self._ranges)

    def add(self, port_range: PortRange) -> PortRange:
        normalized = normalize_ranges([port_range])[0]
        self._ranges.append(normalized)
        LOGGER.info("Added port range %s", normalized.label())
        self._commit()
        return normalized

    def remove(self, index: int) -> PortRange:
        if not 0 <= index < len(self._ranges):
            raise IndexError(f"No port range at position {index}")
        removed = self._ranges.pop(index)
        LOGGER.info("Removed port range %s", removed.label())
        self._commit()
        return removed

    def _commit(self) -> None:
        try:
            self._repository.save_raw([item.to_dict() for item in self._ranges])
        finally:
            self.ranges_changed.emit(list(self._ranges))
