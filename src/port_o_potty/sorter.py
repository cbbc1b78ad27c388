"""Deterministic ordering of listener snapshots."""
from __future__ import annotations

from collections.abc import Sequence
from functools import cmp_to_key
from typing import Callable

from .models import Listener, SortDirection, SortKey

_Indexed = tuple[int, Listener]


def _compare_values(left, right) -> int:
    return (left > right) - (left < right)


def _compare_nullable(left, right, direction: int) -> int:
    # Missing values stay at the bottom whichever way the column is sorted.
    if left is None and right is None:
        return 0
    if left is None:
        return 1
    if right is None:
        return -1
    return _compare_values(left, right) * direction


def _primary_comparison(key: SortKey, left: Listener, right: Listener, direction: int) -> int:
    if key is SortKey.PORT:
        return _compare_values(left.port, right.port) * direction
    if key is SortKey.PID:
        return _compare_values(left.pid, right.pid) * direction
    if key is SortKey.PROCESS_NAME:
        return _compare_nullable(
            left.process_name.casefold() if left.process_name is not None else None,
            right.process_name.casefold() if right.process_name is not None else None,
            direction,
        )
    return _compare_nullable(left.started_seconds_ago, right.started_seconds_ago, direction)


def _build_comparator(key: SortKey, direction: SortDirection) -> Callable[[_Indexed, _Indexed], int]:
    sign = 1 if direction is SortDirection.ASCENDING else -1

    def compare(left: _Indexed, right: _Indexed) -> int:
        left_index, a = left
        right_index, b = right
        result = _primary_comparison(key, a, b, sign)
        if result:
            return result
        return (
            _compare_values(a.port, b.port)
            or _compare_values(a.pid, b.pid)
            or _compare_values(left_index, right_index)
        )

    return compare


def sort_listeners(
    listeners: Sequence[Listener],
    key: SortKey = SortKey.PORT,
    direction: SortDirection = SortDirection.ASCENDING,
) -> list[Listener]:
    """Return a new list ordered by ``key``.

    Ties on the selected column are broken by port, then pid, then the
    position in ``listeners``, always ascending, so repeated refreshes of the
    same data render in the same order.
    """

    indexed = list(enumerate(listeners))
    indexed.sort(key=cmp_to_key(_build_comparator(key, direction)))
    return [listener for _, listener in indexed]


def toggle_sort(
    current_key: SortKey,
    current_direction: SortDirection,
    clicked_key: SortKey,
) -> tuple[SortKey, SortDirection]:
    """Apply a header click: flip the active column, otherwise start ascending."""

    if clicked_key is current_key:
        return current_key, current_direction.toggled()
    return clicked_key, SortDirection.ASCENDING


def sort_indicator(key: SortKey, active_key: SortKey, direction: SortDirection) -> str:
    if key is not active_key:
        return "↕"
    return "↑" if direction is SortDirection.ASCENDING else "↓"
