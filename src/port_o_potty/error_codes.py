"""Centralized error descriptors and helpers."""
from __future__ import annotations

from dataclasses import dataclass

from .models import ErrorRecord


@dataclass(frozen=True)
class ErrorDescriptor:
    code: str
    message_key: str
    action_key: str


def build_error(descriptor: ErrorDescriptor, **context: object) -> ErrorRecord:
    """Create an ErrorRecord with safe stringified context."""

    str_context = {key: str(value) for key, value in context.items()}
    return ErrorRecord(
        code=descriptor.code,
        message_key=descriptor.message_key,
        action_key=descriptor.action_key,
        context=str_context,
    )


class ScanError(RuntimeError):
    """Raised when the listener enumeration collaborator fails."""


class KillError(RuntimeError):
    """Raised when a process could not be terminated."""


class InvalidPidError(KillError):
    """Raised for pids that can never name a killable process."""


ERROR_SCAN_FAILED = ErrorDescriptor(
    code="PP001",
    message_key="error.scan_failed.message",
    action_key="error.scan_failed.action",
)

ERROR_KILL_FAILED = ErrorDescriptor(
    code="PP002",
    message_key="error.kill_failed.message",
    action_key="error.kill_failed.action",
)

ERROR_INVALID_PID = ErrorDescriptor(
    code="PP003",
    message_key="error.invalid_pid.message",
    action_key="error.invalid_pid.action",
)

ERROR_RANGES_NOT_SAVED = ErrorDescriptor(
    code="PP004",
    message_key="error.ranges_not_saved.message",
    action_key="error.ranges_not_saved.action",
)

__all__ = [
    "ERROR_INVALID_PID",
    "ERROR_KILL_FAILED",
    "ERROR_RANGES_NOT_SAVED",
    "ERROR_SCAN_FAILED",
    "ErrorDescriptor",
    "InvalidPidError",
    "KillError",
    "ScanError",
    "build_error",
]
