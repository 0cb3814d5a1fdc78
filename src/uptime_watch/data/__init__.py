"""Data layer - models, status persistence, and the execution lock."""

from .models import AlertEvent, AlertKind, ProbeResult, Status, StatusRecord
from .persistence import BaseStatusStore, FileStatusStore, parse_status_line
from .lock import ExecutionLock, FileLockMarker, LockHeld, LockMarker, pid_is_running

__all__ = [
    "AlertEvent",
    "AlertKind",
    "ProbeResult",
    "Status",
    "StatusRecord",
    "BaseStatusStore",
    "FileStatusStore",
    "parse_status_line",
    "ExecutionLock",
    "FileLockMarker",
    "LockHeld",
    "LockMarker",
    "pid_is_running",
]
