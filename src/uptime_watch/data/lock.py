"""Execution lock guarding the status file read-modify-write.

A lock marker file records the PID of the owning process. A second run
that finds a live owner fails fast with ``LockHeld``; a marker whose owner
no longer exists is stale and is reclaimed.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional

from ..log import Logger, silent


class LockHeld(Exception):
    """Raised when another live process owns the execution lock."""

    def __init__(self, owner_pid: Optional[int]):
        self.owner_pid = owner_pid
        super().__init__(f"another run is in progress (PID {owner_pid})")


def pid_is_running(pid: int) -> bool:
    """Check whether a process with this PID currently exists."""
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists, but owned by another user
        return True
    except OSError:
        return False
    return True


class LockMarker(ABC):
    """Storage for the single owner token of the lock."""

    @abstractmethod
    def read(self) -> Optional[str]:
        """Return the stored token, or None if no marker exists."""
        pass

    @abstractmethod
    def create(self, token: str) -> bool:
        """Atomically create the marker. Returns False if it already exists."""
        pass

    @abstractmethod
    def remove(self) -> None:
        """Delete the marker if present."""
        pass

    @abstractmethod
    def remove_if(self, token: str) -> bool:
        """Delete the marker only if it still holds ``token``.

        Returns False, leaving the marker in place, when it holds any other
        token. A marker that is already gone counts as removed.
        """
        pass


class FileLockMarker(LockMarker):
    """Lock marker stored as a one-line PID file.

    Conditional removal first renames the marker to a private sibling, so
    the token is checked on a file no other process can reach. A marker
    that turns out to belong to someone else is linked back into place.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None

    def create(self, token: str) -> bool:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(f"{token}\n")
        return True

    def remove(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass

    def remove_if(self, token: str) -> bool:
        claimed = self.path.with_name(f".{self.path.name}.{os.getpid()}.reclaim")
        try:
            os.rename(self.path, claimed)
        except FileNotFoundError:
            return True
        try:
            current = claimed.read_text(encoding="utf-8").strip()
            if current == token.strip():
                return True
            try:
                # Fails if a new marker was created meanwhile; that one wins
                os.link(claimed, self.path)
            except FileExistsError:
                pass
            return False
        finally:
            claimed.unlink()


def _parse_pid(token: Optional[str]) -> Optional[int]:
    if not token:
        return None
    try:
        return int(token.strip())
    except ValueError:
        return None


class ExecutionLock:
    """Process-wide mutual exclusion for regular runs.

    Usage::

        with ExecutionLock(FileLockMarker(path)):
            ...  # load, probe, save

    Only the process whose PID is recorded in the marker may release it.
    """

    def __init__(
        self,
        marker: LockMarker,
        *,
        pid: Optional[int] = None,
        is_alive: Callable[[int], bool] = pid_is_running,
        log: Logger = silent,
    ):
        self.marker = marker
        self.pid = pid if pid is not None else os.getpid()
        self._is_alive = is_alive
        self._log = log
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> None:
        """Take the lock or raise ``LockHeld``."""
        token = self.marker.read()
        if token is not None:
            owner = _parse_pid(token)
            if owner == self.pid:
                self._log(f"[lock] Already held by this process (PID {self.pid})")
                self._held = True
                return
            if owner is not None and self._is_alive(owner):
                raise LockHeld(owner)
            self._log(f"[lock] Removing stale lock for PID {token!r}")
            if not self.marker.remove_if(token):
                # Someone else reclaimed it between our read and the removal
                raise LockHeld(_parse_pid(self.marker.read()))

        if not self.marker.create(str(self.pid)):
            # Lost the race against a concurrent start
            raise LockHeld(_parse_pid(self.marker.read()))

        self._held = True
        self._log(f"[lock] Acquired (PID {self.pid})")

    def release(self) -> None:
        """Remove the marker if it still records this process."""
        if _parse_pid(self.marker.read()) == self.pid and self.marker.remove_if(str(self.pid)):
            self._log(f"[lock] Released (PID {self.pid})")
        self._held = False

    def __enter__(self) -> "ExecutionLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
