"""Data models for uptime monitoring.

This module defines the core data structures shared by the prober, the
transition engine and the notifiers:

1. STATUS VALUES
   - Target: up, down (lowercase, the spelling used in the status file)
   - Alert kinds: DOWN, UP, SUMMARY

2. EXPLICIT UNITS
   - Timestamps: integer seconds since the epoch
   - Durations: integer seconds
   - HTTP codes: integers, 0 meaning "no response at all"

3. INVARIANTS
   - failure_count > 0 implies status == down
   - status == up implies failure_count == 0
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


# =============================================================================
# Status Enumerations
# =============================================================================


class Status(str, Enum):
    """Availability of a single target."""

    UP = "up"  # Answered with a 2xx or 3xx code
    DOWN = "down"  # Error code or no response at all


class AlertKind(str, Enum):
    """Kind of notification produced during a run."""

    DOWN = "DOWN"  # Down streak crossed the grace period
    UP = "UP"  # Recovered after an announced down streak
    SUMMARY = "SUMMARY"  # Consolidated list of targets still down


# =============================================================================
# Persisted State
# =============================================================================


@dataclass(frozen=True)
class StatusRecord:
    """Last known status of one target, as persisted between runs.

    Attributes:
        status: Current status of the streak
        since: Epoch seconds at which the current streak started
        failure_count: Consecutive down observations since the last up
    """

    status: Status
    since: int
    failure_count: int = 0

    def __post_init__(self):
        if self.failure_count < 0:
            raise ValueError("failure_count must be non-negative")
        if self.status == Status.UP and self.failure_count:
            raise ValueError("an up record cannot carry failures")

    @property
    def is_down(self) -> bool:
        return self.status == Status.DOWN

    def to_line(self, target: str) -> str:
        """Render as a status file line."""
        return f"{target} {self.status.value} {self.since} {self.failure_count}"


# =============================================================================
# Transient Results
# =============================================================================


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of probing one target."""

    target: str
    http_code: int
    status: Status
    attempts: int = 1

    @property
    def code_str(self) -> str:
        """HTTP code zero-padded to three digits (``000`` for no response)."""
        return f"{self.http_code:03d}"


@dataclass(frozen=True)
class AlertEvent:
    """A notification to be rendered and delivered. Never persisted.

    DOWN events carry the streak start in ``since`` and the probe code;
    UP events carry the recovery time in ``since`` and the downtime in
    ``duration``; SUMMARY events carry pre-rendered ``lines``.
    """

    kind: AlertKind
    targets: Tuple[str, ...]
    since: int
    duration: Optional[int] = None
    http_code: Optional[int] = None
    lines: Tuple[str, ...] = ()

    @property
    def target(self) -> str:
        """The single target of a DOWN or UP event."""
        return self.targets[0] if self.targets else ""
