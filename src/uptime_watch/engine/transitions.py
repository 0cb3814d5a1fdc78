"""Status transition and debouncing engine.

States per target are UP and DOWN(n), n being the consecutive failure count.
Given the previous record and a fresh observation, ``evaluate`` returns the
next record and the alert to send, if any.

Transition table (first match wins):

    previous   observed  next record                 alert
    --------   --------  --------------------------  ------------------------
    none       DOWN      DOWN(1), since=now          DOWN iff grace == 1
    none       UP        UP, since=now               none
    DOWN(k)    DOWN      DOWN(k+1), since kept       DOWN iff k+1 == grace
    UP         DOWN      DOWN(1), since=now          DOWN iff grace == 1
    DOWN(k)    UP        UP, since=now               UP iff k >= grace
    UP         UP        UP, since kept              none

A DOWN alert fires exactly once per streak, when the count reaches the grace
period, and an UP alert only follows a streak that was announced. The UP
alert's downtime is measured from the streak start, not from the last
failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..data.models import AlertEvent, AlertKind, ProbeResult, Status, StatusRecord
from ..log import Logger, silent


@dataclass(frozen=True)
class Transition:
    """Result of feeding one observation into the engine."""

    record: StatusRecord
    alert: Optional[AlertEvent] = None


def evaluate(
    previous: Optional[StatusRecord],
    observed: Status,
    now: int,
    grace_period: int,
    target: str = "",
    http_code: Optional[int] = None,
) -> Transition:
    """Apply one observation to the previous record of a target."""
    if grace_period < 1:
        raise ValueError("grace_period must be at least 1")

    if observed == Status.DOWN:
        if previous is not None and previous.is_down:
            count = previous.failure_count + 1
            since = previous.since
        else:
            count = 1
            since = now
        record = StatusRecord(status=Status.DOWN, since=since, failure_count=count)
        alert = None
        if count == grace_period:
            alert = AlertEvent(
                kind=AlertKind.DOWN,
                targets=(target,),
                since=since,
                http_code=http_code,
            )
        return Transition(record=record, alert=alert)

    if previous is None:
        return Transition(record=StatusRecord(status=Status.UP, since=now))

    if previous.is_down:
        record = StatusRecord(status=Status.UP, since=now)
        alert = None
        if previous.failure_count >= grace_period:
            alert = AlertEvent(
                kind=AlertKind.UP,
                targets=(target,),
                since=now,
                duration=now - previous.since,
            )
        return Transition(record=record, alert=alert)

    return Transition(record=StatusRecord(status=Status.UP, since=previous.since))


class TransitionEngine:
    """Applies probe results with a fixed grace period."""

    def __init__(self, grace_period: int, log: Logger = silent):
        if grace_period < 1:
            raise ValueError("grace_period must be at least 1")
        self.grace_period = grace_period
        self._log = log

    def apply(self, previous: Optional[StatusRecord], result: ProbeResult, now: int) -> Transition:
        transition = evaluate(
            previous,
            result.status,
            now,
            self.grace_period,
            target=result.target,
            http_code=result.http_code,
        )
        before = "none" if previous is None else f"{previous.status.value}({previous.failure_count})"
        after = f"{transition.record.status.value}({transition.record.failure_count})"
        self._log(f"[engine] {result.target}: {before} -> {after}")
        if transition.alert:
            self._log(f"[engine] {result.target}: {transition.alert.kind.value} alert due")
        return transition
