"""Summary reporting from the persisted status only (no probing, no lock)."""

from __future__ import annotations

import time
from typing import Callable, Dict, Optional

from ..data.models import AlertEvent, AlertKind, StatusRecord
from ..data.persistence import BaseStatusStore
from ..engine.formatting import format_duration, format_timestamp
from ..log import Logger, silent
from .notifier import Notifier


class SummaryReporter:
    """Send one consolidated alert listing every target past the grace period."""

    def __init__(
        self,
        store: BaseStatusStore,
        notifier: Notifier,
        grace_period: int,
        *,
        clock: Callable[[], float] = time.time,
        timezone: str = "UTC",
        log: Logger = silent,
    ):
        self.store = store
        self.notifier = notifier
        self.grace_period = grace_period
        self._clock = clock
        self.timezone = timezone
        self._log = log

    def build(self, records: Dict[str, StatusRecord], now: int) -> Optional[AlertEvent]:
        """Return the SUMMARY event for ``records``, or None if nothing is down."""
        targets = []
        lines = []
        for target in sorted(records):
            record = records[target]
            if not record.is_down or record.failure_count < self.grace_period:
                continue
            since = format_timestamp(record.since, self.timezone)
            duration = format_duration(now - record.since)
            targets.append(target)
            lines.append(f"{target} is down since {since}, down for {duration}")

        if not lines:
            return None
        return AlertEvent(kind=AlertKind.SUMMARY, targets=tuple(targets), since=now, lines=tuple(lines))

    def run(self) -> Optional[AlertEvent]:
        self._log("[summary] Reading previous status for summary...")
        records = self.store.load()
        event = self.build(records, int(self._clock()))
        if event is None:
            self._log("[summary] No sites down, nothing to send")
            return None
        self._log(f"[summary] {len(event.lines)} sites down")
        self.notifier.notify(event)
        return event
