"""Regular check run: lock, load, probe, transition, notify, save."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Sequence

from ..data.lock import ExecutionLock
from ..data.models import AlertEvent, ProbeResult, StatusRecord
from ..data.persistence import BaseStatusStore
from ..engine.transitions import TransitionEngine
from ..log import Logger, silent
from ..notifications.notifier import Notifier
from ..probes.base import BaseProbe


@dataclass
class RunReport:
    """What a regular run observed and decided."""

    results: List[ProbeResult] = field(default_factory=list)
    alerts: List[AlertEvent] = field(default_factory=list)
    records: Dict[str, StatusRecord] = field(default_factory=dict)


class CheckRunner:
    """Runs one probing pass over every target under the execution lock."""

    def __init__(
        self,
        targets: Sequence[str],
        *,
        prober: BaseProbe,
        store: BaseStatusStore,
        lock: ExecutionLock,
        engine: TransitionEngine,
        notifier: Notifier,
        clock: Callable[[], float] = time.time,
        log: Logger = silent,
    ):
        self.targets = tuple(targets)
        self.prober = prober
        self.store = store
        self.lock = lock
        self.engine = engine
        self.notifier = notifier
        self._clock = clock
        self._log = log

    def run(self) -> RunReport:
        """Execute the run.

        Raises:
            LockHeld: If another live process is running; the store is not touched.
        """
        with self.lock:
            return self._run_locked()

    def _run_locked(self) -> RunReport:
        previous = self.store.load()
        report = RunReport()

        for target in self.targets:
            self._log(f"[run] Checking website: {target}")
            result = self.prober.probe(target)
            report.results.append(result)

            transition = self.engine.apply(previous.get(target), result, int(self._clock()))
            if transition.alert is not None:
                report.alerts.append(transition.alert)
                self.notifier.notify(transition.alert)
            report.records[target] = transition.record

        self.store.save(report.records)
        self._log(f"[run] All {len(self.targets)} websites checked, {len(report.alerts)} alerts sent")
        return report
