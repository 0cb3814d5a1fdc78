"""Status persistence layer.

The status file is a flat text file with one line per target::

    <url> <status> <since-epoch-seconds> <failure-count>

It is read once at process start and rewritten as a whole at the end of a
regular run. Rewrites go through a sibling temp file and ``os.replace`` so a
concurrent reader sees either the old or the new content.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Tuple

from ..log import Logger, silent
from .models import Status, StatusRecord


class BaseStatusStore(ABC):
    """Abstract status store: load and save a mapping of target -> record."""

    @abstractmethod
    def load(self) -> Dict[str, StatusRecord]:
        """Return every persisted record. A missing store is empty."""
        pass

    @abstractmethod
    def save(self, records: Dict[str, StatusRecord]) -> None:
        """Replace the whole store with ``records``."""
        pass


def parse_status_line(line: str) -> Optional[Tuple[str, StatusRecord]]:
    """Parse one status file line into ``(target, StatusRecord)``.

    A missing or non-numeric failure count is read as 0. Returns None for
    blank or unusable lines (too few fields, unknown status, bad timestamp).
    """
    fields = line.split()
    if len(fields) < 3:
        return None

    target, raw_status, raw_since = fields[0], fields[1].lower(), fields[2]
    try:
        status = Status(raw_status)
        since = int(raw_since)
    except ValueError:
        return None

    failure_count = 0
    if len(fields) >= 4:
        try:
            failure_count = max(0, int(fields[3]))
        except ValueError:
            failure_count = 0

    if status == Status.UP:
        failure_count = 0

    return target, StatusRecord(status=status, since=since, failure_count=failure_count)


class FileStatusStore(BaseStatusStore):
    """Status store backed by the flat status file."""

    def __init__(self, path: Path, log: Logger = silent):
        self.path = Path(path)
        self._log = log

    def load(self) -> Dict[str, StatusRecord]:
        if not self.path.exists():
            self._log(f"[store] {self.path} not found, starting empty")
            return {}

        records: Dict[str, StatusRecord] = {}
        for line in self.path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            parsed = parse_status_line(line)
            if parsed is None:
                self._log(f"[store] Skipping malformed line: {line!r}")
                continue
            target, record = parsed
            records[target] = record

        self._log(f"[store] Loaded {len(records)} records from {self.path}")
        return records

    def save(self, records: Dict[str, StatusRecord]) -> None:
        content = "".join(f"{record.to_line(target)}\n" for target, record in records.items())

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f".{self.path.name}.{os.getpid()}.tmp")
        try:
            tmp_path.write_text(content, encoding="utf-8")
            os.replace(tmp_path, self.path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

        for target, record in records.items():
            self._log(f"[store] Status updated for: {record.to_line(target)}")
        self._log(f"[store] Wrote {len(records)} records to {self.path}")
