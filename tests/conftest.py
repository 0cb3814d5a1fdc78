"""Pytest configuration, shared fixtures, and in-memory fakes."""

import pytest
from pathlib import Path
from tempfile import TemporaryDirectory

from uptime_watch.data.lock import LockMarker
from uptime_watch.data.models import ProbeResult
from uptime_watch.data.persistence import BaseStatusStore
from uptime_watch.notifications.mailers import BaseMailer, DeliveryError
from uptime_watch.probes.base import BaseProbe, classify


class InMemoryStatusStore(BaseStatusStore):
    def __init__(self, records=None):
        self.records = dict(records or {})
        self.saves = 0

    def load(self):
        return dict(self.records)

    def save(self, records):
        self.records = dict(records)
        self.saves += 1


class InMemoryLockMarker(LockMarker):
    def __init__(self, token=None):
        self.token = token

    def read(self):
        return self.token

    def create(self, token):
        if self.token is not None:
            return False
        self.token = token
        return True

    def remove(self):
        self.token = None

    def remove_if(self, token):
        if self.token is not None and self.token != token:
            return False
        self.token = None
        return True


class RecordingMailer(BaseMailer):
    def __init__(self, failing=()):
        self.sent = []
        self.failing = set(failing)

    @property
    def name(self):
        return "recording"

    def send(self, recipient, subject, body):
        if recipient in self.failing:
            raise DeliveryError(recipient, "rejected")
        self.sent.append((recipient, subject, body))


class ScriptedProber(BaseProbe):
    """Returns preset HTTP codes per target (last code repeats)."""

    def __init__(self, codes):
        self.codes = {target: list(seq) for target, seq in codes.items()}
        self.calls = []

    @property
    def name(self):
        return "scripted"

    def set(self, target, *codes):
        self.codes[target] = list(codes)

    def probe(self, target):
        self.calls.append(target)
        seq = self.codes[target]
        code = seq.pop(0) if len(seq) > 1 else seq[0]
        return ProbeResult(target=target, http_code=code, status=classify(code))


class FakeClock:
    def __init__(self, now=1_700_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def temp_data_dir():
    """Create a temporary data directory for tests."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def memory_store():
    return InMemoryStatusStore()


@pytest.fixture
def lock_marker():
    return InMemoryLockMarker()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample_status_file(temp_data_dir):
    """Status file mixing current, legacy 3-field, and malformed lines."""
    path = temp_data_dir / "websites_status.txt"
    path.write_text(
        "https://example.com up 1700000000 0\n"
        "https://down.example.com down 1699990000 4\n"
        "https://legacy.example.com down 1699980000\n"
        "\n"
        "garbage\n"
        "https://bad.example.com sideways 1699980000 1\n"
        "https://badts.example.com down yesterday 2\n"
        "https://badcount.example.com down 1699970000 many\n",
        encoding="utf-8",
    )
    return path
