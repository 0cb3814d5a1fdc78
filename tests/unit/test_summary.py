"""Tests for summary reporting."""

from conftest import InMemoryStatusStore
from uptime_watch.data.models import AlertKind, Status, StatusRecord
from uptime_watch.notifications.notifier import Notifier
from uptime_watch.notifications.summary import SummaryReporter

NOW = 1_700_000_000


def make_reporter(records, mailer, grace_period=2):
    store = InMemoryStatusStore(records)
    notifier = Notifier(mailer, ["ops@x"])
    reporter = SummaryReporter(store, notifier, grace_period, clock=lambda: NOW)
    return reporter, store


class TestSummaryReporter:
    def test_below_grace_excluded(self, mailer):
        reporter, _ = make_reporter({"https://a": StatusRecord(Status.DOWN, NOW - 60, 1)}, mailer)
        assert reporter.run() is None
        assert mailer.sent == []

    def test_at_grace_included(self, mailer):
        reporter, _ = make_reporter({"https://a": StatusRecord(Status.DOWN, NOW - 125, 2)}, mailer)
        event = reporter.run()

        assert event.kind == AlertKind.SUMMARY
        assert event.targets == ("https://a",)
        assert event.lines == (
            "https://a is down since November 14, 2023 22:11:15 UTC, down for 3m",
        )
        assert len(mailer.sent) == 1
        recipient, subject, body = mailer.sent[0]
        assert subject == "\U0001F534 DOWN Alert Summary"
        assert body.startswith("The following sites are down:\n\nhttps://a is down since")

    def test_one_consolidated_alert(self, mailer):
        records = {
            "https://b": StatusRecord(Status.DOWN, NOW - 3661, 5),
            "https://a": StatusRecord(Status.DOWN, NOW - 90000, 3),
            "https://up": StatusRecord(Status.UP, NOW - 10),
            "https://flaky": StatusRecord(Status.DOWN, NOW - 10, 1),
        }
        reporter, _ = make_reporter(records, mailer)
        event = reporter.run()

        assert event.targets == ("https://a", "https://b")
        assert event.lines[0].endswith("down for 1d 1h 0m")
        assert event.lines[1].endswith("down for 1h 1m")
        assert len(mailer.sent) == 1

    def test_nothing_down_sends_nothing(self, mailer):
        reporter, _ = make_reporter({"https://up": StatusRecord(Status.UP, NOW)}, mailer)
        assert reporter.run() is None
        assert mailer.sent == []

    def test_does_not_write_store(self, mailer):
        reporter, store = make_reporter({"https://a": StatusRecord(Status.DOWN, NOW - 60, 4)}, mailer)
        reporter.run()
        assert store.saves == 0
