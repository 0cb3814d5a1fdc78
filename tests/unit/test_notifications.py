"""Tests for alert rendering, delivery, and mail transports."""

import smtplib
import subprocess

import pytest
from unittest.mock import MagicMock, patch

from conftest import RecordingMailer
from uptime_watch.app.config import MailSettings
from uptime_watch.data.models import AlertEvent, AlertKind
from uptime_watch.notifications.mailers import (
    DeliveryError,
    MailxMailer,
    SmtpMailer,
    create_mailer,
)
from uptime_watch.notifications.notifier import Notifier, render

SINCE = 1_700_000_000  # November 14, 2023 22:13:20 UTC


class TestRender:
    def test_down(self):
        event = AlertEvent(AlertKind.DOWN, ("https://example.com/health",), SINCE, http_code=500)
        subject, body = render(event, "UTC")

        assert subject == "\U0001F534 [example.com] DOWN Alert"
        assert body == (
            "https://example.com/health is down since November 14, 2023 22:13:20 UTC."
            "\n\nHTTP code: 500"
        )

    def test_down_no_response(self):
        event = AlertEvent(AlertKind.DOWN, ("https://example.com",), SINCE, http_code=0)
        _, body = render(event, "UTC")
        assert body.endswith("HTTP code: 000")

    def test_up(self):
        event = AlertEvent(AlertKind.UP, ("https://example.com",), SINCE, duration=3661)
        subject, body = render(event, "UTC")

        assert subject == "✅ [example.com] UP Alert"
        assert body == (
            "https://example.com is UP again at November 14, 2023 22:13:20 UTC, "
            "after 1h 1m of downtime."
        )

    def test_summary(self):
        event = AlertEvent(
            AlertKind.SUMMARY,
            ("https://a", "https://b"),
            SINCE,
            lines=("line a", "line b"),
        )
        subject, body = render(event)

        assert subject == "\U0001F534 DOWN Alert Summary"
        assert body == "The following sites are down:\n\nline a\nline b\n"

    def test_timezone_applied(self):
        event = AlertEvent(AlertKind.DOWN, ("https://example.com",), SINCE, http_code=500)
        _, body = render(event, "America/Winnipeg")
        assert "November 14, 2023 16:13:20 CST" in body


class TestNotifier:
    def test_sends_to_every_recipient(self, mailer):
        notifier = Notifier(mailer, ["a@x", "b@x"])
        event = AlertEvent(AlertKind.DOWN, ("https://example.com",), SINCE, http_code=500)

        assert notifier.notify(event) == 2
        assert [r for r, _, _ in mailer.sent] == ["a@x", "b@x"]
        assert mailer.sent[0][1] == "\U0001F534 [example.com] DOWN Alert"

    def test_failure_does_not_stop_other_recipients(self):
        mailer = RecordingMailer(failing={"a@x"})
        messages = []
        notifier = Notifier(mailer, ["a@x", "b@x", "c@x"], log=messages.append)
        event = AlertEvent(AlertKind.UP, ("https://example.com",), SINCE, duration=60)

        assert notifier.notify(event) == 2
        assert [r for r, _, _ in mailer.sent] == ["b@x", "c@x"]
        assert any("Delivery failed" in m and "a@x" in m for m in messages)

    def test_no_recipients(self, mailer):
        notifier = Notifier(mailer, [])
        event = AlertEvent(AlertKind.UP, ("https://example.com",), SINCE, duration=60)
        assert notifier.notify(event) == 0
        assert mailer.sent == []


class TestMailxMailer:
    @patch("subprocess.run")
    def test_send(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stderr="")
        MailxMailer(command="mailx", timeout=5).send("ops@x", "Subject", "Body")

        mock_run.assert_called_once_with(
            ["mailx", "-s", "Subject", "ops@x"],
            input="Body",
            capture_output=True,
            text=True,
            timeout=5,
        )

    @patch("subprocess.run")
    def test_nonzero_exit(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stderr="no such user")
        with pytest.raises(DeliveryError) as excinfo:
            MailxMailer().send("ops@x", "S", "B")
        assert excinfo.value.recipient == "ops@x"
        assert "no such user" in str(excinfo.value)

    @patch("subprocess.run", side_effect=FileNotFoundError("mailx"))
    def test_missing_command(self, mock_run):
        with pytest.raises(DeliveryError):
            MailxMailer().send("ops@x", "S", "B")

    @patch("subprocess.run", side_effect=subprocess.TimeoutExpired("mailx", 5))
    def test_timeout(self, mock_run):
        with pytest.raises(DeliveryError):
            MailxMailer().send("ops@x", "S", "B")


class TestSmtpMailer:
    @patch("smtplib.SMTP")
    def test_send_with_tls_and_login(self, mock_smtp):
        server = mock_smtp.return_value.__enter__.return_value
        mailer = SmtpMailer(
            "mail.local", 587, sender="uw@local", username="u", password="p", use_tls=True, timeout=3
        )
        mailer.send("ops@x", "Subject", "Body")

        mock_smtp.assert_called_once_with("mail.local", 587, timeout=3)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("u", "p")
        msg = server.send_message.call_args[0][0]
        assert msg["To"] == "ops@x"
        assert msg["From"] == "uw@local"
        assert msg["Subject"] == "Subject"
        assert msg.get_content().strip() == "Body"

    @patch("smtplib.SMTP")
    def test_plain_without_login(self, mock_smtp):
        server = mock_smtp.return_value.__enter__.return_value
        SmtpMailer("localhost", sender="uw@local").send("ops@x", "S", "B")
        server.starttls.assert_not_called()
        server.login.assert_not_called()

    @patch("smtplib.SMTP", side_effect=ConnectionRefusedError("refused"))
    def test_unreachable(self, mock_smtp):
        with pytest.raises(DeliveryError):
            SmtpMailer("localhost", sender="uw@local").send("ops@x", "S", "B")

    @patch("smtplib.SMTP")
    def test_smtp_error(self, mock_smtp):
        server = mock_smtp.return_value.__enter__.return_value
        server.send_message.side_effect = smtplib.SMTPRecipientsRefused({"ops@x": (550, b"no")})
        with pytest.raises(DeliveryError):
            SmtpMailer("localhost", sender="uw@local").send("ops@x", "S", "B")


class TestCreateMailer:
    def test_default_is_mailx(self):
        mailer = create_mailer(MailSettings())
        assert isinstance(mailer, MailxMailer)
        assert mailer.name == "mailx"

    def test_smtp(self):
        mailer = create_mailer(MailSettings(transport="smtp", smtp_host="relay", smtp_port=2525))
        assert isinstance(mailer, SmtpMailer)
        assert (mailer.host, mailer.port) == ("relay", 2525)
