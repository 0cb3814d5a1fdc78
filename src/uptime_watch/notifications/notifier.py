"""Alert rendering and delivery."""

from __future__ import annotations

from typing import Iterable, Tuple

from ..data.models import AlertEvent, AlertKind
from ..engine.formatting import format_duration, format_timestamp, hostname_of
from ..log import Logger, silent
from .mailers import BaseMailer, DeliveryError

EMOJI_UP = "\u2705"  # green check mark
EMOJI_DOWN = "\U0001F534"  # red circle


def render(event: AlertEvent, tz_name: str = "UTC") -> Tuple[str, str]:
    """Build the (subject, body) pair for an alert."""
    if event.kind == AlertKind.SUMMARY:
        subject = f"{EMOJI_DOWN} DOWN Alert Summary"
        body = "The following sites are down:\n\n" + "".join(f"{line}\n" for line in event.lines)
        return subject, body

    url = event.target
    host = hostname_of(url)
    timestamp = format_timestamp(event.since, tz_name)

    if event.kind == AlertKind.DOWN:
        code = event.http_code if event.http_code is not None else 0
        subject = f"{EMOJI_DOWN} [{host}] DOWN Alert"
        body = f"{url} is down since {timestamp}.\n\nHTTP code: {code:03d}"
        return subject, body

    subject = f"{EMOJI_UP} [{host}] UP Alert"
    body = (
        f"{url} is UP again at {timestamp}, "
        f"after {format_duration(event.duration or 0)} of downtime."
    )
    return subject, body


class Notifier:
    """Sends alerts to every configured recipient.

    Delivery is best-effort: a failure for one recipient is logged and the
    remaining recipients are still tried.
    """

    def __init__(
        self,
        mailer: BaseMailer,
        recipients: Iterable[str],
        *,
        timezone: str = "UTC",
        log: Logger = silent,
    ):
        self.mailer = mailer
        self.recipients = tuple(recipients)
        self.timezone = timezone
        self._log = log

    def render(self, event: AlertEvent) -> Tuple[str, str]:
        return render(event, self.timezone)

    def notify(self, event: AlertEvent) -> int:
        """Deliver ``event``; returns the number of successful deliveries."""
        subject, body = self.render(event)
        if not self.recipients:
            self._log(f"[notify] No recipients configured, dropping: {subject}")
            return 0

        delivered = 0
        for recipient in self.recipients:
            try:
                self.mailer.send(recipient, subject, body)
            except DeliveryError as exc:
                self._log(f"[notify] Delivery failed: {exc}")
                continue
            delivered += 1
            self._log(f"[notify] Email sent to {recipient} with subject: {subject}")
        return delivered
