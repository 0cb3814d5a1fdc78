"""Notifications - mail transports, alert rendering, and summary reports."""

from .mailers import BaseMailer, DeliveryError, MailxMailer, SmtpMailer, create_mailer
from .notifier import Notifier, render
from .summary import SummaryReporter

__all__ = [
    "BaseMailer",
    "DeliveryError",
    "MailxMailer",
    "SmtpMailer",
    "create_mailer",
    "Notifier",
    "render",
    "SummaryReporter",
]
