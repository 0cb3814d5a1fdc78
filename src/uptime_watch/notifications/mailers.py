"""Mail transports.

Two interchangeable ways to deliver a subject and body to one recipient:
piping to the ``mailx`` command, or talking SMTP directly.
"""

from __future__ import annotations

import smtplib
import subprocess
from abc import ABC, abstractmethod
from email.message import EmailMessage
from typing import Optional

from ..app.config import MailSettings


class DeliveryError(Exception):
    """Exception raised when a message could not be handed to the transport."""

    def __init__(self, recipient: str, message: str, cause: Optional[Exception] = None):
        self.recipient = recipient
        self.cause = cause
        super().__init__(f"[{recipient}] {message}")


class BaseMailer(ABC):
    """Abstract base class for mail transports."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier (e.g., 'mailx', 'smtp')."""
        pass

    @abstractmethod
    def send(self, recipient: str, subject: str, body: str) -> None:
        """Deliver one message.

        Raises:
            DeliveryError: If the transport rejected the message.
        """
        pass


class MailxMailer(BaseMailer):
    """Deliver through the local ``mailx`` command (``mailx -s subject rcpt``)."""

    def __init__(self, command: str = "mailx", timeout: float = 15):
        self.command = command
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "mailx"

    def send(self, recipient: str, subject: str, body: str) -> None:
        try:
            result = subprocess.run(
                [self.command, "-s", subject, recipient],
                input=body,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise DeliveryError(recipient, f"{self.command} timed out", exc) from exc
        except OSError as exc:
            raise DeliveryError(recipient, f"could not run {self.command}: {exc}", exc) from exc

        if result.returncode != 0:
            detail = (result.stderr or "").strip() or f"exit code {result.returncode}"
            raise DeliveryError(recipient, f"{self.command} failed: {detail}")


class SmtpMailer(BaseMailer):
    """Deliver through an SMTP relay, optionally with STARTTLS and login."""

    def __init__(
        self,
        host: str,
        port: int = 25,
        *,
        sender: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = False,
        timeout: float = 15,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "smtp"

    def build_message(self, recipient: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    def send(self, recipient: str, subject: str, body: str) -> None:
        msg = self.build_message(recipient, subject, body)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except smtplib.SMTPException as exc:
            raise DeliveryError(recipient, f"SMTP error: {exc}", exc) from exc
        except OSError as exc:
            raise DeliveryError(recipient, f"cannot reach {self.host}:{self.port}: {exc}", exc) from exc


def create_mailer(settings: MailSettings) -> BaseMailer:
    """Build the mailer selected by ``settings.transport``."""
    if settings.transport == "smtp":
        return SmtpMailer(
            settings.smtp_host,
            settings.smtp_port,
            sender=settings.sender,
            username=settings.username,
            password=settings.password,
            use_tls=settings.use_tls,
            timeout=settings.timeout,
        )
    return MailxMailer(command=settings.command, timeout=settings.timeout)
