"""
Operator notification for intake results.

The processor only depends on MailService.send(); SMTP delivery and the
log-only fallback live here, outside the intake core.
"""

from __future__ import annotations

import logging
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import List, Optional

from src.case_intake.core.models import IntakeOutcome

logger = logging.getLogger(__name__)

SUBJECT_TEMPLATE = "Case Files Extract {status}"


@dataclass
class MailMessage:
    sender: str
    recipients: List[str]
    subject: str
    body: str


def compose_report(outcome: IntakeOutcome, admin_email: str) -> MailMessage:
    """Build the administrator report for one intake outcome."""
    if outcome.success:
        body = f"Case files were successfully extracted to '{outcome.destination_folder}'."
    else:
        body = f"Case files were unsuccessfully extracted. Reason: '{outcome.error_message}'."

    return MailMessage(
        sender=admin_email,
        recipients=[admin_email],
        subject=SUBJECT_TEMPLATE.format(status="Success" if outcome.success else "Failure"),
        body=body,
    )


class MailService(ABC):
    """Sends a composed mail message."""

    @abstractmethod
    def send(self, message: MailMessage) -> None: ...


class SmtpMailService(MailService):
    """Delivers reports through an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int = 25,
        username: Optional[str] = None,
        password: Optional[str] = None,
        starttls: bool = False,
        timeout: float = 30,
    ):
        if not host:
            raise ValueError("SMTP host is required")
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.starttls = starttls
        self.timeout = timeout

    @staticmethod
    def to_email_message(message: MailMessage) -> EmailMessage:
        email = EmailMessage()
        email["From"] = message.sender
        email["To"] = ", ".join(message.recipients)
        email["Subject"] = message.subject
        email.set_content(message.body)
        return email

    def send(self, message: MailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.starttls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(self.to_email_message(message))
        logger.debug(f"Sent '{message.subject}' to {', '.join(message.recipients)} via {self.host}:{self.port}")


class LoggingMailService(MailService):
    """Writes reports to the log instead of mailing them (no SMTP host configured)."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def send(self, message: MailMessage) -> None:
        self.log.info(f"[MAIL] To: {', '.join(message.recipients)} | {message.subject} | {message.body}")


@dataclass
class RecordingMailService(MailService):
    """Keeps sent messages in memory."""

    sent: List[MailMessage] = field(default_factory=list)

    def send(self, message: MailMessage) -> None:
        self.sent.append(message)

    @property
    def last(self) -> Optional[MailMessage]:
        return self.sent[-1] if self.sent else None


def build_mail_service(
    host: Optional[str],
    port: int = 25,
    username: Optional[str] = None,
    password: Optional[str] = None,
    starttls: bool = False,
    timeout: float = 30,
) -> MailService:
    """SMTP delivery when a host is configured, log-only otherwise."""
    if host:
        return SmtpMailService(host, port, username, password, starttls, timeout)
    logger.info("No SMTP host configured; intake reports will be written to the log")
    return LoggingMailService()
