"""Operator notification for intake results."""

from .mail import (
    LoggingMailService,
    MailMessage,
    MailService,
    RecordingMailService,
    SmtpMailService,
    build_mail_service,
    compose_report,
)

__all__ = [
    'MailMessage',
    'MailService',
    'SmtpMailService',
    'LoggingMailService',
    'RecordingMailService',
    'build_mail_service',
    'compose_report',
]
