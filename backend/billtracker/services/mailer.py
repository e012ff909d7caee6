# billtracker/services/mailer.py
import logging
import mimetypes
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Sequence

logger = logging.getLogger(__name__)


@dataclass
class MailAttachment:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def guess(cls, filename: str, content: bytes) -> "MailAttachment":
        ctype, _ = mimetypes.guess_type(filename)
        return cls(filename=filename, content=content, content_type=ctype or "application/octet-stream")


class SmtpMailer:
    """Delivers through an SMTP server with STARTTLS (Gmail app passwords work)."""

    def __init__(self, host: str, port: int, username: str, password: str, sender: str = "", timeout: int = 30):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or f"Sistema Financeiro <{username}>"
        self.timeout = timeout

    def build_message(
        self, to: str, subject: str, html_body: str, text_body: str, attachments: Sequence[MailAttachment] = ()
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text_body)
        msg.add_alternative(html_body, subtype="html")
        for att in attachments:
            maintype, _, subtype = att.content_type.partition("/")
            msg.add_attachment(att.content, maintype=maintype, subtype=subtype or "octet-stream", filename=att.filename)
        return msg

    def send(
        self, to: str, subject: str, html_body: str, text_body: str, attachments: Sequence[MailAttachment] = ()
    ) -> None:
        msg = self.build_message(to, subject, html_body, text_body, attachments)
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.starttls()
            smtp.login(self.username, self.password)
            smtp.send_message(msg)
        logger.info("Mail sent to %s (%s)", to, subject)


class LogMailer:
    """Used when SMTP credentials are not configured: log instead of sending."""

    def send(
        self, to: str, subject: str, html_body: str, text_body: str, attachments: Sequence[MailAttachment] = ()
    ) -> None:
        logger.warning("SMTP not configured, reminder only recorded: to=%s subject=%s", to, subject)


def mailer_from_settings(settings):
    if settings.mail_enabled:
        return SmtpMailer(
            settings.SMTP_HOST,
            settings.SMTP_PORT,
            settings.SMTP_USER,
            settings.SMTP_PASSWORD,
            sender=settings.MAIL_FROM,
        )
    return LogMailer()
