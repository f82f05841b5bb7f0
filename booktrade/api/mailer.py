"""SMTP mail client and e-mail templates."""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from booktrade.config import Settings, settings

logger = logging.getLogger(__name__)

templates = Environment(
    loader=PackageLoader("booktrade", "templates"),
    autoescape=select_autoescape(["html"]),
)


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html_body: str
    text_body: Optional[str] = None


def render_email(template: str, subject: str, to: str, **context: Any) -> EmailMessage:
    """Render ``emails/<template>.html`` and ``.txt`` into a message."""
    html = templates.get_template(f"emails/{template}.html").render(**context)
    text = templates.get_template(f"emails/{template}.txt").render(**context)
    return EmailMessage(to=to, subject=subject, html_body=html, text_body=text)


class SmtpMailer:
    """Sends e-mail through the configured SMTP relay."""

    def __init__(self, config: Settings | None = None):
        self.config = config or settings

    @property
    def is_configured(self) -> bool:
        return bool(self.config.smtp_host and self.config.smtp_user and self.config.smtp_password)

    def build(self, message: EmailMessage) -> MIMEMultipart:
        from_email = self.config.smtp_from_email or self.config.smtp_user
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = f"{self.config.smtp_from_name} <{from_email}>"
        msg["To"] = message.to

        if message.text_body:
            msg.attach(MIMEText(message.text_body, "plain"))
        msg.attach(MIMEText(message.html_body, "html"))
        return msg

    def send(self, message: EmailMessage) -> bool:
        """Send one message. Returns False when SMTP is not configured.

        SMTP failures propagate so the calling task can retry.
        """
        if not self.is_configured:
            logger.warning(f"SMTP not configured; dropping mail to {message.to}: {message.subject}")
            return False

        msg = self.build(message)
        from_email = self.config.smtp_from_email or self.config.smtp_user

        # SMTP_SSL for port 465, SMTP + STARTTLS otherwise
        if self.config.smtp_port == 465:
            with smtplib.SMTP_SSL(self.config.smtp_host, self.config.smtp_port) as server:
                server.login(self.config.smtp_user, self.config.smtp_password)
                server.sendmail(from_email, message.to, msg.as_string())
        else:
            with smtplib.SMTP(self.config.smtp_host, self.config.smtp_port) as server:
                server.starttls()
                server.login(self.config.smtp_user, self.config.smtp_password)
                server.sendmail(from_email, message.to, msg.as_string())

        logger.info(f"Sent mail to {message.to}: {message.subject}")
        return True


# Global mailer instance
smtp_mailer = SmtpMailer()
