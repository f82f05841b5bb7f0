"""Outbound service clients."""

from booktrade.api.mailer import EmailMessage, SmtpMailer, render_email

__all__ = [
    "EmailMessage",
    "SmtpMailer",
    "render_email",
]
