"""Deliver one rendered e-mail."""

import logging

from booktrade.api.mailer import EmailMessage, smtp_mailer
from booktrade.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def send_email(self, to: str, subject: str, html_body: str, text_body: str = None):
    """Send a single message; SMTP errors are retried a minute later."""
    message = EmailMessage(to=to, subject=subject, html_body=html_body, text_body=text_body)
    try:
        sent = smtp_mailer.send(message)
        return {"status": "sent" if sent else "skipped", "to": to}
    except Exception as e:
        logger.error(f"Mail to {to} failed: {e}")
        raise self.retry(exc=e, countdown=60)
