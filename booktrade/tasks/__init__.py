"""Celery tasks."""

from booktrade.tasks.celery_app import celery_app
from booktrade.tasks.mail import send_email

__all__ = [
    "celery_app",
    "send_email",
]
