"""Activation mail fan-out.

Mails are queued on Celery and never block the request. Every dispatch is
isolated: one failure is logged and the remaining recipients still get theirs.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from booktrade.api.mailer import EmailMessage, render_email
from booktrade.config import Settings
from booktrade.models import Book, User
from booktrade.repository import Requester

logger = logging.getLogger(__name__)

Dispatch = Callable[[EmailMessage], object]


def queue_email(message: EmailMessage) -> object:
    """Default dispatch: hand the message to the ``send_email`` task."""
    from booktrade.tasks.mail import send_email

    return send_email.delay(
        to=message.to,
        subject=message.subject,
        html_body=message.html_body,
        text_body=message.text_body,
    )


class ActivationNotifier:
    """Sends the mails around a listing's activation."""

    def __init__(self, settings: Settings, dispatch: Dispatch | None = None):
        self.settings = settings
        self.dispatch = dispatch or queue_email

    def request_activation(self, book: Book) -> int:
        """Ask the administrator to review ``book``."""
        if not self.settings.admin_email:
            logger.warning(f"No admin e-mail configured; book {book.id} awaits activation")
            return 0
        link = self.settings.backend_url(f"upload/activate/{book.activation_code}")
        message = render_email(
            "activation_request",
            subject=f"New book to review: {book.title}",
            to=self.settings.admin_email,
            book=book,
            link=link,
        )
        return self._send_all([message])

    def notify_activated(self, owner: User | None, book: Book, requesters: Iterable[Requester]) -> int:
        """Confirm to the owner and tell active petitioners the book is here."""
        link = self.settings.frontend_url("login")
        messages: list[EmailMessage] = []

        if owner is not None:
            messages.append(
                render_email(
                    "upload_confirmed",
                    subject=f"Your book {book.title} is now published",
                    to=owner.email,
                    name=owner.name,
                    book=book,
                    link=link,
                )
            )
        else:
            logger.warning(f"Owner of book {book.id} not found; skipping confirmation")

        for requester in requesters:
            if not requester.active:
                continue
            messages.append(
                render_email(
                    "petition_available",
                    subject=f"{book.title} is available",
                    to=requester.email,
                    name=requester.name,
                    book=book,
                    link=link,
                )
            )

        return self._send_all(messages)

    def _send_all(self, messages: list[EmailMessage]) -> int:
        sent = 0
        for message in messages:
            try:
                self.dispatch(message)
                sent += 1
            except Exception as e:
                logger.warning(f"Could not queue mail to {message.to}: {e}")
        return sent
