"""Celery worker for outgoing mail.

Requests never talk to SMTP directly; they queue ``send_email`` on the
``mail`` queue and a worker delivers it. Run with::

    celery -A booktrade.tasks.celery_app worker -Q mail
"""

import ssl

from celery import Celery

from booktrade.config import settings

MAIL_QUEUE = "mail"


def redis_ssl_options(url: str):
    """Broker/backend SSL options for ``rediss://`` URLs (self-signed certs)."""
    if not url.startswith("rediss://"):
        return None
    return {"ssl_cert_reqs": ssl.CERT_NONE}


celery_app = Celery(
    "booktrade",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["booktrade.tasks.mail"],
)

celery_config = {
    "task_serializer": "json",
    "accept_content": ["json"],
    "result_serializer": "json",
    "result_expires": 3600,
    "timezone": "UTC",
    "enable_utc": True,
    "task_default_queue": MAIL_QUEUE,
    "task_routes": {"booktrade.tasks.mail.*": {"queue": MAIL_QUEUE}},
    "task_time_limit": 60,
    "task_acks_late": True,
    "worker_prefetch_multiplier": 1,
    # Tests and local runs without Redis deliver in-process
    "task_always_eager": settings.celery_task_always_eager,
}

ssl_options = redis_ssl_options(settings.redis_url)
if ssl_options:
    celery_config["broker_use_ssl"] = ssl_options
    celery_config["redis_backend_use_ssl"] = ssl_options

celery_app.conf.update(**celery_config)
