from __future__ import annotations

from celery import Celery

from loanflow.config import settings


def make_celery() -> Celery:
    """Create the Celery app.

    Kept in a function so tests can import tasks without eagerly touching
    global state beyond settings.
    """

    celery = Celery(
        "loanflow",
        broker=settings.redis_url,
        backend=settings.redis_url,
        include=["loanflow.worker.tasks"],
    )

    celery.conf.update(
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        timezone="UTC",
        enable_utc=True,
    )

    return celery


celery_app = make_celery()
