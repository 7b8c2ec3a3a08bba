from __future__ import annotations

import logging
from functools import lru_cache
from uuid import UUID

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session

from loanflow.config import settings
from loanflow.services.notifications import build_decision_message, record_notification
from loanflow.worker.celery_app import celery_app


logger = logging.getLogger(__name__)

NOTIFY_DECISION_TASK = "loanflow.notify_decision"


@lru_cache(maxsize=1)
def _sync_engine() -> Engine:
    return create_engine(settings.sync_database_url, pool_pre_ping=True)


def deliver_decision_notification(
    session: Session,
    *,
    application_id: str,
    recipient_id: str,
    decision: str,
    stage: str,
    approver_name: str | None,
    is_final: bool,
) -> str:
    message = build_decision_message(
        decision=decision,
        stage=stage,
        approver_name=approver_name,
        is_final=is_final,
    )
    record_notification(
        session,
        user_id=UUID(recipient_id),
        entity_id=UUID(application_id),
        message=message,
    )
    return message


@celery_app.task(name=NOTIFY_DECISION_TASK)
def notify_decision(
    application_id: str,
    recipient_id: str,
    decision: str,
    stage: str,
    approver_name: str | None,
    is_final: bool,
) -> None:
    """Write the applicant's in-app notification for a recorded decision."""

    with Session(_sync_engine()) as session, session.begin():
        deliver_decision_notification(
            session,
            application_id=application_id,
            recipient_id=recipient_id,
            decision=decision,
            stage=stage,
            approver_name=approver_name,
            is_final=is_final,
        )

    logger.info(
        "decision notification stored",
        extra={"application_id": application_id, "recipient_id": recipient_id},
    )
