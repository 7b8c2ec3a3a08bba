from __future__ import annotations

import logging

from loanflow.config import settings
from loanflow.services.approval_workflow import DecisionResult


logger = logging.getLogger("loanflow.tasks")


def emit_decision_notification(result: DecisionResult) -> bool:
    """Queue the applicant notification for a committed decision.

    Best effort: returns False (and logs) instead of raising, so a broker
    outage never turns a recorded decision into a failed request.
    """

    if not settings.celery_enabled:
        return False

    if result.applicant_user_id is None:
        logger.info("no applicant to notify application_id=%s", result.application_id)
        return False

    from loanflow.worker.celery_app import celery_app
    from loanflow.worker.tasks import NOTIFY_DECISION_TASK

    try:
        celery_app.send_task(
            NOTIFY_DECISION_TASK,
            kwargs={
                "application_id": str(result.application_id),
                "recipient_id": str(result.applicant_user_id),
                "decision": result.action.value,
                "stage": result.stage.value,
                "approver_name": result.approver_name,
                "is_final": result.is_final_decision,
            },
        )
    except Exception:
        logger.exception(
            "Failed to emit %s for application_id=%s",
            NOTIFY_DECISION_TASK,
            result.application_id,
        )
        return False

    return True
