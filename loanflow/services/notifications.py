from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from loanflow.models.notification import Notification
from loanflow.services.workflow_stages import Decision, Stage, next_stage


def build_decision_message(
    *,
    decision: Decision | str,
    stage: Stage | str,
    approver_name: str | None,
    is_final: bool,
) -> str:
    """Applicant-facing text for a recorded decision."""

    decision = Decision(decision)
    stage = Stage(stage)
    who = f"{approver_name or 'an approver'} ({stage.value})"

    if decision is Decision.REJECT:
        return f"Your loan application has been rejected by {who}."
    if is_final:
        return f"Your loan application has been APPROVED by {who}. Congratulations!"

    nxt = next_stage(stage)
    return f"Your loan application has been approved by {who} and moved to {nxt.value if nxt else 'the next'} stage."


def record_notification(
    session: Session,
    *,
    user_id: UUID,
    entity_id: UUID,
    message: str,
    related_to: str = "loan_application",
) -> Notification:
    notification = Notification(
        user_id=user_id,
        entity_id=entity_id,
        message=message,
        related_to=related_to,
        is_read=False,
    )
    session.add(notification)
    session.flush()
    return notification
