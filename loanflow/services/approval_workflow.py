from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from loanflow.config import settings
from loanflow.crud.application import get_application
from loanflow.crud.user import user_crud
from loanflow.crud.workflow import get_workflow, insert_workflow_if_absent
from loanflow.models.approval_workflow import ApprovalWorkflow
from loanflow.models.base import utcnow
from loanflow.models.loan_application import LoanApplication
from loanflow.models.workflow_log import WorkflowLog
from loanflow.services.errors import (
    InvalidTransition,
    NotFound,
    PersistenceError,
    UnauthorizedStage,
    WorkflowError,
)
from loanflow.services.workflow_stages import (
    INITIAL_STAGE,
    ApplicationStatus,
    Decision,
    FinalResult,
    Stage,
    WorkflowOutcome,
    is_terminal_status,
    next_stage,
    pending_status,
    role_can_act,
)


logger = logging.getLogger("loanflow.workflow")


@dataclass(frozen=True)
class WorkflowDefaults:
    """Values seeded into a new workflow."""

    field_officer_note: str = field(default_factory=lambda: settings.field_officer_default_note)


@dataclass(frozen=True)
class DecisionResult:
    application_id: UUID
    action: Decision
    stage: Stage
    status: ApplicationStatus
    # None once the workflow is terminal.
    current_stage: Stage | None
    is_final_decision: bool
    final_result: FinalResult | None
    approver_id: UUID
    approver_name: str | None
    applicant_user_id: UUID | None


@dataclass(frozen=True)
class _Transition:
    approved: bool
    status: ApplicationStatus
    current_stage: Stage
    current_approver: str | None
    outcome: WorkflowOutcome | None
    final_result: FinalResult | None


def _plan_transition(stage: Stage, decision: Decision) -> _Transition:
    if decision is Decision.REJECT:
        return _Transition(
            approved=False,
            status=ApplicationStatus.REJECTED,
            current_stage=stage,
            current_approver=None,
            outcome=WorkflowOutcome.REJECTED,
            final_result=FinalResult.FAILED,
        )

    nxt = next_stage(stage)
    if nxt is None:
        return _Transition(
            approved=True,
            status=ApplicationStatus.APPROVED,
            current_stage=stage,
            current_approver=None,
            outcome=WorkflowOutcome.APPROVED,
            final_result=FinalResult.SUCCESSFUL,
        )

    return _Transition(
        approved=True,
        status=pending_status(nxt),
        current_stage=nxt,
        current_approver=nxt.value,
        outcome=None,
        final_result=None,
    )


class ApprovalWorkflowService:
    """Sequential multi-role sign-off for loan applications.

    Decisions for one application are serialized: the application row is
    locked for the duration of the call and the workflow write is a
    compare-and-swap on the stage that was authorized, so a racing second
    approver sees the advanced stage and fails without writing anything.

    Both records (plus the log row) are written in one transaction. Any
    store failure rolls everything back and surfaces as PersistenceError.
    """

    def __init__(self, *, defaults: WorkflowDefaults | None = None) -> None:
        self._defaults = defaults or WorkflowDefaults()

    async def get_or_create_workflow(
        self,
        session: AsyncSession,
        *,
        application_id: UUID,
        commit: bool = False,
    ) -> ApprovalWorkflow:
        """Return the application's workflow, creating it on first access.

        Flushes only unless ``commit`` is set; without it the caller owns
        the transaction.
        """

        try:
            app = await get_application(session, application_id=application_id)
            if app is None:
                raise NotFound(f"Loan application {application_id} not found")
            workflow = await self._ensure_workflow(session, application_id=application_id)
            if commit:
                await session.commit()
            return workflow
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.exception("workflow_load_failed application_id=%s", application_id)
            raise PersistenceError("Failed to load workflow; please retry") from exc

    async def submit_decision(
        self,
        session: AsyncSession,
        *,
        application_id: UUID,
        approver_id: UUID,
        decision: Decision | str,
        notes: str | None = None,
        approver_role: str | None = None,
    ) -> DecisionResult:
        """Record an approve/reject decision for the stage awaiting action.

        ``approver_role`` is normally resolved from the users table; pass it
        only when the caller already holds a trusted role for the approver.

        Raises:
            NotFound: unknown application (or approver, when the role is looked up)
            UnauthorizedStage: the acting role is not the current stage, or the
                approver is inactive
            InvalidTransition: the workflow is terminal or the decision is unknown
            PersistenceError: the store failed; nothing was written
        """

        try:
            decision = Decision(decision)
        except ValueError:
            raise InvalidTransition(f"Unknown decision {decision!r}; expected 'approve' or 'reject'")

        try:
            result = await self._apply_decision(
                session,
                application_id=application_id,
                approver_id=approver_id,
                approver_role=approver_role,
                decision=decision,
                notes=notes,
            )
            await session.commit()
        except WorkflowError as exc:
            await session.rollback()
            logger.info(
                "decision_refused application_id=%s approver_id=%s decision=%s kind=%s",
                application_id,
                approver_id,
                decision.value,
                exc.kind,
            )
            raise
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.exception(
                "decision_persist_failed application_id=%s approver_id=%s decision=%s",
                application_id,
                approver_id,
                decision.value,
            )
            raise PersistenceError("Failed to record the decision; nothing was saved, please retry") from exc

        logger.info(
            "decision_recorded application_id=%s stage=%s decision=%s status=%s final=%s",
            application_id,
            result.stage.value,
            decision.value,
            result.status.value,
            result.is_final_decision,
        )
        return result

    async def _apply_decision(
        self,
        session: AsyncSession,
        *,
        application_id: UUID,
        approver_id: UUID,
        approver_role: str | None,
        decision: Decision,
        notes: str | None,
    ) -> DecisionResult:
        app = await get_application(session, application_id=application_id, for_update=True)
        if app is None:
            raise NotFound(f"Loan application {application_id} not found")

        role, approver_name = await self._resolve_actor(
            session, approver_id=approver_id, approver_role=approver_role
        )

        workflow = await self._ensure_workflow(session, application_id=application_id)

        if workflow.outcome is not None or is_terminal_status(app.status):
            raise InvalidTransition(
                f"Loan application {application_id} is already {app.status}; no further decisions are accepted"
            )

        stage = Stage(workflow.current_stage)
        if not role_can_act(role, stage):
            raise UnauthorizedStage(f"Cannot {decision.value} at {stage.value} stage with {role} role")

        plan = _plan_transition(stage, decision)
        now = utcnow()

        await self._write_workflow(
            session,
            workflow=workflow,
            stage=stage,
            plan=plan,
            notes=notes or None,
            approver_id=approver_id,
            approver_name=approver_name,
            now=now,
        )
        await self._write_application(session, application=app, plan=plan, now=now)

        session.add(
            WorkflowLog(
                loan_application_id=application_id,
                stage=stage.value,
                action=f"{decision.value} by {stage.value}",
                performed_by=approver_id,
                status=plan.status.value,
                notes=notes or None,
                performed_at=now,
            )
        )
        await session.flush()

        is_final = plan.outcome is not None
        return DecisionResult(
            application_id=application_id,
            action=decision,
            stage=stage,
            status=plan.status,
            current_stage=None if is_final else plan.current_stage,
            is_final_decision=is_final,
            final_result=plan.final_result,
            approver_id=approver_id,
            approver_name=approver_name,
            applicant_user_id=app.created_by,
        )

    async def _resolve_actor(
        self,
        session: AsyncSession,
        *,
        approver_id: UUID,
        approver_role: str | None,
    ) -> tuple[str, str | None]:
        user = await user_crud.get(session, id=approver_id)

        if user is None and approver_role is None:
            raise NotFound(f"Approver {approver_id} not found")
        if user is not None and not user.is_active:
            raise UnauthorizedStage(f"Approver {approver_id} is not active")
        if approver_role is None:
            approver_role = user.role

        if not approver_role or not approver_role.strip():
            raise UnauthorizedStage("Acting user has no role")

        name = (user.full_name or user.email) if user is not None else None
        return approver_role, name

    async def _ensure_workflow(self, session: AsyncSession, *, application_id: UUID) -> ApprovalWorkflow:
        workflow = await get_workflow(session, application_id=application_id)
        if workflow is not None:
            return workflow

        await insert_workflow_if_absent(session, values=self._initial_values(application_id))
        workflow = await get_workflow(session, application_id=application_id)
        if workflow is None:  # pragma: no cover
            raise PersistenceError(f"Workflow for loan application {application_id} could not be created")

        logger.info("workflow_ensured application_id=%s workflow_id=%s", application_id, workflow.id)
        return workflow

    def _initial_values(self, application_id: UUID) -> dict[str, Any]:
        return {
            "loan_application_id": application_id,
            "current_stage": INITIAL_STAGE.value,
            "outcome": None,
            "field_officer_approved": True,
            "field_officer_notes": self._defaults.field_officer_note,
        }

    async def _write_workflow(
        self,
        session: AsyncSession,
        *,
        workflow: ApprovalWorkflow,
        stage: Stage,
        plan: _Transition,
        notes: str | None,
        approver_id: UUID,
        approver_name: str | None,
        now: datetime,
    ) -> None:
        prefix = stage.value
        stmt = (
            update(ApprovalWorkflow)
            .where(
                ApprovalWorkflow.id == workflow.id,
                ApprovalWorkflow.current_stage == stage.value,
                ApprovalWorkflow.outcome.is_(None),
                getattr(ApprovalWorkflow, f"{prefix}_approved").is_(None),
            )
            .values(
                {
                    f"{prefix}_approved": plan.approved,
                    f"{prefix}_notes": notes,
                    f"{prefix}_name": approver_name,
                    f"{prefix}_by": approver_id,
                    "current_stage": plan.current_stage.value,
                    "outcome": plan.outcome.value if plan.outcome else None,
                    "updated_at": now,
                }
            )
        )
        res = await session.execute(stmt)
        if res.rowcount != 1:
            raise UnauthorizedStage(
                f"The {stage.value} stage was already decided by another approver; refresh and try again"
            )

    async def _write_application(
        self,
        session: AsyncSession,
        *,
        application: LoanApplication,
        plan: _Transition,
        now: datetime,
    ) -> None:
        stmt = (
            update(LoanApplication)
            .where(
                LoanApplication.id == application.id,
                LoanApplication.status == application.status,
            )
            .values(status=plan.status.value, current_approver=plan.current_approver, updated_at=now)
        )
        res = await session.execute(stmt)
        if res.rowcount != 1:
            raise InvalidTransition(
                f"Loan application {application.id} changed while the decision was being recorded"
            )
