from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import func, select

from loanflow.database import SessionLocal
from loanflow.models.approval_workflow import ApprovalWorkflow
from loanflow.models.loan_application import LoanApplication
from loanflow.models.workflow_log import WorkflowLog
from loanflow.models.user import User
from loanflow.services.workflow_stages import STAGE_ORDER


async def create_user(*, role: str, full_name: str | None = None, is_active: bool = True) -> uuid.UUID:
    async with SessionLocal() as session:
        user = User(
            email=f"{role}-{uuid.uuid4().hex[:8]}@example.com",
            role=role,
            full_name=full_name if full_name is not None else f"Test {role.replace('_', ' ').title()}",
            is_active=is_active,
        )
        session.add(user)
        await session.commit()
        return user.id


async def create_approvers() -> dict[str, uuid.UUID]:
    """One active user per stage, keyed by role."""

    return {stage.value: await create_user(role=stage.value) for stage in STAGE_ORDER}


async def create_application(
    *,
    created_by: uuid.UUID | None = None,
    status: str = "pending_manager",
    client_name: str = "Jane Doe",
) -> uuid.UUID:
    async with SessionLocal() as session:
        app = LoanApplication(
            external_id=f"LN-{uuid.uuid4().hex[:10]}",
            client_name=client_name,
            loan_type="business",
            loan_amount=Decimal("1500000.00"),
            purpose_of_loan="Stock for retail shop",
            monthly_income=Decimal("800000.00"),
            employment_status="self-employed",
            status=status,
            current_approver=status.removeprefix("pending_") if status.startswith("pending_") else None,
            created_by=created_by,
        )
        session.add(app)
        await session.commit()
        return app.id


async def load_state(application_id: uuid.UUID) -> tuple[LoanApplication, ApprovalWorkflow | None, list[WorkflowLog]]:
    """Read both records and the log in a fresh session."""

    async with SessionLocal() as session:
        app = (
            await session.execute(select(LoanApplication).where(LoanApplication.id == application_id))
        ).scalar_one()
        workflow = (
            await session.execute(
                select(ApprovalWorkflow).where(ApprovalWorkflow.loan_application_id == application_id)
            )
        ).scalar_one_or_none()
        log = list(
            (
                await session.execute(
                    select(WorkflowLog)
                    .where(WorkflowLog.loan_application_id == application_id)
                    .order_by(WorkflowLog.performed_at.asc())
                )
            ).scalars()
        )
        return app, workflow, log


async def count_workflows(application_id: uuid.UUID) -> int:
    async with SessionLocal() as session:
        r = await session.execute(
            select(func.count())
            .select_from(ApprovalWorkflow)
            .where(ApprovalWorkflow.loan_application_id == application_id)
        )
        return int(r.scalar_one())
