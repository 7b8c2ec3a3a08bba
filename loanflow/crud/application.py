from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from loanflow.models.loan_application import LoanApplication
from loanflow.schemas.application import LoanApplicationCreate
from loanflow.services.workflow_stages import INITIAL_STAGE, Stage, pending_status


async def get_application(
    session: AsyncSession,
    *,
    application_id: UUID,
    for_update: bool = False,
) -> LoanApplication | None:
    stmt = select(LoanApplication).where(LoanApplication.id == application_id)
    if for_update:
        # Row lock on PostgreSQL; SQLite ignores it and serializes writers itself.
        stmt = stmt.with_for_update()

    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def create_application(session: AsyncSession, obj_in: LoanApplicationCreate) -> LoanApplication:
    """Register a submitted application.

    Submission by the field officer counts as their approval, so the
    application lands directly in front of the manager.
    """

    app = LoanApplication(
        external_id=obj_in.external_id or f"LN-{uuid4().hex[:10]}",
        client_name=obj_in.client_name,
        loan_type=obj_in.loan_type,
        loan_amount=obj_in.loan_amount,
        purpose_of_loan=obj_in.purpose_of_loan,
        monthly_income=obj_in.monthly_income,
        employment_status=obj_in.employment_status,
        status=pending_status(INITIAL_STAGE).value,
        current_approver=INITIAL_STAGE.value,
        created_by=obj_in.created_by,
    )

    session.add(app)
    await session.commit()
    return app


async def list_applications_awaiting(
    session: AsyncSession,
    *,
    stage: Stage,
    limit: int = 50,
    offset: int = 0,
) -> list[LoanApplication]:
    """Applications waiting on ``stage``, oldest first."""

    limit = max(1, min(limit, 200))
    offset = max(0, offset)

    stmt = (
        select(LoanApplication)
        .where(LoanApplication.status == pending_status(stage).value)
        .order_by(LoanApplication.created_at.asc(), LoanApplication.id.asc())
        .offset(offset)
        .limit(limit)
    )
    res = await session.execute(stmt)
    return list(res.scalars().all())
