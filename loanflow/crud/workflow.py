from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from loanflow.models.approval_workflow import ApprovalWorkflow
from loanflow.models.workflow_log import WorkflowLog


async def get_workflow(session: AsyncSession, *, application_id: UUID) -> ApprovalWorkflow | None:
    stmt = select(ApprovalWorkflow).where(ApprovalWorkflow.loan_application_id == application_id)
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def insert_workflow_if_absent(session: AsyncSession, *, values: dict[str, Any]) -> None:
    """Insert a workflow row unless one already exists for the application.

    Relies on the unique constraint on loan_application_id so concurrent
    first accesses cannot produce two rows.
    """

    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(ApprovalWorkflow).values(**values).on_conflict_do_nothing(
            index_elements=[ApprovalWorkflow.loan_application_id]
        )
    elif dialect == "sqlite":
        stmt = sqlite.insert(ApprovalWorkflow).values(**values).on_conflict_do_nothing(
            index_elements=[ApprovalWorkflow.loan_application_id]
        )
    else:  # pragma: no cover
        # No portable upsert; a losing racer surfaces as an IntegrityError.
        stmt = insert(ApprovalWorkflow).values(**values)

    await session.execute(stmt)


async def list_workflow_log(session: AsyncSession, *, application_id: UUID) -> list[WorkflowLog]:
    stmt = (
        select(WorkflowLog)
        .where(WorkflowLog.loan_application_id == application_id)
        .order_by(WorkflowLog.performed_at.asc(), WorkflowLog.id.asc())
    )
    res = await session.execute(stmt)
    return list(res.scalars().all())
