from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from loanflow.crud.workflow import list_workflow_log
from loanflow.database import get_db
from loanflow.schemas.decision import LoanApprovalRequest, LoanApprovalResponse
from loanflow.schemas.workflow import WorkflowLogListResponse, WorkflowLogRead, WorkflowRead
from loanflow.services.approval_workflow import ApprovalWorkflowService
from loanflow.tasks.notifications import emit_decision_notification


router = APIRouter(tags=["approvals"])

_service = ApprovalWorkflowService()


def get_workflow_service() -> ApprovalWorkflowService:
    return _service


def _parse_application_id(application_id: str) -> UUID:
    try:
        return UUID(application_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="Application not found")


@router.post(
    "/loan-approval",
    response_model=LoanApprovalResponse,
    response_model_exclude_none=True,
)
async def loan_approval_endpoint(
    payload: LoanApprovalRequest,
    session: AsyncSession = Depends(get_db),
    service: ApprovalWorkflowService = Depends(get_workflow_service),
) -> LoanApprovalResponse:
    """Approve or reject the stage currently awaiting a decision."""

    result = await service.submit_decision(
        session,
        application_id=payload.loan_id,
        approver_id=payload.approver_id,
        decision=payload.action,
        notes=payload.notes,
    )

    emit_decision_notification(result)

    return LoanApprovalResponse(
        action=result.action.value,
        is_final_decision=result.is_final_decision,
        final_result=result.final_result.value if result.final_result else None,
        status=result.status.value,
        current_stage=result.current_stage.value if result.current_stage else None,
    )


@router.get("/applications/{application_id}/workflow", response_model=WorkflowRead)
async def get_workflow_endpoint(
    application_id: str,
    session: AsyncSession = Depends(get_db),
    service: ApprovalWorkflowService = Depends(get_workflow_service),
) -> WorkflowRead:
    app_id = _parse_application_id(application_id)

    workflow = await service.get_or_create_workflow(session, application_id=app_id, commit=True)
    return WorkflowRead.from_model(workflow)


@router.get("/applications/{application_id}/workflow/log", response_model=WorkflowLogListResponse)
async def get_workflow_log_endpoint(
    application_id: str,
    session: AsyncSession = Depends(get_db),
) -> WorkflowLogListResponse:
    app_id = _parse_application_id(application_id)

    entries = await list_workflow_log(session, application_id=app_id)
    return WorkflowLogListResponse(items=[WorkflowLogRead.model_validate(e) for e in entries])
