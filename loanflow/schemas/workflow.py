from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from loanflow.models.approval_workflow import ApprovalWorkflow
from loanflow.services.workflow_stages import STAGE_DISPLAY_NAMES, STAGE_ORDER


class StageDecisionRead(BaseModel):
    stage: str
    display_name: str
    approved: bool | None = None
    notes: str | None = None
    name: str | None = None
    acted_by: UUID | None = None


class WorkflowRead(BaseModel):
    id: UUID
    loan_application_id: UUID
    current_stage: str | None
    outcome: str | None = None
    is_terminal: bool
    stages: list[StageDecisionRead]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, workflow: ApprovalWorkflow) -> "WorkflowRead":
        stages = [
            StageDecisionRead(
                stage=stage.value,
                display_name=STAGE_DISPLAY_NAMES[stage],
                approved=getattr(workflow, f"{stage.value}_approved"),
                notes=getattr(workflow, f"{stage.value}_notes"),
                name=getattr(workflow, f"{stage.value}_name"),
                acted_by=getattr(workflow, f"{stage.value}_by"),
            )
            for stage in STAGE_ORDER
        ]
        is_terminal = workflow.outcome is not None
        return cls(
            id=workflow.id,
            loan_application_id=workflow.loan_application_id,
            current_stage=None if is_terminal else workflow.current_stage,
            outcome=workflow.outcome,
            is_terminal=is_terminal,
            stages=stages,
            created_at=workflow.created_at,
            updated_at=workflow.updated_at,
        )


class WorkflowLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    loan_application_id: UUID
    stage: str
    action: str
    performed_by: UUID | None = None
    status: str
    notes: str | None = None
    performed_at: datetime


class WorkflowLogListResponse(BaseModel):
    items: list[WorkflowLogRead]
