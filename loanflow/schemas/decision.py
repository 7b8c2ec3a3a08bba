from __future__ import annotations

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class LoanApprovalRequest(BaseModel):
    loan_id: UUID
    action: Literal["approve", "reject"]
    notes: str = ""
    # The approver's role is looked up server-side; it is never taken from the client.
    approver_id: UUID


class LoanApprovalResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: Literal["approve", "reject"]
    is_final_decision: bool = Field(serialization_alias="isFinalDecision")
    final_result: Literal["SUCCESSFUL", "FAILED"] | None = Field(
        default=None, serialization_alias="finalResult"
    )
    status: str
    current_stage: str | None = Field(default=None, serialization_alias="currentStage")
