from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoanApplicationCreate(BaseModel):
    external_id: str | None = None

    client_name: str = Field(min_length=1, max_length=200)
    loan_type: str = "general"
    loan_amount: Decimal = Field(gt=0)
    purpose_of_loan: str | None = None
    monthly_income: Decimal | None = Field(default=None, ge=0)
    employment_status: str | None = None

    created_by: UUID | None = None

    @field_validator("client_name")
    @classmethod
    def _strip_client_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("client_name must not be blank")
        return value


class LoanApplicationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    external_id: str

    client_name: str
    loan_type: str
    loan_amount: Decimal
    purpose_of_loan: str | None = None
    monthly_income: Decimal | None = None
    employment_status: str | None = None

    status: str
    current_approver: str | None = None
    created_by: UUID | None = None

    created_at: datetime
    updated_at: datetime


class AwaitingApplicationItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    external_id: str
    client_name: str
    loan_amount: Decimal
    status: str
    current_approver: str | None = None
    created_at: datetime


class AwaitingApplicationListResponse(BaseModel):
    stage: str
    items: list[AwaitingApplicationItem]
