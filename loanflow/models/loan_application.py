from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class LoanApplication(Base):
    __tablename__ = "loan_applications"
    __table_args__ = (
        CheckConstraint(
            "status IN ('submitted', 'pending_manager', 'pending_director', "
            "'pending_chairperson', 'pending_ceo', 'approved', 'rejected')",
            name="ck_loan_applications_status",
        ),
        CheckConstraint("loan_amount > 0", name="ck_loan_applications_amount_positive"),
        Index("idx_loan_applications_status_created", "status", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    external_id: Mapped[str] = mapped_column(String(100), nullable=False)

    # Intake-owned fields; the workflow never writes these.
    client_name: Mapped[str] = mapped_column(String(200), nullable=False)
    loan_type: Mapped[str] = mapped_column(String(50), nullable=False, server_default="general")
    loan_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    purpose_of_loan: Mapped[str | None] = mapped_column(Text, nullable=True)
    monthly_income: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    employment_status: Mapped[str | None] = mapped_column(String(50), nullable=True)

    status: Mapped[str] = mapped_column(String(30), nullable=False, server_default="pending_manager")
    current_approver: Mapped[str | None] = mapped_column(String(50), nullable=True)

    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
