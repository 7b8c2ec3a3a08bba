from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class ApprovalWorkflow(Base):
    """Per-application approval record.

    Each stage owns four columns: ``<stage>_approved`` (None until the stage
    acts, then write-once), ``<stage>_notes``, ``<stage>_name`` (actor display
    name) and ``<stage>_by`` (actor id). ``outcome`` is None while the
    workflow is open and ``approved``/``rejected`` once terminal.
    """

    __tablename__ = "loan_application_workflows"
    __table_args__ = (
        UniqueConstraint("loan_application_id", name="uq_workflows_loan_application"),
        CheckConstraint(
            "current_stage IN ('field_officer', 'manager', 'director', 'chairperson', 'ceo')",
            name="ck_workflows_current_stage",
        ),
        CheckConstraint("outcome IS NULL OR outcome IN ('approved', 'rejected')", name="ck_workflows_outcome"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    loan_application_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("loan_applications.id", ondelete="CASCADE"), nullable=False)

    current_stage: Mapped[str] = mapped_column(String(30), nullable=False, server_default="manager")
    outcome: Mapped[str | None] = mapped_column(String(20), nullable=True)

    field_officer_approved: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    field_officer_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    field_officer_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    field_officer_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    manager_approved: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    manager_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    manager_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    manager_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    director_approved: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    director_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    director_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    director_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    chairperson_approved: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    chairperson_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    chairperson_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    chairperson_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    ceo_approved: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    ceo_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    ceo_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    ceo_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
