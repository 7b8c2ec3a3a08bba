"""approval workflow, workflow log and notifications

Revision ID: 002_approval_workflow
Revises: 001_users_applications
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa


revision = "002_approval_workflow"
down_revision = "001_users_applications"
branch_labels = None
depends_on = None

STAGES = ("field_officer", "manager", "director", "chairperson", "ceo")


def _stage_columns() -> list[sa.Column]:
    cols: list[sa.Column] = []
    for stage in STAGES:
        cols.extend(
            [
                sa.Column(f"{stage}_approved", sa.Boolean(), nullable=True),
                sa.Column(f"{stage}_notes", sa.Text(), nullable=True),
                sa.Column(f"{stage}_name", sa.String(length=200), nullable=True),
                sa.Column(f"{stage}_by", sa.Uuid(), nullable=True),
            ]
        )
    return cols


def upgrade() -> None:
    op.create_table(
        "loan_application_workflows",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "loan_application_id",
            sa.Uuid(),
            sa.ForeignKey("loan_applications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("current_stage", sa.String(length=30), server_default=sa.text("'manager'"), nullable=False),
        sa.Column("outcome", sa.String(length=20), nullable=True),
        *_stage_columns(),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("loan_application_id", name="uq_workflows_loan_application"),
        sa.CheckConstraint(
            "current_stage IN ('field_officer', 'manager', 'director', 'chairperson', 'ceo')",
            name="ck_workflows_current_stage",
        ),
        sa.CheckConstraint(
            "outcome IS NULL OR outcome IN ('approved', 'rejected')",
            name="ck_workflows_outcome",
        ),
    )

    op.create_table(
        "loan_workflow_log",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "loan_application_id",
            sa.Uuid(),
            sa.ForeignKey("loan_applications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("stage", sa.String(length=30), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("performed_by", sa.Uuid(), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("performed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(
        "ix_loan_workflow_log_loan_application_id",
        "loan_workflow_log",
        ["loan_application_id"],
        unique=False,
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("related_to", sa.String(length=50), server_default=sa.text("'loan_application'"), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("is_read", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_notifications_user_created", "notifications", ["user_id", "created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_notifications_user_created", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_loan_workflow_log_loan_application_id", table_name="loan_workflow_log")
    op.drop_table("loan_workflow_log")
    op.drop_table("loan_application_workflows")
