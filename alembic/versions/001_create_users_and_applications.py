"""create users and loan applications

Revision ID: 001_users_applications
Revises: 
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa


revision = "001_users_applications"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=True),
        sa.Column("role", sa.String(length=50), server_default=sa.text("'field_officer'"), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "loan_applications",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("external_id", sa.String(length=100), nullable=False),
        sa.Column("client_name", sa.String(length=200), nullable=False),
        sa.Column("loan_type", sa.String(length=50), server_default=sa.text("'general'"), nullable=False),
        sa.Column("loan_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("purpose_of_loan", sa.Text(), nullable=True),
        sa.Column("monthly_income", sa.Numeric(14, 2), nullable=True),
        sa.Column("employment_status", sa.String(length=50), nullable=True),
        sa.Column("status", sa.String(length=30), server_default=sa.text("'pending_manager'"), nullable=False),
        sa.Column("current_approver", sa.String(length=50), nullable=True),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "status IN ('submitted', 'pending_manager', 'pending_director', "
            "'pending_chairperson', 'pending_ceo', 'approved', 'rejected')",
            name="ck_loan_applications_status",
        ),
        sa.CheckConstraint("loan_amount > 0", name="ck_loan_applications_amount_positive"),
    )
    op.create_index("idx_loan_applications_status_created", "loan_applications", ["status", "created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_loan_applications_status_created", table_name="loan_applications")
    op.drop_table("loan_applications")
    op.drop_table("users")
