"""initial tables: reports, cache, desk_assignments

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "reports",
        sa.Column("id", sa.Integer(), autoincrement=True),
        sa.Column("report_id", sa.String(64), nullable=False),
        sa.Column("report_type", sa.String(50), nullable=False),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="UTC"),
        sa.Column("filters", postgresql.JSONB(), nullable=False),
        sa.Column("summary", postgresql.JSONB(), nullable=False),
        sa.Column("data", postgresql.JSONB(), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("download_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_reports")),
    )
    op.create_index("ix_reports_report_id", "reports", ["report_id"], unique=True)
    op.create_index("ix_reports_report_type", "reports", ["report_type"])
    op.create_index("ix_reports_generated_at", "reports", ["generated_at"])
    op.create_index("ix_reports_expires_at", "reports", ["expires_at"])

    op.create_table(
        "cache",
        sa.Column("id", sa.Integer(), autoincrement=True),
        sa.Column("cache_key", sa.String(255), nullable=False),
        sa.Column("cache_data", postgresql.JSONB(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_cache")),
    )
    op.create_index("ix_cache_cache_key", "cache", ["cache_key"], unique=True)
    op.create_index("ix_cache_expires_at", "cache", ["expires_at"])

    op.create_table(
        "desk_assignments",
        sa.Column("id", sa.Integer(), autoincrement=True),
        sa.Column("desk_number", sa.Integer(), nullable=False),
        sa.Column("employee_name", sa.String(255), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("camera", sa.String(100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_desk_assignments")),
    )
    op.create_index("ix_desk_assignments_desk_number", "desk_assignments", ["desk_number"], unique=True)
    op.create_index("ix_desk_assignments_employee_name", "desk_assignments", ["employee_name"])


def downgrade() -> None:
    op.drop_index("ix_desk_assignments_employee_name", table_name="desk_assignments")
    op.drop_index("ix_desk_assignments_desk_number", table_name="desk_assignments")
    op.drop_table("desk_assignments")
    op.drop_index("ix_cache_expires_at", table_name="cache")
    op.drop_index("ix_cache_cache_key", table_name="cache")
    op.drop_table("cache")
    op.drop_index("ix_reports_expires_at", table_name="reports")
    op.drop_index("ix_reports_generated_at", table_name="reports")
    op.drop_index("ix_reports_report_type", table_name="reports")
    op.drop_index("ix_reports_report_id", table_name="reports")
    op.drop_table("reports")
