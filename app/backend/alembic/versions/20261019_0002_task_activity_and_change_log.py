"""task active flag and change log

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "obligation_tasks",
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )

    op.create_table(
        "change_log",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("user_name", sa.String(length=255), nullable=False),
        sa.Column("task_external_id", sa.String(length=64), nullable=True),
        sa.Column("cycle_year", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_change_log_cycle_year", "change_log", ["cycle_year"])
    op.create_index("ix_change_log_task", "change_log", ["task_external_id", "cycle_year"])


def downgrade() -> None:
    op.drop_index("ix_change_log_task", table_name="change_log")
    op.drop_index("ix_change_log_cycle_year", table_name="change_log")
    op.drop_table("change_log")

    op.drop_column("obligation_tasks", "active")
