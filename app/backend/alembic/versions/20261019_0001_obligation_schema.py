"""obligation tracking schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

SLOT_COLUMNS = ("fiscal", "contabil", "balanco", "lucro", "reinf", "ecd", "ecf")


def upgrade() -> None:
    slot_columns: list[sa.Column] = []
    for slot in SLOT_COLUMNS:
        slot_columns.append(sa.Column(f"{slot}_responsible", sa.String(length=255), nullable=False, server_default=""))
        slot_columns.append(sa.Column(f"{slot}_status", sa.String(length=64), nullable=True))

    op.create_table(
        "obligation_tasks",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("external_id", sa.String(length=64), nullable=False),
        sa.Column("cycle_year", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("cnpj", sa.String(length=32), nullable=False, server_default=""),
        sa.Column("regime", sa.String(length=128), nullable=False, server_default=""),
        sa.Column("priority", sa.String(length=16), nullable=False, server_default=""),
        sa.Column("due_date", sa.String(length=10), nullable=True),
        sa.Column("last_editor", sa.String(length=255), nullable=True),
        *slot_columns,
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_unique_constraint(
        "uq_obligation_tasks_external_id_year", "obligation_tasks", ["external_id", "cycle_year"]
    )
    op.create_index("ix_obligation_tasks_cycle_year", "obligation_tasks", ["cycle_year"])
    op.create_index("ix_obligation_tasks_regime", "obligation_tasks", ["regime"])

    op.create_table(
        "collaborators",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("external_id", sa.String(length=64), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("department", sa.String(length=128), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "tax_regimes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False, unique=True),
        sa.Column("created_by", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("tax_regimes")
    op.drop_table("collaborators")

    op.drop_index("ix_obligation_tasks_regime", table_name="obligation_tasks")
    op.drop_index("ix_obligation_tasks_cycle_year", table_name="obligation_tasks")
    op.drop_constraint("uq_obligation_tasks_external_id_year", "obligation_tasks", type_="unique")
    op.drop_table("obligation_tasks")
