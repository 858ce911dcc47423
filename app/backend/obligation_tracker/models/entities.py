"""ORM entities for obligation tracking."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from obligation_tracker.db.base import Base


class ObligationTaskRecord(Base):
    __tablename__ = "obligation_tasks"
    __table_args__ = (
        UniqueConstraint("external_id", "cycle_year", name="uq_obligation_tasks_external_id_year"),
        Index("ix_obligation_tasks_cycle_year", "cycle_year"),
        Index("ix_obligation_tasks_regime", "regime"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    external_id: Mapped[str] = mapped_column(String(64), nullable=False)
    cycle_year: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    cnpj: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    regime: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    priority: Mapped[str] = mapped_column(String(16), nullable=False, default="")
    # DD/MM/YYYY, stored as entered.
    due_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    last_editor: Mapped[str | None] = mapped_column(String(255), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    fiscal_responsible: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    fiscal_status: Mapped[str | None] = mapped_column(String(64), nullable=True)
    contabil_responsible: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    contabil_status: Mapped[str | None] = mapped_column(String(64), nullable=True)
    balanco_responsible: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    balanco_status: Mapped[str | None] = mapped_column(String(64), nullable=True)
    lucro_responsible: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    lucro_status: Mapped[str | None] = mapped_column(String(64), nullable=True)
    reinf_responsible: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    reinf_status: Mapped[str | None] = mapped_column(String(64), nullable=True)
    ecd_responsible: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    ecd_status: Mapped[str | None] = mapped_column(String(64), nullable=True)
    ecf_responsible: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    ecf_status: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class CollaboratorRecord(Base):
    __tablename__ = "collaborators"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    external_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[str | None] = mapped_column(String(128), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class TaxRegimeRecord(Base):
    __tablename__ = "tax_regimes"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class ChangeLogRecord(Base):
    __tablename__ = "change_log"
    __table_args__ = (
        Index("ix_change_log_cycle_year", "cycle_year"),
        Index("ix_change_log_task", "task_external_id", "cycle_year"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # No foreign key: entries outlive the task they describe.
    task_external_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    cycle_year: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
