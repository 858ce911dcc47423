"""Repository helpers for obligation tasks, collaborators and tax regimes."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from obligation_tracker.domain.status import ObligationSlot, default_status
from obligation_tracker.domain.tasks import Collaborator, ObligationTask, SlotAssignment
from obligation_tracker.models.entities import (
    ChangeLogRecord,
    CollaboratorRecord,
    ObligationTaskRecord,
    TaxRegimeRecord,
)


def to_domain_task(row: ObligationTaskRecord) -> ObligationTask:
    """Map a row to the immutable value used by the reporting engine."""

    slots = {
        slot.value: SlotAssignment(
            responsible=getattr(row, f"{slot.value}_responsible") or "",
            status=getattr(row, f"{slot.value}_status") or default_status(slot),
        )
        for slot in ObligationSlot
    }
    return ObligationTask(
        external_id=row.external_id,
        name=row.name,
        cycle_year=row.cycle_year,
        cnpj=row.cnpj or "",
        regime=row.regime or "",
        priority=row.priority or "",
        due_date=row.due_date or None,
        last_editor=row.last_editor or None,
        active=row.active is not False,
        **slots,
    )


def to_domain_collaborator(row: CollaboratorRecord) -> Collaborator:
    return Collaborator(name=row.name, department=row.department, external_id=row.external_id)


class ObligationRepository:
    """Persistence operations backing the reporting and task endpoints."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Tasks ----------
    def list_tasks(self, cycle_year: int) -> list[ObligationTaskRecord]:
        return self.db.scalars(
            select(ObligationTaskRecord)
            .where(ObligationTaskRecord.cycle_year == cycle_year)
            .order_by(ObligationTaskRecord.external_id.asc())
        ).all()

    def get_task(self, external_id: str, cycle_year: int) -> ObligationTaskRecord | None:
        return self.db.scalar(
            select(ObligationTaskRecord).where(
                ObligationTaskRecord.external_id == external_id,
                ObligationTaskRecord.cycle_year == cycle_year,
            )
        )

    def add_task(self, task: ObligationTaskRecord) -> ObligationTaskRecord:
        self.db.add(task)
        self.db.flush()
        return task

    def add_tasks(self, tasks: list[ObligationTaskRecord]) -> list[ObligationTaskRecord]:
        self.db.add_all(tasks)
        self.db.flush()
        return tasks

    def existing_task_ids(self, external_ids: list[str], cycle_year: int) -> set[str]:
        if not external_ids:
            return set()
        return set(
            self.db.scalars(
                select(ObligationTaskRecord.external_id).where(
                    ObligationTaskRecord.cycle_year == cycle_year,
                    ObligationTaskRecord.external_id.in_(external_ids),
                )
            ).all()
        )

    def delete_task(self, task: ObligationTaskRecord) -> None:
        self.db.delete(task)
        self.db.flush()

    # ---------- Collaborators ----------
    def list_collaborators(self, *, active_only: bool = True) -> list[CollaboratorRecord]:
        query = select(CollaboratorRecord).order_by(CollaboratorRecord.name.asc())
        if active_only:
            query = query.where(CollaboratorRecord.active.is_(True))
        return self.db.scalars(query).all()

    # ---------- Tax regimes ----------
    def list_regimes(self) -> list[TaxRegimeRecord]:
        return self.db.scalars(select(TaxRegimeRecord).order_by(TaxRegimeRecord.name.asc())).all()

    def get_regime_by_name(self, name: str) -> TaxRegimeRecord | None:
        return self.db.scalar(select(TaxRegimeRecord).where(TaxRegimeRecord.name == name))

    def add_regime(self, regime: TaxRegimeRecord) -> TaxRegimeRecord:
        self.db.add(regime)
        self.db.flush()
        return regime

    # ---------- Change log ----------
    def add_change(self, entry: ChangeLogRecord) -> ChangeLogRecord:
        self.db.add(entry)
        return entry

    def list_changes(
        self,
        cycle_year: int,
        *,
        task_external_id: str | None = None,
        limit: int = 100,
    ) -> list[ChangeLogRecord]:
        query = select(ChangeLogRecord).where(ChangeLogRecord.cycle_year == cycle_year)
        if task_external_id is not None:
            query = query.where(ChangeLogRecord.task_external_id == task_external_id)
        query = query.order_by(ChangeLogRecord.created_at.desc()).limit(limit)
        return self.db.scalars(query).all()
