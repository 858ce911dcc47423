"""Reporting, export and task maintenance service layer."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime

import structlog
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from obligation_tracker.core.config import get_settings
from obligation_tracker.domain.dates import format_last_editor, parse_br_date
from obligation_tracker.domain.status import ObligationSlot, coerce_slot_status
from obligation_tracker.domain.tasks import ObligationTask, Priority, effective_priority
from obligation_tracker.models.entities import ChangeLogRecord, ObligationTaskRecord, TaxRegimeRecord
from obligation_tracker.repositories.obligation_repository import (
    ObligationRepository,
    to_domain_collaborator,
    to_domain_task,
)
from obligation_tracker.services.report_export import ReportConfig, render_report_csv, render_report_workbook
from obligation_tracker.services.report_filters import FilterSpec, TaskSortOrder, filter_tasks, sort_tasks
from obligation_tracker.services.report_stats import aggregate

log = structlog.get_logger()

EXPORT_FORMATS = {"csv", "xlsx"}
DEFAULT_EDITOR = "Sistema"

# Editable company fields and their labels in change log entries.
TASK_FIELD_LABELS: dict[str, str] = {
    "name": "Nome da Empresa",
    "cnpj": "CNPJ",
    "regime": "Regime",
    "priority": "Prioridade",
    "due_date": "Data de Vencimento",
}


@dataclass(slots=True)
class TaskCreateData:
    external_id: str
    cycle_year: int
    name: str
    cnpj: str = ""
    regime: str = ""
    priority: str = ""
    due_date: str | None = None


@dataclass(slots=True)
class TaskUpdateData:
    name: str | None = None
    cnpj: str | None = None
    regime: str | None = None
    priority: str | None = None
    due_date: str | None = None


@dataclass(slots=True)
class SlotUpdateData:
    status: str | None = None
    responsible: str | None = None


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes


class ObligationReportingService:
    """Service exposing report snapshots, exports and task maintenance."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = ObligationRepository(db)
        self.settings = get_settings()

    # ---------- Serialization ----------
    @staticmethod
    def serialize_task(task: ObligationTask, *, today: date | None = None) -> dict[str, object]:
        return {
            "external_id": task.external_id,
            "cycle_year": task.cycle_year,
            "name": task.name,
            "cnpj": task.cnpj,
            "regime": task.regime,
            "priority": task.priority,
            "effective_priority": effective_priority(task, today or date.today()).value,
            "due_date": task.due_date,
            "last_editor": task.last_editor,
            "active": task.active,
            "slots": {
                slot.value: {
                    "label": slot.label,
                    "responsible": task.slot(slot).responsible,
                    "status": task.slot(slot).status,
                }
                for slot in ObligationSlot
            },
        }

    # ---------- Loading ----------
    def _get_task_row(self, external_id: str, cycle_year: int) -> ObligationTaskRecord:
        row = self.repo.get_task(external_id, cycle_year)
        if row is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found.")
        return row

    def _load_tasks(self, cycle_year: int) -> list[ObligationTask]:
        return [to_domain_task(row) for row in self.repo.list_tasks(cycle_year)]

    # ---------- Reports ----------
    def report_stats(self, *, cycle_year: int, spec: FilterSpec) -> dict[str, object]:
        tasks = self._load_tasks(cycle_year)
        filtered = filter_tasks(tasks, spec)
        collaborators = [to_domain_collaborator(row) for row in self.repo.list_collaborators()]
        regimes = [row.name for row in self.repo.list_regimes()]

        stats = aggregate(
            filtered,
            collaborators,
            regimes,
            stale_after_days=self.settings.bottleneck_stale_days,
            approaching_within_days=self.settings.deadline_approaching_days,
        )
        log.info(
            "report_stats_computed",
            cycle_year=cycle_year,
            task_count=len(tasks),
            filtered_count=len(filtered),
            **spec.as_dict(),
        )
        return {
            "cycle_year": cycle_year,
            "filters": spec.as_dict(),
            "task_count": len(filtered),
            "stats": stats.as_dict() if stats is not None else None,
        }

    def export_report(
        self,
        *,
        cycle_year: int,
        spec: FilterSpec,
        config: ReportConfig,
        format_name: str,
    ) -> ExportFilePayload:
        normalized_format = format_name.strip().lower()
        if normalized_format not in EXPORT_FORMATS:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="format must be one of: csv, xlsx.",
            )

        filtered = filter_tasks(self._load_tasks(cycle_year), spec)
        base_filename = f"relatorio-{cycle_year}-{spec.context.value.lower()}"
        log.info(
            "report_exported",
            cycle_year=cycle_year,
            format=normalized_format,
            rows=len(filtered),
            include_charts=config.include_charts,
            include_table=config.include_table,
        )

        if normalized_format == "csv":
            return ExportFilePayload(
                media_type="text/csv; charset=utf-8",
                filename=f"{base_filename}.csv",
                content=render_report_csv(filtered, spec),
            )
        return ExportFilePayload(
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            filename=f"{base_filename}.xlsx",
            content=render_report_workbook(filtered, config, spec),
        )

    # ---------- Tasks ----------
    @staticmethod
    def _normalize_priority(value: str) -> str:
        priority = value.strip().upper()
        if priority and priority not in {member.value for member in Priority}:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="priority must be one of: ALTA, MÉDIA, BAIXA or empty.",
            )
        return priority

    @staticmethod
    def _normalize_due_date(value: str | None) -> str | None:
        due_date = (value or "").strip()
        if not due_date:
            return None
        if parse_br_date(due_date) is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="due_date must use the DD/MM/YYYY format.",
            )
        return due_date

    def _log_change(self, description: str, *, user_name: str, cycle_year: int, external_id: str | None) -> None:
        """Queue a change log entry; it is committed together with the change it describes."""

        self.repo.add_change(
            ChangeLogRecord(
                description=description,
                user_name=user_name,
                task_external_id=external_id,
                cycle_year=cycle_year,
                created_at=datetime.utcnow(),
            )
        )

    def _new_task_row(self, data: TaskCreateData, now: datetime) -> ObligationTaskRecord:
        name = data.name.strip()
        if not name:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Task name must not be empty.",
            )
        return ObligationTaskRecord(
            external_id=data.external_id.strip(),
            cycle_year=data.cycle_year,
            name=name,
            cnpj=data.cnpj.strip(),
            regime=data.regime.strip(),
            priority=self._normalize_priority(data.priority),
            due_date=self._normalize_due_date(data.due_date),
            active=True,
            created_at=now,
            updated_at=now,
        )

    def list_tasks(self, *, cycle_year: int, order: TaskSortOrder = TaskSortOrder.ID_ASC) -> list[ObligationTask]:
        return sort_tasks(self._load_tasks(cycle_year), order)

    def get_task(self, *, external_id: str, cycle_year: int) -> ObligationTask:
        return to_domain_task(self._get_task_row(external_id, cycle_year))

    def create_task(self, *, data: TaskCreateData, editor: str = DEFAULT_EDITOR) -> ObligationTask:
        if self.repo.get_task(data.external_id.strip(), data.cycle_year) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Task already exists for this cycle year.",
            )
        row = self._new_task_row(data, datetime.utcnow())
        try:
            self.repo.add_task(row)
            self._log_change(
                f"Empresa criada: {row.name} ({row.external_id})",
                user_name=editor,
                cycle_year=row.cycle_year,
                external_id=row.external_id,
            )
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Task creation violated database constraints.",
            ) from exc
        self.db.refresh(row)
        log.info("task_created", external_id=row.external_id, cycle_year=row.cycle_year, editor=editor)
        return to_domain_task(row)

    def bulk_create_tasks(
        self,
        *,
        cycle_year: int,
        items: list[TaskCreateData],
        editor: str = DEFAULT_EDITOR,
    ) -> list[ObligationTask]:
        """Create a batch of tasks for one cycle year; the batch is stored entirely or not at all."""

        if not items:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Provide at least one task.",
            )
        external_ids = [item.external_id.strip() for item in items]
        repeated = sorted({external_id for external_id in external_ids if external_ids.count(external_id) > 1})
        if repeated:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Duplicate task ids in batch: {', '.join(repeated)}.",
            )
        existing = self.repo.existing_task_ids(external_ids, cycle_year)
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Tasks already exist for this cycle year: {', '.join(sorted(existing))}.",
            )

        now = datetime.utcnow()
        rows = [self._new_task_row(replace(item, cycle_year=cycle_year), now) for item in items]
        try:
            self.repo.add_tasks(rows)
            self._log_change(
                f"Importação em massa: {len(rows)} empresas criadas",
                user_name=editor,
                cycle_year=cycle_year,
                external_id=None,
            )
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Bulk task creation violated database constraints.",
            ) from exc
        log.info("tasks_bulk_created", cycle_year=cycle_year, count=len(rows), editor=editor)
        return [to_domain_task(row) for row in rows]

    def update_task(
        self,
        *,
        external_id: str,
        cycle_year: int,
        data: TaskUpdateData,
        editor: str = DEFAULT_EDITOR,
    ) -> ObligationTask:
        """Edit company data on a task and record every field that actually changed."""

        row = self._get_task_row(external_id, cycle_year)
        if all(getattr(data, field) is None for field in TASK_FIELD_LABELS):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Provide at least one field to update.",
            )

        updates: dict[str, str | None] = {}
        if data.name is not None:
            name = data.name.strip()
            if not name:
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail="Task name must not be empty.",
                )
            updates["name"] = name
        if data.cnpj is not None:
            updates["cnpj"] = data.cnpj.strip()
        if data.regime is not None:
            updates["regime"] = data.regime.strip()
        if data.priority is not None:
            updates["priority"] = self._normalize_priority(data.priority)
        if data.due_date is not None:
            updates["due_date"] = self._normalize_due_date(data.due_date)

        changed = {field: value for field, value in updates.items() if getattr(row, field) != value}
        for field, value in changed.items():
            setattr(row, field, value)
            self._log_change(
                f'Alterou {TASK_FIELD_LABELS[field]} para "{value or ""}"',
                user_name=editor,
                cycle_year=cycle_year,
                external_id=external_id,
            )
        if changed:
            row.last_editor = format_last_editor(editor, datetime.now())
            row.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(row)

        log.info(
            "task_updated",
            external_id=external_id,
            cycle_year=cycle_year,
            fields=sorted(changed),
            editor=editor,
        )
        return to_domain_task(row)

    def set_task_active(
        self,
        *,
        external_id: str,
        cycle_year: int,
        active: bool,
        editor: str = DEFAULT_EDITOR,
    ) -> ObligationTask:
        row = self._get_task_row(external_id, cycle_year)
        if row.active != active:
            row.active = active
            row.updated_at = datetime.utcnow()
            self._log_change(
                "Empresa reativada" if active else "Empresa desativada",
                user_name=editor,
                cycle_year=cycle_year,
                external_id=external_id,
            )
        self.db.commit()
        self.db.refresh(row)
        log.info("task_activity_set", external_id=external_id, cycle_year=cycle_year, active=active, editor=editor)
        return to_domain_task(row)

    def update_slot(
        self,
        *,
        external_id: str,
        cycle_year: int,
        slot: ObligationSlot,
        data: SlotUpdateData,
        editor: str,
    ) -> ObligationTask:
        """Apply a status transition or reassignment on one slot and stamp the editor."""

        row = self._get_task_row(external_id, cycle_year)
        if data.status is None and data.responsible is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Provide status and/or responsible.",
            )

        status_column = f"{slot.value}_status"
        responsible_column = f"{slot.value}_responsible"
        previous_status = getattr(row, status_column)
        updates: dict[str, tuple[str, str]] = {}
        if data.status is not None:
            try:
                new_status = coerce_slot_status(slot, data.status)
            except ValueError as exc:
                raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
            updates[status_column] = (f"Status {slot.label}", new_status.value)
        if data.responsible is not None:
            updates[responsible_column] = (f"Responsável {slot.label}", data.responsible.strip())

        for column, (label, value) in updates.items():
            if getattr(row, column) == value:
                continue
            setattr(row, column, value)
            self._log_change(
                f'Alterou {label} para "{value}"',
                user_name=editor,
                cycle_year=cycle_year,
                external_id=external_id,
            )

        row.last_editor = format_last_editor(editor, datetime.now())
        row.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(row)

        log.info(
            "task_slot_updated",
            external_id=external_id,
            cycle_year=cycle_year,
            slot=slot.value,
            from_status=previous_status,
            to_status=getattr(row, status_column),
            responsible=getattr(row, responsible_column),
            editor=editor,
        )
        return to_domain_task(row)

    def delete_task(self, *, external_id: str, cycle_year: int, editor: str = DEFAULT_EDITOR) -> None:
        row = self._get_task_row(external_id, cycle_year)
        self.repo.delete_task(row)
        self._log_change(
            "Empresa excluída permanentemente",
            user_name=editor,
            cycle_year=cycle_year,
            external_id=external_id,
        )
        self.db.commit()
        log.info("task_deleted", external_id=external_id, cycle_year=cycle_year, editor=editor)

    # ---------- Change log ----------
    def list_change_log(
        self,
        *,
        cycle_year: int,
        external_id: str | None = None,
        limit: int = 100,
    ) -> list[dict[str, object]]:
        return [
            {
                "description": row.description,
                "user_name": row.user_name,
                "task_external_id": row.task_external_id,
                "cycle_year": row.cycle_year,
                "created_at": row.created_at.isoformat(),
            }
            for row in self.repo.list_changes(cycle_year, task_external_id=external_id, limit=limit)
        ]

    # ---------- Collaborators and regimes ----------
    def list_collaborators(self) -> list[dict[str, object]]:
        return [
            {"external_id": row.external_id, "name": row.name, "department": row.department}
            for row in self.repo.list_collaborators()
        ]

    def list_regimes(self) -> list[str]:
        return [row.name for row in self.repo.list_regimes()]

    def create_regime(self, *, name: str, created_by: str | None = None) -> str:
        normalized = name.strip()
        if not normalized:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Regime name must not be empty.",
            )
        if self.repo.get_regime_by_name(normalized) is not None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Tax regime already exists.")

        self.repo.add_regime(TaxRegimeRecord(name=normalized, created_by=created_by, created_at=datetime.utcnow()))
        self.db.commit()
        log.info("tax_regime_created", name=normalized, created_by=created_by)
        return normalized
