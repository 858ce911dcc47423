"""Obligation task listing and maintenance endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from obligation_tracker.db.dependencies import get_db_session
from obligation_tracker.domain.status import ObligationSlot
from obligation_tracker.services.obligation_service import (
    DEFAULT_EDITOR,
    ObligationReportingService,
    SlotUpdateData,
    TaskCreateData,
    TaskUpdateData,
)
from obligation_tracker.services.report_filters import TaskSortOrder

router = APIRouter(prefix="/tasks", tags=["tasks"])


class TaskCreatePayload(BaseModel):
    external_id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=255)
    cnpj: str = Field(default="", max_length=32)
    regime: str = Field(default="", max_length=128)
    priority: str = Field(default="", max_length=16)
    due_date: str | None = Field(default=None, max_length=10)


class TaskBulkCreatePayload(BaseModel):
    items: list[TaskCreatePayload] = Field(min_length=1, max_length=1000)


class TaskUpdatePayload(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    cnpj: str | None = Field(default=None, max_length=32)
    regime: str | None = Field(default=None, max_length=128)
    priority: str | None = Field(default=None, max_length=16)
    due_date: str | None = Field(default=None, max_length=10)


class TaskActivePayload(BaseModel):
    active: bool


class SlotUpdatePayload(BaseModel):
    status: str | None = Field(default=None, min_length=1, max_length=64)
    responsible: str | None = Field(default=None, max_length=255)


def editor_name(x_editor_name: str = Header(default=DEFAULT_EDITOR, alias="X-Editor-Name", min_length=1)) -> str:
    """Name recorded in audit stamps and change log entries."""

    return x_editor_name.strip() or DEFAULT_EDITOR


def _service(db: Session) -> ObligationReportingService:
    return ObligationReportingService(db)


def _create_data(cycle_year: int, payload: TaskCreatePayload) -> TaskCreateData:
    return TaskCreateData(
        external_id=payload.external_id,
        cycle_year=cycle_year,
        name=payload.name,
        cnpj=payload.cnpj,
        regime=payload.regime,
        priority=payload.priority,
        due_date=payload.due_date,
    )


@router.get("/{cycle_year}")
def list_tasks(
    cycle_year: int,
    order: TaskSortOrder = TaskSortOrder.ID_ASC,
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    service = _service(db)
    items = service.list_tasks(cycle_year=cycle_year, order=order)
    return {"items": [service.serialize_task(task) for task in items]}


@router.post("/{cycle_year}", status_code=status.HTTP_201_CREATED)
def create_task(
    cycle_year: int,
    payload: TaskCreatePayload,
    editor: str = Depends(editor_name),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    task = service.create_task(data=_create_data(cycle_year, payload), editor=editor)
    return service.serialize_task(task)


@router.post("/{cycle_year}/bulk", status_code=status.HTTP_201_CREATED)
def bulk_create_tasks(
    cycle_year: int,
    payload: TaskBulkCreatePayload,
    editor: str = Depends(editor_name),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    service = _service(db)
    tasks = service.bulk_create_tasks(
        cycle_year=cycle_year,
        items=[_create_data(cycle_year, item) for item in payload.items],
        editor=editor,
    )
    return {"items": [service.serialize_task(task) for task in tasks]}


@router.get("/{cycle_year}/{external_id}")
def get_task(
    cycle_year: int,
    external_id: str,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    return service.serialize_task(service.get_task(external_id=external_id, cycle_year=cycle_year))


@router.patch("/{cycle_year}/{external_id}")
def update_task(
    cycle_year: int,
    external_id: str,
    payload: TaskUpdatePayload,
    editor: str = Depends(editor_name),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    task = service.update_task(
        external_id=external_id,
        cycle_year=cycle_year,
        data=TaskUpdateData(
            name=payload.name,
            cnpj=payload.cnpj,
            regime=payload.regime,
            priority=payload.priority,
            due_date=payload.due_date,
        ),
        editor=editor,
    )
    return service.serialize_task(task)


@router.patch("/{cycle_year}/{external_id}/active")
def set_task_active(
    cycle_year: int,
    external_id: str,
    payload: TaskActivePayload,
    editor: str = Depends(editor_name),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    task = service.set_task_active(
        external_id=external_id,
        cycle_year=cycle_year,
        active=payload.active,
        editor=editor,
    )
    return service.serialize_task(task)


@router.patch("/{cycle_year}/{external_id}/slots/{slot}")
def update_task_slot(
    cycle_year: int,
    external_id: str,
    slot: ObligationSlot,
    payload: SlotUpdatePayload,
    editor: str = Depends(editor_name),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    task = service.update_slot(
        external_id=external_id,
        cycle_year=cycle_year,
        slot=slot,
        data=SlotUpdateData(status=payload.status, responsible=payload.responsible),
        editor=editor,
    )
    return service.serialize_task(task)


@router.delete("/{cycle_year}/{external_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    cycle_year: int,
    external_id: str,
    editor: str = Depends(editor_name),
    db: Session = Depends(get_db_session),
) -> Response:
    service = _service(db)
    service.delete_task(external_id=external_id, cycle_year=cycle_year, editor=editor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
