"""Collaborator roster and tax regime catalog endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from obligation_tracker.db.dependencies import get_db_session
from obligation_tracker.services.obligation_service import ObligationReportingService

router = APIRouter(tags=["catalog"])


class TaxRegimeCreatePayload(BaseModel):
    name: str = Field(min_length=1, max_length=128)


def _service(db: Session) -> ObligationReportingService:
    return ObligationReportingService(db)


@router.get("/collaborators")
def list_collaborators(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    return {"items": _service(db).list_collaborators()}


@router.get("/tax-regimes")
def list_tax_regimes(db: Session = Depends(get_db_session)) -> dict[str, list[str]]:
    return {"items": _service(db).list_regimes()}


@router.post("/tax-regimes", status_code=status.HTTP_201_CREATED)
def create_tax_regime(
    payload: TaxRegimeCreatePayload,
    editor: str | None = Header(default=None, alias="X-Editor-Name"),
    db: Session = Depends(get_db_session),
) -> dict[str, str]:
    name = _service(db).create_regime(name=payload.name, created_by=editor)
    return {"name": name}
