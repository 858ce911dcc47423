"""Change log listing endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from obligation_tracker.db.dependencies import get_db_session
from obligation_tracker.services.obligation_service import ObligationReportingService

router = APIRouter(prefix="/change-log", tags=["change-log"])


@router.get("/{cycle_year}")
def list_change_log(
    cycle_year: int,
    external_id: str | None = Query(default=None, max_length=64),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    """Newest entries first."""

    service = ObligationReportingService(db)
    return {"items": service.list_change_log(cycle_year=cycle_year, external_id=external_id, limit=limit)}
