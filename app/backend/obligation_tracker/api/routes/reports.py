"""Reporting endpoints for obligation progress analytics."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from obligation_tracker.db.dependencies import get_db_session
from obligation_tracker.services.obligation_service import ObligationReportingService
from obligation_tracker.services.report_filters import FilterContext, FilterSpec, StatusFilter

router = APIRouter(prefix="/reports", tags=["reports"])


def _service(db: Session) -> ObligationReportingService:
    return ObligationReportingService(db)


def filter_spec_params(
    context: FilterContext = Query(default=FilterContext.ALL),
    status: StatusFilter = Query(default=StatusFilter.ALL),
    regime: str = Query(default=""),
    responsible: str = Query(default=""),
) -> FilterSpec:
    return FilterSpec(context=context, status=status, regime=regime, responsible=responsible)


@router.get("/{cycle_year}/stats")
def get_report_stats(
    cycle_year: int,
    spec: FilterSpec = Depends(filter_spec_params),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _service(db)
    return service.report_stats(cycle_year=cycle_year, spec=spec)
