"""Export endpoint for filtered obligation reports."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from obligation_tracker.api.routes.reports import filter_spec_params
from obligation_tracker.db.dependencies import get_db_session
from obligation_tracker.services.obligation_service import ObligationReportingService
from obligation_tracker.services.report_export import PageOrientation, ReportConfig
from obligation_tracker.services.report_filters import FilterSpec

router = APIRouter(prefix="/exports", tags=["exports"])


def _service(db: Session) -> ObligationReportingService:
    return ObligationReportingService(db)


@router.get("/{cycle_year}/report")
def export_report(
    cycle_year: int,
    format: str = Query(default="xlsx"),
    title: str = Query(default="Relatório de Obrigações", min_length=1, max_length=120),
    subtitle: str = Query(default="", max_length=200),
    include_charts: bool = Query(default=False),
    include_table: bool = Query(default=True),
    orientation: PageOrientation = Query(default=PageOrientation.LANDSCAPE),
    spec: FilterSpec = Depends(filter_spec_params),
    db: Session = Depends(get_db_session),
) -> Response:
    service = _service(db)
    exported = service.export_report(
        cycle_year=cycle_year,
        spec=spec,
        config=ReportConfig(
            title=title,
            subtitle=subtitle,
            include_charts=include_charts,
            include_table=include_table,
            orientation=orientation,
        ),
        format_name=format,
    )
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
