"""Report API routes."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from yardops.api.dependencies import require_admin
from yardops.core.database import get_db
from yardops.models.user import User
from yardops.schemas.report import ExportFormat, ReportData, ReportFilter
from yardops.services import report as report_service

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=ReportData)
def get_report(
    filters: ReportFilter = Depends(),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> ReportData:
    """Generate report data for the given filters."""
    return report_service.generate_report(db, filters)


@router.get("/export")
def export_report(
    filters: ReportFilter = Depends(),
    export_format: ExportFormat = Query(ExportFormat.CSV, alias="format"),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Response:
    """Download the report as CSV or as a plain-text document."""
    report = report_service.generate_report(db, filters)
    content, media_type, filename = report_service.export_report(report, export_format)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
