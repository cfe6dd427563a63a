"""Export endpoint for report datasets."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from hyr_admin.db.dependencies import get_db_session
from hyr_admin.services.report_service import ReportService

router = APIRouter(prefix="/exports", tags=["exports"])


@router.get("/{report_key}")
def export_report(
    report_key: str,
    format: str = Query(default="xlsx"),
    year: int | None = Query(default=None, ge=2000, le=2100),
    period_id: UUID | None = Query(default=None),
    db: Session = Depends(get_db_session),
) -> Response:
    exported = ReportService(db).export_report(
        report_key=report_key,
        format_name=format,
        year=year,
        period_id=period_id,
    )
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
