"""Dashboard, cash flow, management reports and audit trail endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hyr_admin.db.dependencies import get_db_session
from hyr_admin.repositories.office_repository import OfficeRepository
from hyr_admin.services.audit_service import serialize_audit_event
from hyr_admin.services.report_service import ReportService

router = APIRouter(tags=["reports"])


def _service(db: Session) -> ReportService:
    return ReportService(db)


@router.get("/reports/dashboard")
def dashboard(db: Session = Depends(get_db_session)) -> dict[str, object]:
    return _service(db).dashboard()


@router.get("/reports/cashflow")
def cashflow(
    year: int = Query(ge=2000, le=2100),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return _service(db).cashflow(year=year)


@router.get("/reports/project-profitability")
def project_profitability(db: Session = Depends(get_db_session)) -> dict[str, object]:
    return _service(db).project_profitability()


@router.get("/reports/department-costs")
def department_costs(
    year: int = Query(ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return _service(db).department_costs(year=year, month=month)


@router.get("/reports/payroll-compliance")
def payroll_compliance(
    year: int = Query(ge=2000, le=2100),
    month: int = Query(ge=1, le=12),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return _service(db).payroll_compliance(year=year, month=month)


@router.get("/audit-events")
def list_audit_events(
    entity: str | None = Query(default=None, max_length=64),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    events = OfficeRepository(db).list_audit_events(entity_name=entity, limit=limit)
    return {"items": [serialize_audit_event(event) for event in events]}
