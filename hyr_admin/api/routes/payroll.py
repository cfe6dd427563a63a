"""Payroll periods, processing and previews."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hyr_admin.db.dependencies import get_db_session
from hyr_admin.models.entities import PayrollPeriodStatus, SalaryType
from hyr_admin.services.payroll_service import PayrollPreviewData, PayrollService

router = APIRouter(prefix="/payroll", tags=["payroll"])


class PeriodCreatePayload(BaseModel):
    year: int = Field(ge=2000, le=2100)
    month: int = Field(ge=1, le=12)


class PayrollPreviewPayload(BaseModel):
    year: int | None = Field(default=None, ge=2000, le=2100)
    personnel_id: UUID | None = None
    name: str = Field(default="Preview", min_length=1, max_length=255)
    salary_type: SalaryType = SalaryType.MONTHLY
    monthly_salary: Decimal | None = Field(default=None, gt=0)
    hourly_rate: Decimal | None = Field(default=None, gt=0)
    department: str = Field(default="general", min_length=1, max_length=128)
    arl_risk_class: str | None = Field(default=None, max_length=3)
    transport_allowance_eligible: bool = True
    teleworking: bool = False
    fsp_exempt: bool = False
    regular_hours: Decimal = Field(default=Decimal("192"), ge=0)
    overtime_day_hours: Decimal = Field(default=Decimal("0"), ge=0)
    overtime_night_hours: Decimal = Field(default=Decimal("0"), ge=0)
    overtime_holiday_day_hours: Decimal = Field(default=Decimal("0"), ge=0)
    overtime_holiday_night_hours: Decimal = Field(default=Decimal("0"), ge=0)
    night_hours: Decimal = Field(default=Decimal("0"), ge=0)
    days_worked: int = Field(default=30, ge=0, le=31)


def _payroll_service(db: Session) -> PayrollService:
    return PayrollService(db)


@router.get("/periods")
def list_periods(
    year: int | None = Query(default=None, ge=2000, le=2100),
    status_filter: PayrollPeriodStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    service = _payroll_service(db)
    items = service.list_periods(year=year, status_filter=status_filter)
    return {"items": [service.serialize_period(period) for period in items]}


@router.post("/periods", status_code=status.HTTP_201_CREATED)
def create_period(payload: PeriodCreatePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _payroll_service(db)
    period = service.create_period(year=payload.year, month=payload.month)
    return service.serialize_period(period)


@router.get("/periods/{period_id}")
def get_period(period_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _payroll_service(db)
    return service.serialize_period(service.get_period(period_id))


@router.delete("/periods/{period_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_period(period_id: UUID, db: Session = Depends(get_db_session)) -> Response:
    _payroll_service(db).delete_period(period_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/periods/{period_id}/readiness")
def period_readiness(period_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    return _payroll_service(db).readiness(period_id)


@router.post("/periods/{period_id}/process")
def process_period(period_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _payroll_service(db)
    period = service.process_period(period_id)
    return service.serialize_period(period)


@router.get("/periods/{period_id}/details")
def list_details(period_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _payroll_service(db)
    return {"items": [service.serialize_detail(detail, person) for detail, person in service.list_details(period_id)]}


@router.get("/periods/{period_id}/details/{detail_id}/payslip")
def download_payslip(
    period_id: UUID,
    detail_id: UUID,
    format: str = Query(default="xlsx"),
    db: Session = Depends(get_db_session),
) -> Response:
    exported = _payroll_service(db).payslip(period_id, detail_id, format_name=format)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )


@router.get("/periods/{period_id}/summary")
def period_summary(period_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    return _payroll_service(db).period_summary(period_id)


@router.post("/preview")
def preview_payroll(payload: PayrollPreviewPayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    data = payload.model_dump()
    data["salary_type"] = payload.salary_type.value
    return _payroll_service(db).preview(PayrollPreviewData(**data))


@router.get("/config/{year}")
def payroll_config(year: int, db: Session = Depends(get_db_session)) -> dict[str, object]:
    return _payroll_service(db).config_payload(year)
