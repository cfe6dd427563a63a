"""Employee records."""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hyr_admin.db.dependencies import get_db_session
from hyr_admin.models.entities import PersonnelStatus, SalaryType
from hyr_admin.services.personnel_service import PersonnelCreateData, PersonnelService, PersonnelUpdateData

router = APIRouter(prefix="/personnel", tags=["personnel"])


class PersonnelCreatePayload(BaseModel):
    document_type: str = Field(default="CC", min_length=1, max_length=8)
    document_number: str = Field(min_length=1, max_length=32)
    name: str = Field(min_length=1, max_length=255)
    position: str = Field(min_length=1, max_length=128)
    department: str = Field(min_length=1, max_length=128)
    hire_date: date
    status: PersonnelStatus = PersonnelStatus.ACTIVE
    salary_type: SalaryType = SalaryType.MONTHLY
    monthly_salary: Decimal | None = Field(default=None, gt=0)
    hourly_rate: Decimal | None = Field(default=None, gt=0)
    daily_rate: Decimal | None = Field(default=None, gt=0)
    expected_arrival_time: time | None = None
    arl_risk_class: str | None = Field(default=None, max_length=3)
    transport_allowance_eligible: bool = True
    teleworking: bool = False
    fsp_exempt: bool = False
    phone: str | None = Field(default=None, max_length=64)
    email: str | None = Field(default=None, max_length=320)
    address: str | None = Field(default=None, max_length=500)
    eps: str | None = Field(default=None, max_length=128)
    pension_fund: str | None = Field(default=None, max_length=128)
    compensation_fund: str | None = Field(default=None, max_length=128)
    bank_name: str | None = Field(default=None, max_length=128)
    bank_account: str | None = Field(default=None, max_length=64)


class PersonnelUpdatePayload(BaseModel):
    document_type: str | None = Field(default=None, min_length=1, max_length=8)
    document_number: str | None = Field(default=None, min_length=1, max_length=32)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    position: str | None = Field(default=None, min_length=1, max_length=128)
    department: str | None = Field(default=None, min_length=1, max_length=128)
    hire_date: date | None = None
    termination_date: date | None = None
    status: PersonnelStatus | None = None
    salary_type: SalaryType | None = None
    monthly_salary: Decimal | None = Field(default=None, gt=0)
    hourly_rate: Decimal | None = Field(default=None, gt=0)
    daily_rate: Decimal | None = Field(default=None, gt=0)
    expected_arrival_time: time | None = None
    arl_risk_class: str | None = Field(default=None, max_length=3)
    transport_allowance_eligible: bool | None = None
    teleworking: bool | None = None
    fsp_exempt: bool | None = None
    phone: str | None = Field(default=None, max_length=64)
    email: str | None = Field(default=None, max_length=320)
    address: str | None = Field(default=None, max_length=500)
    eps: str | None = Field(default=None, max_length=128)
    pension_fund: str | None = Field(default=None, max_length=128)
    compensation_fund: str | None = Field(default=None, max_length=128)
    bank_name: str | None = Field(default=None, max_length=128)
    bank_account: str | None = Field(default=None, max_length=64)


def _personnel_service(db: Session) -> PersonnelService:
    return PersonnelService(db)


@router.get("")
def list_personnel(
    status_filter: PersonnelStatus | None = Query(default=None, alias="status"),
    department: str | None = Query(default=None, max_length=128),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    service = _personnel_service(db)
    items = service.list_personnel(status_filter=status_filter, department=department)
    return {"items": [service.serialize_personnel(person) for person in items]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_personnel(payload: PersonnelCreatePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _personnel_service(db)
    person = service.create_personnel(PersonnelCreateData(**payload.model_dump()))
    return service.serialize_personnel(person)


@router.get("/{personnel_id}")
def get_personnel(personnel_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _personnel_service(db)
    return service.serialize_personnel(service.get_personnel(personnel_id))


@router.patch("/{personnel_id}")
def update_personnel(
    personnel_id: UUID,
    payload: PersonnelUpdatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _personnel_service(db)
    person = service.update_personnel(personnel_id, PersonnelUpdateData(**payload.model_dump()))
    return service.serialize_personnel(person)


@router.delete("/{personnel_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_personnel(personnel_id: UUID, db: Session = Depends(get_db_session)) -> Response:
    _personnel_service(db).delete_personnel(personnel_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
